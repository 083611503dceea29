"""제공자별 원본 필드 -> CharacterRecord 매핑"""

import logging
from typing import Callable

from .models import (
    DEFAULT_DESCRIPTION,
    CharacterRecord,
    ChubNode,
    JanitorItem,
    RawItem,
    to_count,
)
from .utils import author_from_path, dedupe_tags, strip_markup

logger = logging.getLogger(__name__)

Mapper = Callable[[RawItem], CharacterRecord]

_MAPPERS: dict[str, Mapper] = {}


def register_mapper(kind: str):
    def decorator(func: Mapper) -> Mapper:
        _MAPPERS[kind] = func
        return func

    return decorator


def _finish(record: CharacterRecord) -> CharacterRecord:
    """번역 전 상태: 원문 필드 = 표시 필드"""
    record.original_name = record.name
    record.original_description = record.description
    record.original_tags = [t for t in record.tags if isinstance(t, str)]
    return record


@register_mapper("chub")
def from_chub(item: RawItem) -> CharacterRecord:
    node = ChubNode.model_validate(item.fields)
    return _finish(
        CharacterRecord(
            provider=item.provider,
            path=node.fullPath,
            name=node.name or "",
            description=node.tagline or node.description or DEFAULT_DESCRIPTION,
            tags=dedupe_tags(node.topics or []),
            author=author_from_path(node.fullPath),
            rating=node.rating or 0,
            rating_count=node.ratingCount or 0,
            star_count=node.starCount or 0,
            fork_count=node.forksCount or 0,
            token_count=node.nTokens or 0,
            chat_count=node.nChats or 0,
            message_count=node.nMessages or 0,
            created_at=node.createdAt,
            last_activity_at=node.lastActivityAt,
            avatar_url=node.avatar_url or "",
            max_res_url=node.max_res_url or "",
            card=item.card,
            verified=bool(node.verified),
            recommended=bool(node.recommended),
            nsfw_image=bool(node.nsfw_image),
            has_gallery=bool(node.hasGallery),
        )
    )


JANITOR_AVATAR_BASE = "https://ella.janitorai.com/bot-avatars"


@register_mapper("janitor")
def from_janitor(item: RawItem) -> CharacterRecord:
    data = JanitorItem.model_validate(item.fields)
    tags = [t.value for t in data.tags or []] + list(data.custom_tags or [])
    token_counts = data.token_counts or {}
    return _finish(
        CharacterRecord(
            provider=item.provider,
            path=data.id,
            name=data.name or "",
            description=strip_markup(data.description or "") or DEFAULT_DESCRIPTION,
            tags=dedupe_tags(tags),
            author=data.creator_name or "",
            token_count=to_count(token_counts.get("total_tokens")),
            chat_count=data.total_chat or 0,
            message_count=data.total_message or 0,
            has_star_count=False,
            created_at=data.created_at,
            last_activity_at=data.updated_at,
            avatar_url=f"{JANITOR_AVATAR_BASE}/{data.avatar}" if data.avatar else "",
            card=item.card,
            verified=bool(data.creator_verified),
            nsfw_image=bool(data.is_nsfw),
        )
    )


class RecordNormalizer:
    """RawItem을 정규화된 레코드로 변환 (번역 필드는 원문 그대로)"""

    def __init__(self, mappers: dict[str, Mapper] = None):
        self.mappers = dict(mappers or _MAPPERS)

    def normalize(self, kind: str, item: RawItem) -> CharacterRecord:
        try:
            mapper = self.mappers[kind]
        except KeyError:
            raise ValueError(f"No normalizer for provider: {kind!r}") from None
        return mapper(item)

    def normalize_all(self, kind: str, items: list[RawItem]) -> list[CharacterRecord]:
        """목록 전체 정규화 (잘못된 항목은 로그 후 건너뜀, 순서 유지)"""
        records = []
        for item in items:
            try:
                records.append(self.normalize(kind, item))
            except (ValueError, TypeError) as e:
                logger.error(f"Error normalizing {kind} item: {e}")
        return records
