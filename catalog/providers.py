"""카탈로그 제공자 어댑터

모든 제공자는 fetch_raw 하나만 노출한다. 전송/파싱 오류는 예외 대신
빈 목록(Degraded)으로 바뀌며, 원인은 로그로 남긴다.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Callable, Optional
from urllib.parse import urlencode

from config import Settings

from .client import CHUB_SORT_KEYS, TAG_BUDGET, CardDownloadError, ChubClient
from .models import Degraded, Ok, Outcome, QuerySpec, RawItem
from .proxy import ScrapeProxyClient, ScrapeProxyError

logger = logging.getLogger(__name__)


class ProviderAdapter(ABC):
    """카탈로그 제공자 공통 인터페이스"""

    kind: str = "base"
    name: str = "Base Provider"
    query_language: str = "en"  # 검색어를 이해하는 언어
    sort_keys: tuple[str, ...] = ()
    default_sort: str = ""

    def __init__(self, settings: Settings):
        self.settings = settings

    def resolve_sort(self, sort: str) -> str:
        if sort in self.sort_keys:
            return sort
        configured = self.settings.sort_for(self.kind)
        return configured if configured in self.sort_keys else self.default_sort

    def resolve_nsfw(self, query: QuerySpec) -> bool:
        return self.settings.nsfw if query.nsfw is None else query.nsfw

    @abstractmethod
    async def fetch_raw_outcome(self, query: QuerySpec) -> Outcome[list[RawItem]]:
        """제공자 원본 항목 조회 (예외를 던지지 않음)"""

    async def fetch_raw(self, query: QuerySpec) -> list[RawItem]:
        outcome = await self.fetch_raw_outcome(query)
        return outcome.value

    def __repr__(self):
        return f"<{self.__class__.__name__}(kind='{self.kind}')>"


PROVIDERS: dict[str, type[ProviderAdapter]] = {}


def register_provider(cls: type[ProviderAdapter]) -> type[ProviderAdapter]:
    PROVIDERS[cls.kind] = cls
    return cls


def get_provider(kind: str, settings: Settings) -> ProviderAdapter:
    """설정된 제공자 어댑터 생성"""
    try:
        return PROVIDERS[kind](settings)
    except KeyError:
        raise ValueError(f"Unknown provider: {kind!r} (available: {', '.join(PROVIDERS)})") from None


@register_provider
class PrimaryCatalog(ProviderAdapter):
    """Chub 검색 API + 항목별 카드 다운로드"""

    kind = "chub"
    name = "Chub"
    sort_keys = CHUB_SORT_KEYS
    default_sort = "default"

    def __init__(self, settings: Settings, client_factory: Optional[Callable[[], ChubClient]] = None):
        super().__init__(settings)
        self.client_factory = client_factory or (lambda: ChubClient(timeout=settings.timeout))

    async def _resolve_card(self, client: ChubClient, full_path: str) -> Optional[bytes]:
        try:
            return await client.download_card(full_path)
        except CardDownloadError as e:
            logger.warning(f"{e} - keeping item without card")
            return None

    async def fetch_raw_outcome(self, query: QuerySpec) -> Outcome[list[RawItem]]:
        async with self.client_factory() as client:
            url = client.build_search_url(
                term=query.term,
                include_tags=query.include_tags,
                exclude_tags=query.exclude_tags,
                nsfw=self.resolve_nsfw(query),
                sort=self.resolve_sort(query.sort),
                page=query.page,
                first=self.settings.find_count,
            )
            logger.debug(f"Chub search: {url}")
            nodes = await client.search(url)
            if nodes is None:
                return Degraded([], reason="search request failed")
            nodes = [n for n in nodes if isinstance(n, dict) and n.get("fullPath")]
            if not nodes:
                return Ok([])

            # 카드 다운로드는 동시에, 결과 순서는 node 순서 유지
            cards = await asyncio.gather(
                *(self._resolve_card(client, node["fullPath"]) for node in nodes)
            )

        logger.info(f"Chub search for '{query.term}': {len(nodes)} results")
        return Ok([RawItem(provider=self.kind, fields=node, card=card) for node, card in zip(nodes, cards)])


def fit_tags(tags, budget: int = TAG_BUDGET) -> list[str]:
    """쉼표로 이었을 때 budget 이내에 들어가는 태그만 앞에서부터 선택"""
    selected: list[str] = []
    length = 0
    for tag in tags:
        added = len(tag) + (1 if selected else 0)
        if length + added > budget:
            break
        selected.append(tag)
        length += added
    return selected


def raw_tag_values(fields: dict) -> list[str]:
    """JanitorAI 원본 항목의 태그 문자열 (구조화 태그 + 커스텀 태그)"""
    values = []
    for tag in fields.get("tags") or []:
        if isinstance(tag, dict):
            value = tag.get("label") or tag.get("name") or tag.get("slug") or ""
        else:
            value = str(tag)
        values.append(value)
    values.extend(str(t) for t in fields.get("custom_tags") or [])
    return [v.strip() for v in values if v and v.strip()]


@register_provider
class SecondaryCatalog(ProviderAdapter):
    """JanitorAI (공개 API가 막혀 스크랩 프록시 경유)"""

    kind = "janitor"
    name = "JanitorAI"
    sort_keys = ("popular", "latest", "trending", "relevant")
    default_sort = "popular"

    TARGET_BASE = "https://janitorai.com/hampter/characters"

    def __init__(self, settings: Settings, proxy_factory: Optional[Callable[[], ScrapeProxyClient]] = None):
        super().__init__(settings)
        self.proxy_factory = proxy_factory or (
            lambda: ScrapeProxyClient(
                settings.scrape_api_endpoint,
                settings.scrape_api_key,
                timeout=settings.timeout,
            )
        )

    def build_target_url(self, query: QuerySpec) -> str:
        params: list[tuple[str, str]] = [
            ("page", str(query.page)),
            ("mode", "all" if self.resolve_nsfw(query) else "sfw"),
            ("sort", self.resolve_sort(query.sort)),
        ]
        if query.term:
            params.append(("search", query.term))
        for tag in fit_tags(query.include_tags):
            params.append(("custom_tags[]", tag))
        return f"{self.TARGET_BASE}?{urlencode(params)}"

    def _excluded(self, fields: dict, exclude: set[str]) -> bool:
        return any(v.casefold() in exclude for v in raw_tag_values(fields))

    async def fetch_raw_outcome(self, query: QuerySpec) -> Outcome[list[RawItem]]:
        url = self.build_target_url(query)
        try:
            async with self.proxy_factory() as proxy:
                payload = await proxy.fetch_json(url)
        except ScrapeProxyError as e:
            logger.error(f"JanitorAI search failed: {e}")
            return Degraded([], reason=str(e))

        items = payload.get("data") if isinstance(payload, dict) else payload
        if not isinstance(items, list):
            logger.error("JanitorAI payload has no data list")
            return Degraded([], reason="payload has no data list")

        exclude = {t.casefold() for t in query.exclude_tags}
        entries = [item for item in items if isinstance(item, dict)]
        if len(entries) < len(items):
            logger.debug(f"Skipped {len(items) - len(entries)} non-object JanitorAI entries")
        raw = [
            RawItem(provider=self.kind, fields=item)
            for item in entries
            if not (exclude and self._excluded(item, exclude))
        ]
        logger.info(f"JanitorAI search for '{query.term}': {len(raw)} results")
        return Ok(raw)
