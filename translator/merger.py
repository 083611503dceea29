"""결과 페이지 단위 번역 병합

페이지 전체에서 번역할 문자열(이름, 설명, 태그)을 모아 중복을 제거하고
번역 API를 한 번만 호출한 뒤, 각 레코드에 번역/원문 쌍으로 되돌려 넣는다.
태그 매칭은 항상 원문(original_value) 기준.
"""

import logging
from typing import Optional

from catalog.models import CharacterRecord, Tag, tag_value

from .gateway import TranslationGateway, TranslationMap
from .script import ScriptDetector, detector_for

logger = logging.getLogger(__name__)


class TranslationMerger:
    def __init__(
        self,
        gateway: TranslationGateway,
        target: str = "zh-CN",
        detector: Optional[ScriptDetector] = None,
    ):
        self.gateway = gateway
        self.target = target
        self.detector = detector or detector_for(target)

    def collect(self, records: list[CharacterRecord], detector: ScriptDetector) -> list[str]:
        """번역 대상 문자열 수집 (배치 전체에서 중복 제거, 첫 등장 순서 유지)"""
        texts: dict[str, None] = {}

        def add(text: str):
            if text and not detector(text):
                texts.setdefault(text, None)

        for record in records:
            add(record.original_name or record.name)
            add(record.original_description or record.description)
            for value in dict.fromkeys(tag_value(t) for t in record.tags):
                add(value)
        return list(texts)

    def apply(self, record: CharacterRecord, translations: TranslationMap) -> CharacterRecord:
        """번역 결과를 레코드에 반영 (원문은 original_* 에 보존)"""
        original_name = record.original_name or record.name
        original_description = record.original_description or record.description
        original_tags = list(dict.fromkeys(tag_value(t) for t in record.tags))

        name = translations.get(original_name, original_name)
        description = translations.get(original_description, original_description)

        tags = []
        for value in original_tags:
            translated = translations.get(value, value)
            tags.append(Tag(original_value=value, display_text=translated, was_translated=translated != value))

        return record.model_copy(
            update={
                "name": name,
                "description": description,
                "tags": tags,
                "original_name": original_name,
                "original_description": original_description,
                "original_tags": original_tags,
                "name_translated": name != original_name,
                "description_translated": description != original_description,
            }
        )

    async def merge_batch(
        self,
        records: list[CharacterRecord],
        detector: Optional[ScriptDetector] = None,
    ) -> list[CharacterRecord]:
        """레코드 목록 전체에 대해 번역 1회 호출 후 병합"""
        texts = self.collect(records, detector or self.detector)

        translations: TranslationMap = {}
        if texts and self.gateway.enabled:
            logger.info(f"Translating {len(texts)} unique texts...")
            translations = await self.gateway.translate_batch(texts, self.target)

        return [self.apply(record, translations) for record in records]
