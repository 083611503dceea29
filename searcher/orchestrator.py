"""검색 파이프라인 (제공자 조회 -> 정규화 -> 번역 병합)"""

import logging
from typing import Optional

from catalog.models import CharacterRecord, QuerySpec
from catalog.normalizer import RecordNormalizer
from catalog.providers import ProviderAdapter, get_provider
from config import Settings
from translator import TranslationGateway, TranslationMerger

logger = logging.getLogger(__name__)


class SearchOrchestrator:
    def __init__(
        self,
        settings: Settings,
        provider: Optional[ProviderAdapter] = None,
        gateway: Optional[TranslationGateway] = None,
        normalizer: Optional[RecordNormalizer] = None,
    ):
        self.settings = settings
        self.provider = provider or get_provider(settings.provider, settings)
        self.gateway = gateway or TranslationGateway.from_settings(settings)
        self.normalizer = normalizer or RecordNormalizer()
        self.merger = TranslationMerger(self.gateway, target=settings.translate_target)

    def set_translation(self, enabled: bool):
        self.settings.enable_translation = enabled
        self.gateway.enabled = enabled

    async def prepare_query(self, query: QuerySpec) -> QuerySpec:
        """검색어에 번역 대상 문자가 있으면 제공자 검색 언어로 번역"""
        if not (query.term and self.gateway.enabled and self.merger.detector(query.term)):
            return query
        logger.info("Detected target-language text in search term, translating...")
        term = await self.gateway.translate_text(query.term, self.provider.query_language)
        logger.info(f'Translated "{query.term}" to "{term}"')
        return query.model_copy(update={"term": term})

    async def search(self, query: QuerySpec) -> list[CharacterRecord]:
        """검색 실행. 결과가 없으면 빈 목록 (오류 아님)"""
        logger.info(f"Searching {self.provider.name} for characters: {query}")
        query = await self.prepare_query(query)

        items = await self.provider.fetch_raw(query)
        if not items:
            return []

        records = self.normalizer.normalize_all(self.provider.kind, items)
        return await self.merger.merge_batch(records)
