"""배치 번역 API 클라이언트

번역은 항상 best-effort: 실패하면 원문을 그대로 돌려준다 (예외 없음).
"""

import asyncio
import logging
from typing import Iterable

import aiohttp

from catalog.models import Degraded, Ok, Outcome

logger = logging.getLogger(__name__)

TranslationMap = dict[str, str]


def identity_map(texts: Iterable[str]) -> TranslationMap:
    return {text: text for text in texts}


class TranslationGateway:
    def __init__(
        self,
        endpoint: str,
        api_key: str,
        enabled: bool = True,
        timeout: int = 30,
    ):
        self.endpoint = endpoint
        self.api_key = api_key
        self.enabled = enabled
        self.timeout = aiohttp.ClientTimeout(total=timeout)

    @classmethod
    def from_settings(cls, settings) -> "TranslationGateway":
        return cls(
            endpoint=settings.translate_api_endpoint,
            api_key=settings.translate_api_key,
            enabled=settings.enable_translation,
            timeout=settings.timeout,
        )

    def _headers(self) -> dict:
        return {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self.api_key}",
        }

    async def translate_batch_outcome(self, texts: Iterable[str], target: str) -> Outcome[TranslationMap]:
        """문자열 목록을 한 번의 요청으로 번역

        반환 매핑은 입력 전체를 키로 가진다. 응답에서 빠졌거나 빈 항목은 원문 유지.
        """
        texts = list(dict.fromkeys(t for t in texts if t))
        if not texts:
            return Ok({})
        if not self.enabled:
            return Ok(identity_map(texts))

        try:
            async with aiohttp.ClientSession(timeout=self.timeout) as session:
                async with session.post(
                    self.endpoint,
                    json={"texts": texts, "target": target},
                    headers=self._headers(),
                ) as resp:
                    if resp.status != 200:
                        logger.warning(f"Batch translation API failed: {resp.status} {resp.reason}")
                        return Degraded(identity_map(texts), reason=f"HTTP {resp.status}")
                    data = await resp.json(content_type=None)
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.warning(f"Batch translation error: {e!r}")
            return Degraded(identity_map(texts), reason=repr(e))
        except ValueError as e:
            logger.warning(f"Batch translation returned invalid JSON: {e}")
            return Degraded(identity_map(texts), reason="invalid JSON")

        if not isinstance(data, dict) or not data.get("success"):
            logger.warning("Batch translation API reported failure")
            return Degraded(identity_map(texts), reason="success=false")
        translations = data.get("translations")
        if not isinstance(translations, list):
            logger.warning("Batch translation response has no translations list")
            return Degraded(identity_map(texts), reason="no translations")

        result: TranslationMap = {}
        for i, text in enumerate(texts):
            entry = translations[i] if i < len(translations) else None
            translated = entry.get("translated_text") if isinstance(entry, dict) else None
            result[text] = translated if isinstance(translated, str) and translated else text

        logger.info(f"Translated {len(texts)} unique texts")
        return Ok(result)

    async def translate_batch(self, texts: Iterable[str], target: str) -> TranslationMap:
        outcome = await self.translate_batch_outcome(texts, target)
        return outcome.value

    async def translate_text(self, text: str, target: str) -> str:
        """단일 문자열 번역 (실패 시 원문)"""
        if not text:
            return text
        mapping = await self.translate_batch([text], target)
        return mapping.get(text, text)
