import asyncio
import logging
from typing import Any, Optional
from urllib.parse import urlencode

import aiohttp

logger = logging.getLogger(__name__)

# Chub 검색 정렬 키 (빈 값/알 수 없는 값은 default)
CHUB_SORT_KEYS = (
    "download_count",
    "id",
    "rating",
    "default",
    "rating_count",
    "last_activity_at",
    "trending_downloads",
    "created_at",
    "name",
    "n_tokens",
    "random",
)

TAG_BUDGET = 100  # 태그 목록을 쉼표로 이은 문자열의 최대 길이

# 고정 필터 기본값
SEARCH_DEFAULTS = {
    "namespace": "*",
    "include_forks": "true",
    "nsfw_only": "false",
    "require_custom_prompt": "false",
    "require_example_dialogues": "false",
    "require_images": "false",
    "require_expressions": "false",
    "nsfl": "true",
    "asc": "false",
    "min_ai_rating": "0",
    "min_tokens": "50",
    "max_tokens": "100000",
    "chub": "true",
    "require_lore": "false",
    "exclude_mine": "true",
    "require_lore_embedded": "false",
    "require_lore_linked": "false",
    "min_tags": "2",
    "inclusive_or": "false",
    "recommended_verified": "false",
    "require_alternate_greetings": "false",
    "count": "false",
}


class CardDownloadError(Exception):
    """다운로드 API와 아바타 CDN 모두 실패"""

    def __init__(self, full_path: str, reason: str = ""):
        self.full_path = full_path
        super().__init__(f"Card download failed for {full_path}: {reason}")


def join_tags(tags) -> str:
    """태그를 쉼표로 잇고 TAG_BUDGET 글자로 자름"""
    return ",".join(t for t in tags if t)[:TAG_BUDGET]


class ChubClient:
    SEARCH_BASE = "https://gateway.chub.ai/search"
    DOWNLOAD_BASE = "https://api.chub.ai/api/characters/download"
    AVATAR_BASE = "https://avatars.charhub.io/avatars"

    def __init__(self, timeout: int = 30, max_concurrent: int = 10):
        self.timeout = aiohttp.ClientTimeout(total=timeout)
        self.semaphore = asyncio.Semaphore(max_concurrent)
        self._session: Optional[aiohttp.ClientSession] = None

    async def __aenter__(self):
        self._session = aiohttp.ClientSession(timeout=self.timeout)
        return self

    async def __aexit__(self, *args):
        if self._session:
            await self._session.close()

    @property
    def session(self) -> aiohttp.ClientSession:
        if self._session is None:
            raise RuntimeError("Session not initialized. Use async with.")
        return self._session

    def build_search_url(
        self,
        term: str,
        include_tags,
        exclude_tags,
        nsfw: bool,
        sort: str,
        page: int,
        first: int,
    ) -> str:
        """검색 URL 생성 (필터 전체를 쿼리 파라미터로 포함)"""
        params: dict[str, Any] = {"first": first, "page": page}
        params.update(SEARCH_DEFAULTS)
        if term:
            params["search"] = term
        params["nsfw"] = str(bool(nsfw)).lower()
        params["sort"] = sort if sort in CHUB_SORT_KEYS else "default"

        topics = join_tags(include_tags)
        if topics:
            params["topics"] = topics
        excluded = join_tags(exclude_tags)
        if excluded:
            params["excludetopics"] = excluded

        return f"{self.SEARCH_BASE}?{urlencode(params)}"

    async def _request(self, method: str, url: str, response_type: str = "json", **kwargs) -> Optional[Any]:
        """단일 요청 (재시도 없음). 실패 시 None"""
        try:
            async with self.session.request(method, url, **kwargs) as resp:
                if resp.status != 200:
                    logger.warning(f"{method} {url} -> {resp.status}")
                    return None
                if response_type == "json":
                    return await resp.json(content_type=None)
                return await resp.read()
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.warning(f"{method} {url} failed: {e!r}")
        except ValueError as e:
            logger.warning(f"{method} {url} returned invalid JSON: {e}")
        return None

    async def search(self, url: str) -> Optional[list[dict]]:
        """검색 요청 후 node 목록 반환 (요청 실패 시 None)

        응답은 {"data": {"nodes": [...]}} 또는 {"nodes": [...]} 두 형태 모두 허용
        """
        result = await self._request("GET", url)
        if not isinstance(result, dict):
            return None
        envelope = result.get("data") if isinstance(result.get("data"), dict) else result
        nodes = envelope.get("nodes")
        return nodes if isinstance(nodes, list) else []

    def avatar_url(self, full_path: str) -> str:
        return f"{self.AVATAR_BASE}/{full_path}/avatar.webp"

    async def download_card(self, full_path: str) -> bytes:
        """캐릭터 카드 다운로드 (실패 시 아바타 CDN으로 1회 폴백)

        두 번 모두 실패하면 CardDownloadError
        """
        async with self.semaphore:
            data = await self._request(
                "POST",
                self.DOWNLOAD_BASE,
                response_type="bytes",
                json={"fullPath": full_path, "format": "tavern", "version": "main"},
            )
            if data is not None:
                return data

            logger.info(f"Request failed for {full_path}, trying backup endpoint")
            data = await self._request("GET", self.avatar_url(full_path), response_type="bytes")
            if data is not None:
                return data

        raise CardDownloadError(full_path, "download endpoint and avatar CDN both failed")
