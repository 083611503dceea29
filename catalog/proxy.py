"""스크랩 프록시 클라이언트 (직접 접근이 막힌 제공자용)"""

import asyncio
import json
import logging
from typing import Any, Optional

import aiohttp
from bs4 import BeautifulSoup

logger = logging.getLogger(__name__)

# 프록시 응답 envelope에서 페이지 본문을 찾을 키 (우선순위 순)
BODY_KEYS = ("rawHtml", "html", "content", "body")


class ScrapeProxyError(Exception):
    """프록시 호출/envelope/페이로드 파싱 실패"""


def find_page_body(envelope: Any) -> str:
    """프록시 envelope에서 렌더링된 페이지 본문 추출

    {"success": true, "data": {"rawHtml": "..."}} 또는 {"html": "..."} 형태
    """
    if not isinstance(envelope, dict):
        raise ScrapeProxyError(f"envelope is not an object: {type(envelope).__name__}")
    if envelope.get("success") is False:
        raise ScrapeProxyError(f"proxy reported failure: {envelope.get('error', '')}")

    containers = [envelope]
    if isinstance(envelope.get("data"), dict):
        containers.insert(0, envelope["data"])

    for container in containers:
        for key in BODY_KEYS:
            body = container.get(key)
            if isinstance(body, str) and body:
                return body
    raise ScrapeProxyError("envelope has no page body")


def extract_payload(body: str) -> Any:
    """페이지 본문의 <pre> 텍스트를 JSON으로 파싱"""
    soup = BeautifulSoup(body, "html.parser")
    pre = soup.find("pre")
    if pre is None:
        raise ScrapeProxyError("page body has no <pre> payload")
    text = pre.get_text().strip()
    if not text:
        raise ScrapeProxyError("<pre> payload is empty")
    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        raise ScrapeProxyError(f"invalid JSON payload: {e}") from e


class ScrapeProxyClient:
    """범용 스크랩/크롤 서비스 클라이언트 (Bearer 토큰)"""

    def __init__(self, endpoint: str, api_key: str, timeout: int = 30):
        self.endpoint = endpoint
        self.api_key = api_key
        self.timeout = aiohttp.ClientTimeout(total=timeout)
        self._session: Optional[aiohttp.ClientSession] = None

    async def __aenter__(self):
        self._session = aiohttp.ClientSession(timeout=self.timeout)
        return self

    async def __aexit__(self, *args):
        if self._session:
            await self._session.close()

    def _headers(self) -> dict:
        return {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self.api_key}",
        }

    async def fetch_envelope(self, url: str) -> Any:
        """대상 URL을 프록시에 제출하고 envelope(JSON) 반환"""
        if self._session is None:
            raise RuntimeError("Session not initialized. Use async with.")
        try:
            async with self._session.post(
                self.endpoint,
                json={"url": url, "formats": ["rawHtml"]},
                headers=self._headers(),
            ) as resp:
                if resp.status != 200:
                    raise ScrapeProxyError(f"proxy returned {resp.status}")
                return await resp.json(content_type=None)
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise ScrapeProxyError(f"proxy request failed: {e!r}") from e
        except ValueError as e:
            raise ScrapeProxyError(f"malformed envelope: {e}") from e

    async def fetch_json(self, url: str) -> Any:
        """대상 페이지에 포함된 JSON 페이로드 반환"""
        envelope = await self.fetch_envelope(url)
        return extract_payload(find_page_body(envelope))
