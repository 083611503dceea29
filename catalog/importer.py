"""호스트 앱 임포트 연동 (URL 임포트 / 카드 파일 업로드)"""

import asyncio
import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import aiohttp

logger = logging.getLogger(__name__)


class ImportFailed(Exception):
    """호스트가 임포트를 거부 (자동 재시도 없음)"""

    def __init__(self, message: str, page_url: str = ""):
        self.page_url = page_url
        super().__init__(message)


@dataclass
class ImportedFile:
    file_name: str
    content_type: str
    data: bytes

    def save(self, directory: Path) -> Path:
        directory.mkdir(parents=True, exist_ok=True)
        path = directory / self.file_name
        path.write_bytes(self.data)
        return path


def filename_from_disposition(header: Optional[str]) -> str:
    """Content-Disposition 헤더에서 파일명 추출"""
    if not header:
        return ""
    match = re.search(r'filename\*?=(?:UTF-8\'\')?"?([^";]+)"?', header)
    return match.group(1).strip() if match else ""


class HostImporter:
    IMPORT_ENDPOINTS = ("/api/content/import", "/import_custom")
    UPLOAD_ENDPOINT = "/api/characters/import"

    def __init__(self, base_url: str, headers: Optional[dict] = None, timeout: int = 30):
        self.base_url = base_url.rstrip("/")
        self.headers = headers or {}
        self.timeout = aiohttp.ClientTimeout(total=timeout)

    async def _post_import(self, session: aiohttp.ClientSession, endpoint: str, url: str) -> Optional[ImportedFile]:
        try:
            async with session.post(self.base_url + endpoint, json={"url": url}, headers=self.headers) as resp:
                if resp.status != 200:
                    logger.warning(f"Custom content import via {endpoint} failed: {resp.status}")
                    return None
                return ImportedFile(
                    file_name=filename_from_disposition(resp.headers.get("Content-Disposition")),
                    content_type=resp.headers.get("X-Custom-Content-Type", ""),
                    data=await resp.read(),
                )
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.warning(f"Custom content import via {endpoint} failed: {e!r}")
            return None

    async def import_url(self, url: str, page_url: str = "") -> ImportedFile:
        """호스트에 원격 URL(또는 제공자 경로) 임포트 요청

        /api/content/import 실패 시 /import_custom 으로 한 번 더 시도
        """
        url = url.strip()
        logger.debug(f"Custom content import started: {url}")
        async with aiohttp.ClientSession(timeout=self.timeout) as session:
            imported = None
            for endpoint in self.IMPORT_ENDPOINTS:
                imported = await self._post_import(session, endpoint, url)
                if imported is not None:
                    break

        if imported is None:
            raise ImportFailed("Custom content import failed", page_url=page_url)
        if imported.content_type != "character":
            raise ImportFailed(f"Unknown content type: {imported.content_type!r}", page_url=page_url)
        if not imported.file_name:
            imported.file_name = f"{url.replace('/', '_')}.png"
        return imported

    async def upload_card(self, data: bytes, file_name: str) -> str:
        """카드 파일 업로드 -> 호스트가 생성한 표시 이름"""
        file_type = Path(file_name).suffix.lstrip(".").lower() or "png"
        form = aiohttp.FormData()
        form.add_field("avatar", data, filename=file_name, content_type="application/octet-stream")
        form.add_field("file_type", file_type)

        async with aiohttp.ClientSession(timeout=self.timeout) as session:
            try:
                async with session.post(self.base_url + self.UPLOAD_ENDPOINT, data=form, headers=self.headers) as resp:
                    if resp.status != 200:
                        raise ImportFailed(f"Character upload failed: {resp.status}")
                    result = await resp.json(content_type=None)
            except (aiohttp.ClientError, asyncio.TimeoutError) as e:
                raise ImportFailed(f"Character upload failed: {e!r}") from e
            except ValueError as e:
                raise ImportFailed(f"Character upload returned invalid JSON: {e}") from e

        if not isinstance(result, dict) or result.get("error") or not result.get("file_name"):
            raise ImportFailed(f"Character upload rejected: {result!r}")
        logger.info(f"Imported character: {result['file_name']}")
        return result["file_name"]
