"""확장 설정 (기본값 병합 + 환경변수 오버라이드)"""

import json
import logging
import os
from pathlib import Path
from typing import Optional, get_origin

from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)

DEFAULT_SETTINGS_PATH = Path("data") / "settings.json"

ENV_PREFIX = "CHUB_SEARCH_"


class Settings(BaseModel):
    """검색/번역/임포트 설정"""

    provider: str = "chub"  # chub | janitor
    find_count: int = Field(default=10, ge=1)  # 페이지당 결과 수
    nsfw: bool = False

    # 제공자별 기본 정렬
    sort: dict[str, str] = Field(
        default_factory=lambda: {"chub": "default", "janitor": "popular"}
    )

    # 번역 API
    enable_translation: bool = False
    translate_api_endpoint: str = "http://localhost:7009/translate"
    translate_api_key: str = "sk-*"
    translate_target: str = "zh-CN"

    # 스크랩 프록시 (번역 키와 별도)
    scrape_api_endpoint: str = "https://api.firecrawl.dev/v1/scrape"
    scrape_api_key: str = ""

    # 호스트 앱 (임포트 대상)
    host_base_url: str = "http://localhost:8000"

    debounce_seconds: float = 0.75
    timeout: int = 30

    def sort_for(self, provider: Optional[str] = None) -> str:
        return self.sort.get(provider or self.provider, "")


def _env_overrides() -> dict:
    """CHUB_SEARCH_* 환경변수를 설정 키로 변환"""
    overrides = {}
    for key, field in Settings.model_fields.items():
        value = os.getenv(ENV_PREFIX + key.upper())
        if value is None or get_origin(field.annotation) is dict:
            continue
        if field.annotation is bool:
            overrides[key] = value.strip().lower() in ("1", "true", "yes", "on")
        else:
            overrides[key] = value
    return overrides


def load_settings(path: Path = DEFAULT_SETTINGS_PATH, use_env: bool = True) -> Settings:
    """설정 파일 로드

    파일에 없는 키는 기본값으로 채우고, 환경변수가 있으면 덮어쓴다.
    """
    data: dict = {}
    if path.exists():
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)

    for key in Settings.model_fields:
        if key not in data:
            logger.debug(f"Setting default for: {key}")

    if use_env:
        data.update(_env_overrides())

    return Settings.model_validate(data)


def save_settings(settings: Settings, path: Path = DEFAULT_SETTINGS_PATH):
    """설정 파일 저장"""
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(settings.model_dump(), f, ensure_ascii=False, indent=2)
    logger.info(f"Settings saved: {path}")
