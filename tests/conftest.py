"""공용 fixture"""

import pytest

from config import Settings


@pytest.fixture
def settings():
    return Settings(
        scrape_api_endpoint="https://scrape.example/v1/scrape",
        scrape_api_key="scrape-key",
        translate_api_endpoint="http://localhost:7009/translate",
        translate_api_key="translate-key",
    )


@pytest.fixture
def chub_node():
    def make(full_path="alice/neko", **overrides):
        node = {
            "fullPath": full_path,
            "name": full_path.split("/")[-1].title(),
            "tagline": f"Tagline of {full_path}",
            "description": "",
            "topics": ["romance", "comedy"],
            "starCount": 12,
            "rating": 4.5,
            "ratingCount": 8,
            "nTokens": 1500,
            "forksCount": 2,
            "nChats": 30,
            "nMessages": 400,
            "createdAt": "2024-01-01T00:00:00Z",
            "lastActivityAt": "2024-02-01T00:00:00Z",
            "avatar_url": f"https://avatars.charhub.io/avatars/{full_path}/avatar.webp",
            "verified": True,
        }
        node.update(overrides)
        return node

    return make


class FakeGateway:
    """번역 호출 기록용 게이트웨이"""

    def __init__(self, mapping=None, enabled=True):
        self.mapping = mapping or {}
        self.enabled = enabled
        self.batch_calls = []
        self.text_calls = []

    async def translate_batch(self, texts, target):
        texts = list(texts)
        self.batch_calls.append((texts, target))
        return {t: self.mapping.get(t, t) for t in texts}

    async def translate_text(self, text, target):
        self.text_calls.append((text, target))
        return self.mapping.get(text, text)


@pytest.fixture
def fake_gateway():
    return FakeGateway
