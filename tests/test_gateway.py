import pytest
from aioresponses import aioresponses

from catalog.models import Degraded, Ok
from translator.gateway import TranslationGateway

ENDPOINT = "http://localhost:7009/translate"


def _gateway(enabled=True):
    return TranslationGateway(ENDPOINT, "translate-key", enabled=enabled)


@pytest.mark.asyncio
async def test_disabled_returns_identity_without_request():
    with aioresponses() as m:
        outcome = await _gateway(enabled=False).translate_batch_outcome(["romance", "comedy"], "zh-CN")

    assert isinstance(outcome, Ok)
    assert outcome.value == {"romance": "romance", "comedy": "comedy"}
    assert not m.requests


@pytest.mark.asyncio
async def test_success_maps_index_aligned_entries():
    with aioresponses() as m:
        m.post(
            ENDPOINT,
            payload={
                "success": True,
                "translations": [{"translated_text": "爱情"}, {"translated_text": "喜剧"}],
            },
        )
        outcome = await _gateway().translate_batch_outcome(["romance", "comedy"], "zh-CN")

        call = list(m.requests.values())[0][0]

    assert isinstance(outcome, Ok)
    assert outcome.value == {"romance": "爱情", "comedy": "喜剧"}
    assert call.kwargs["json"] == {"texts": ["romance", "comedy"], "target": "zh-CN"}
    assert call.kwargs["headers"]["Authorization"] == "Bearer translate-key"


@pytest.mark.asyncio
async def test_missing_or_empty_entries_fall_back_to_identity():
    with aioresponses() as m:
        m.post(ENDPOINT, payload={"success": True, "translations": [{"translated_text": ""}, {"translated_text": "猫"}]})
        mapping = await _gateway().translate_batch(["dog", "cat", "bird"], "zh-CN")

    assert mapping == {"dog": "dog", "cat": "猫", "bird": "bird"}


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "response",
    [
        {"status": 500},
        {"status": 200, "payload": {"success": False}},
        {"status": 200, "payload": {"success": True, "translations": None}},
        {"status": 200, "body": "not json"},
    ],
)
async def test_failure_degrades_to_total_identity(response):
    texts = ["romance", "comedy", "elf"]
    with aioresponses() as m:
        m.post(ENDPOINT, **response)
        outcome = await _gateway().translate_batch_outcome(texts, "zh-CN")

    assert isinstance(outcome, Degraded)
    assert set(outcome.value) == set(texts)
    assert all(k == v for k, v in outcome.value.items())


@pytest.mark.asyncio
async def test_transport_error_degrades_to_identity():
    with aioresponses():
        # 등록되지 않은 URL -> 연결 오류
        outcome = await _gateway().translate_batch_outcome(["romance"], "zh-CN")

    assert isinstance(outcome, Degraded)
    assert outcome.value == {"romance": "romance"}


@pytest.mark.asyncio
async def test_translate_text_single_string():
    with aioresponses() as m:
        m.post(ENDPOINT, payload={"success": True, "translations": [{"translated_text": "cat girl"}]})
        assert await _gateway().translate_text("猫娘", "en") == "cat girl"
