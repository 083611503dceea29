import json

import pytest
from aioresponses import aioresponses

from catalog.models import Degraded, Ok, QuerySpec, RawItem
from catalog.normalizer import RecordNormalizer
from catalog.providers import SecondaryCatalog
from catalog.proxy import ScrapeProxyError, extract_payload, find_page_body

SCRAPE_URL = "https://scrape.example/v1/scrape"


def _page(payload) -> str:
    return f"<html><body><pre>{json.dumps(payload)}</pre></body></html>"


JANITOR_ITEM = {
    "id": "c0ffee",
    "name": "X",
    "description": "<p>A <b>brave</b> knight</p>",
    "tags": [{"id": 1, "name": "Fantasy", "slug": "fantasy"}, {"id": 2, "name": "Male", "slug": "male"}],
    "custom_tags": ["knight", "fantasy"],
    "total_chat": 10,
    "total_message": 99,
    "is_nsfw": False,
    "avatar": "abc.webp",
    "creator_name": "smith",
    "token_counts": {"total_tokens": 1234},
}


def test_find_page_body_accepts_nested_and_flat_envelopes():
    assert find_page_body({"success": True, "data": {"rawHtml": "<pre>1</pre>"}}) == "<pre>1</pre>"
    assert find_page_body({"html": "<pre>2</pre>"}) == "<pre>2</pre>"

    with pytest.raises(ScrapeProxyError):
        find_page_body({"success": False, "error": "blocked"})
    with pytest.raises(ScrapeProxyError):
        find_page_body(["not", "an", "object"])


def test_extract_payload_errors():
    with pytest.raises(ScrapeProxyError):
        extract_payload("<html><body>Just a moment...</body></html>")
    with pytest.raises(ScrapeProxyError):
        extract_payload("<pre>{not json</pre>")


def test_build_target_url(settings):
    catalog = SecondaryCatalog(settings)
    url = catalog.build_target_url(QuerySpec(term="knight", include_tags=["fantasy"], nsfw=True, sort="latest", page=2))

    assert url.startswith("https://janitorai.com/hampter/characters?page=2&mode=all&sort=latest")
    assert "search=knight" in url
    assert "custom_tags%5B%5D=fantasy" in url


@pytest.mark.asyncio
async def test_scrape_envelope_extraction(settings):
    with aioresponses() as m:
        m.post(SCRAPE_URL, payload={"success": True, "data": {"rawHtml": _page({"data": [JANITOR_ITEM]})}})
        items = await SecondaryCatalog(settings).fetch_raw(QuerySpec(term="knight"))

        call = list(m.requests.values())[0][0]
        assert call.kwargs["headers"]["Authorization"] == "Bearer scrape-key"
        assert call.kwargs["json"]["url"].startswith(SecondaryCatalog.TARGET_BASE)

    records = RecordNormalizer().normalize_all("janitor", items)

    assert len(records) == 1
    record = records[0]
    assert record.name == "X"
    assert record.description == "A brave knight"
    assert record.tags == ["Fantasy", "Male", "knight"]
    assert record.has_star_count is False
    assert record.token_count == 1234
    assert record.avatar_url.endswith("/abc.webp")


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "envelope",
    [
        {"success": True, "data": {"rawHtml": "<html><body>Access denied</body></html>"}},
        {"success": True, "data": {"rawHtml": "<html><body><pre>{oops</pre></body></html>"}},
        {"success": True, "data": {}},
        {"success": False, "error": "timeout"},
    ],
)
async def test_malformed_scrape_yields_empty(settings, envelope):
    with aioresponses() as m:
        m.post(SCRAPE_URL, payload=envelope)
        outcome = await SecondaryCatalog(settings).fetch_raw_outcome(QuerySpec())

    assert isinstance(outcome, Degraded)
    assert outcome.value == []


@pytest.mark.asyncio
async def test_proxy_transport_error_yields_empty(settings):
    with aioresponses() as m:
        m.post(SCRAPE_URL, status=403)
        items = await SecondaryCatalog(settings).fetch_raw(QuerySpec())

    assert items == []


@pytest.mark.asyncio
async def test_exclude_tags_filtered_client_side(settings):
    other = dict(JANITOR_ITEM, id="beef", name="Y", tags=[], custom_tags=["horror"])
    with aioresponses() as m:
        m.post(SCRAPE_URL, payload={"success": True, "data": {"rawHtml": _page({"data": [JANITOR_ITEM, other]})}})
        outcome = await SecondaryCatalog(settings).fetch_raw_outcome(QuerySpec(exclude_tags=["Horror"]))

    assert isinstance(outcome, Ok)
    assert [item.fields["name"] for item in outcome.value] == ["X"]


@pytest.mark.parametrize(
    "fields, expected",
    [
        ({"total_chat": 3.5, "total_message": "12k"}, (3, 0, 0)),
        ({"total_chat": "7", "token_counts": {"total_tokens": "1.2e3"}}, (7, 0, 1200)),
        ({"token_counts": {"total_tokens": {"n": 5}}}, (0, 0, 0)),
        ({"token_counts": [1, 2], "total_message": None}, (0, 0, 0)),
    ],
)
def test_odd_numeric_fields_default_instead_of_dropping(fields, expected):
    item = RawItem("janitor", {"id": "1", "name": "X", **fields})
    records = RecordNormalizer().normalize_all("janitor", [item])

    assert len(records) == 1
    record = records[0]
    assert (record.chat_count, record.message_count, record.token_count) == expected


@pytest.mark.asyncio
async def test_item_without_id_is_kept(settings):
    with aioresponses() as m:
        m.post(SCRAPE_URL, payload={"success": True, "data": {"rawHtml": _page({"data": [{"name": "X"}, "junk"]})}})
        items = await SecondaryCatalog(settings).fetch_raw(QuerySpec())

    records = RecordNormalizer().normalize_all("janitor", items)

    assert [r.name for r in records] == ["X"]
    assert records[0].path == ""
    assert records[0].page_url == ""
