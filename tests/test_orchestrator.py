import pytest

from catalog.models import Degraded, Ok, QuerySpec, RawItem
from catalog.providers import PROVIDERS, ProviderAdapter, SecondaryCatalog, get_provider
from searcher.orchestrator import SearchOrchestrator


class StaticProvider(ProviderAdapter):
    kind = "chub"
    name = "Static"

    def __init__(self, settings, items=None, degraded=False):
        super().__init__(settings)
        self.items = items or []
        self.degraded = degraded
        self.queries = []

    async def fetch_raw_outcome(self, query):
        self.queries.append(query)
        if self.degraded:
            return Degraded([], reason="down")
        return Ok(self.items)


def test_get_provider_resolves_registered_kinds(settings):
    assert set(PROVIDERS) >= {"chub", "janitor"}
    assert isinstance(get_provider("janitor", settings), SecondaryCatalog)
    with pytest.raises(ValueError):
        get_provider("nope", settings)


@pytest.mark.asyncio
async def test_empty_results_short_circuit(settings, fake_gateway):
    gateway = fake_gateway()
    provider = StaticProvider(settings)
    orchestrator = SearchOrchestrator(settings, provider=provider, gateway=gateway)

    assert await orchestrator.search(QuerySpec(term="nothing")) == []
    assert gateway.batch_calls == []


@pytest.mark.asyncio
async def test_degraded_provider_yields_empty_list(settings, fake_gateway):
    provider = StaticProvider(settings, degraded=True)
    orchestrator = SearchOrchestrator(settings, provider=provider, gateway=fake_gateway())

    assert await orchestrator.search(QuerySpec()) == []


@pytest.mark.asyncio
async def test_search_term_translated_to_provider_language(settings, fake_gateway, chub_node):
    gateway = fake_gateway(mapping={"猫娘": "cat girl"})
    provider = StaticProvider(settings, items=[RawItem("chub", chub_node("alice/neko"))])
    orchestrator = SearchOrchestrator(settings, provider=provider, gateway=gateway)

    records = await orchestrator.search(QuerySpec(term="猫娘"))

    assert gateway.text_calls == [("猫娘", "en")]
    assert provider.queries[0].term == "cat girl"
    assert len(records) == 1


@pytest.mark.asyncio
async def test_search_term_left_alone_when_translation_disabled(settings, fake_gateway, chub_node):
    gateway = fake_gateway(mapping={"猫娘": "cat girl"}, enabled=False)
    provider = StaticProvider(settings, items=[RawItem("chub", chub_node())])
    orchestrator = SearchOrchestrator(settings, provider=provider, gateway=gateway)

    records = await orchestrator.search(QuerySpec(term="猫娘"))

    assert gateway.text_calls == []
    assert provider.queries[0].term == "猫娘"
    assert records[0].name == records[0].original_name


@pytest.mark.asyncio
async def test_full_pipeline_merges_translations(settings, fake_gateway, chub_node):
    gateway = fake_gateway(mapping={"romance": "爱情", "Neko": "猫"})
    items = [
        RawItem("chub", chub_node("alice/neko", name="Neko", topics=["romance", "romance", "comedy"]), card=b"PNG"),
        RawItem("chub", chub_node("bob/fox", name="Fox", topics=["romance"])),
    ]
    orchestrator = SearchOrchestrator(settings, provider=StaticProvider(settings, items=items), gateway=gateway)

    records = await orchestrator.search(QuerySpec(include_tags=["romance"]))

    assert len(gateway.batch_calls) == 1
    assert [r.path for r in records] == ["alice/neko", "bob/fox"]
    first = records[0]
    assert first.name == "猫" and first.original_name == "Neko"
    assert [t.original_value for t in first.tags] == ["romance", "comedy"]
    assert [t.display_text for t in first.tags] == ["爱情", "comedy"]
    assert first.card == b"PNG"
    assert "romance" in records[1].tag_values()
