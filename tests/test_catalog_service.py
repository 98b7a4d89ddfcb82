import sqlite3

import pytest
from conftest import FakeClock

from community_sport_api.app.core.errors import NotFoundError, UpstreamError, ValidationError
from community_sport_api.app.schemas.faq import FAQCreate
from community_sport_api.app.schemas.program import ProgramCreate
from community_sport_api.app.schemas.search import SearchFilters
from community_sport_api.app.services.catalog_cache import CatalogCache
from community_sport_api.app.services.catalog_service import CatalogService


def _program_payload(**overrides):
    payload = {
        "title": "Netball Night",
        "sport": "Netball",
        "organizer_email": "coach@example.com",
        "description": "Social netball for all levels",
        "ageGroups": ["adult"],
        "cost": 0,
        "costUnit": "session",
        "venue": {"name": "Carlton Courts", "suburb": "Carlton"},
        "inclusivityTags": ["beginner-friendly"],
    }
    payload.update(overrides)
    return ProgramCreate.model_validate(payload)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def service(ctx, clock):
    ctx.cache = CatalogCache(ctx.store, ttl_seconds=300, clock=clock)
    return CatalogService(ctx)


def _failing(*args, **kwargs):
    raise sqlite3.OperationalError("disk I/O error")


@pytest.mark.asyncio
async def test_create_program_then_read_it_back(service):
    created = await service.create_program(_program_payload())

    assert created.success is True
    assert created.message == "Program created successfully"
    program = await service.get_program(created.program_id)
    assert program.title == "Netball Night"
    assert program.status == "active"
    assert program.is_free
    assert program.created_at == program.updated_at


@pytest.mark.asyncio
async def test_create_program_clears_cache(service):
    assert await service.get_programs() == []

    await service.create_program(_program_payload())

    assert [p.title for p in await service.get_programs()] == ["Netball Night"]


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "overrides, missing",
    [
        ({"title": None}, "title"),
        ({"title": "  ", "sport": None}, "title"),
        ({"sport": ""}, "sport"),
        ({"organizer_email": None}, "organizer_email"),
        ({"description": None}, "description"),
        ({"ageGroups": None}, "ageGroups"),
        ({"cost": None}, "cost"),
        ({"costUnit": None}, "costUnit"),
    ],
)
async def test_create_program_names_first_missing_field(service, overrides, missing):
    with pytest.raises(ValidationError) as exc_info:
        await service.create_program(_program_payload(**overrides))
    assert exc_info.value.message == f"Missing required field: {missing}"
    assert await service.get_programs() == []


@pytest.mark.asyncio
@pytest.mark.parametrize("cost", ["abc", -1, True])
async def test_create_program_rejects_bad_cost(service, cost):
    with pytest.raises(ValidationError) as exc_info:
        await service.create_program(_program_payload(cost=cost))
    assert exc_info.value.message == "Cost must be a non-negative number"


@pytest.mark.asyncio
async def test_create_program_accepts_numeric_string_cost(service):
    created = await service.create_program(_program_payload(cost="7.5"))
    assert (await service.get_program(created.program_id)).cost == 7.5


@pytest.mark.asyncio
async def test_get_program_missing_raises_not_found(service):
    with pytest.raises(NotFoundError):
        await service.get_program("does-not-exist")


@pytest.mark.asyncio
async def test_search_uses_catalog(service):
    await service.create_program(_program_payload())
    await service.create_program(_program_payload(title="Aqua Fit", sport="Swimming", cost=12))

    results = await service.search_programs(SearchFilters(maxCost="10"))

    assert [p.title for p in results] == ["Netball Night"]


@pytest.mark.asyncio
async def test_read_failures_raise_upstream_error(service, ctx, monkeypatch):
    monkeypatch.setattr(ctx.store, "list_all", _failing)

    with pytest.raises(UpstreamError) as exc_info:
        await service.get_programs()
    assert exc_info.value.message == "Failed to load programs. Please try again later."
    assert isinstance(exc_info.value.__cause__, sqlite3.OperationalError)

    with pytest.raises(UpstreamError):
        await service.search_programs(SearchFilters())


@pytest.mark.asyncio
async def test_featured_and_options_degrade_to_empty(service, ctx, monkeypatch):
    monkeypatch.setattr(ctx.store, "list_all", _failing)

    assert await service.featured_programs() == []
    options = await service.catalog_options()
    assert options.sports == []
    assert options.age_groups == []
    assert options.accessibility == []


@pytest.mark.asyncio
async def test_featured_defaults_to_configured_limit(service, ctx):
    service.featured_limit = 2
    for cost in (30, 0, 4):
        await service.create_program(_program_payload(title=f"Program {cost}", cost=cost, inclusivityTags=[]))

    featured = await service.featured_programs()

    assert [p.cost for p in featured] == [0, 4]
    assert len(await service.featured_programs(limit=10)) == 3


@pytest.mark.asyncio
async def test_catalog_options(service):
    await service.create_program(_program_payload(accessibility=["wheelchair-access"]))
    await service.create_program(_program_payload(sport="Swimming", ageGroups=["senior", "adult"]))

    options = await service.catalog_options()

    assert options.sports == ["Netball", "Swimming"]
    assert options.age_groups == ["adult", "senior"]
    assert [(o.value, o.label) for o in options.accessibility] == [("wheelchair-access", "Wheelchair accessible")]


@pytest.mark.asyncio
async def test_faqs_are_created_and_listed_in_position_order(service):
    await service.create_faq(FAQCreate(question="How do I cancel?", answer="From My Appointments.", position=2))
    created = await service.create_faq(FAQCreate(question="Is it free?", answer="Some programs are.", position=1))

    faqs = await service.get_faqs()

    assert created.id
    assert [faq.question for faq in faqs] == ["Is it free?", "How do I cancel?"]


@pytest.mark.asyncio
async def test_clear_cache_shows_external_writes(service, ctx):
    assert await service.get_programs() == []
    await ctx.store.create("programs", {"title": "Walking Group", "cost": 0})

    assert await service.get_programs() == []
    service.clear_cache()
    assert [p.title for p in await service.get_programs()] == ["Walking Group"]
