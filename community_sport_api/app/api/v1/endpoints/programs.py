"""
Program catalog endpoints for API v1.

Anyone may browse, search and read programs; only organizers may
publish new programs or force a cache refresh.  Fixed paths
(``/search``, ``/featured``, ``/options``) are declared before
``/{program_id}`` so they are not captured by it.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status

from community_sport_api.app.core.context import AppContext, get_context
from community_sport_api.app.core.errors import ServiceError, to_http_exception
from community_sport_api.app.core.security import require_roles
from community_sport_api.app.schemas.program import Program, ProgramCreate, ProgramCreated
from community_sport_api.app.schemas.search import CatalogOptions, SearchFilters
from community_sport_api.app.services.catalog_service import CatalogService

router = APIRouter()


def get_catalog_service(ctx: AppContext = Depends(get_context)) -> CatalogService:
    return CatalogService(ctx)


@router.get("/", response_model=List[Program])
async def list_programs(service: CatalogService = Depends(get_catalog_service)) -> List[Program]:
    try:
        return await service.get_programs()
    except ServiceError as e:
        raise to_http_exception(e) from e


@router.get("/search", response_model=List[Program])
async def search_programs(
    query: Optional[str] = Query(None, description="Free text; every word must match"),
    sport: Optional[str] = Query(None),
    age_group: Optional[str] = Query(None, alias="ageGroup"),
    max_cost: Optional[str] = Query(None, alias="maxCost", description="Ignored unless a non-negative number"),
    accessibility: List[str] = Query([], description="Programs with any of these tags"),
    service: CatalogService = Depends(get_catalog_service),
) -> List[Program]:
    """Search the catalog.

    Results are ordered free first, then by ascending cost.
    """
    filters = SearchFilters(
        query=query,
        sport=sport,
        age_group=age_group,
        max_cost=max_cost,
        accessibility=accessibility,
    )
    try:
        return await service.search_programs(filters)
    except ServiceError as e:
        raise to_http_exception(e) from e


@router.get("/featured", response_model=List[Program])
async def featured_programs(
    limit: Optional[int] = Query(None, ge=0, le=100),
    service: CatalogService = Depends(get_catalog_service),
) -> List[Program]:
    return await service.featured_programs(limit)


@router.get("/options", response_model=CatalogOptions)
async def catalog_options(service: CatalogService = Depends(get_catalog_service)) -> CatalogOptions:
    """Sport, age group and accessibility values for the search form."""
    return await service.catalog_options()


@router.post("/cache/clear")
async def clear_cache(
    service: CatalogService = Depends(get_catalog_service),
    current_user: dict = Depends(require_roles("organizer")),
) -> dict:
    service.clear_cache()
    return {"success": True, "message": "Cache cleared"}


@router.get("/{program_id}", response_model=Program)
async def get_program(program_id: str, service: CatalogService = Depends(get_catalog_service)) -> Program:
    try:
        return await service.get_program(program_id)
    except ServiceError as e:
        raise to_http_exception(e) from e


@router.post("/", response_model=ProgramCreated, status_code=status.HTTP_201_CREATED)
async def create_program(
    program: ProgramCreate,
    service: CatalogService = Depends(get_catalog_service),
    current_user: dict = Depends(require_roles("organizer")),
) -> ProgramCreated:
    """Publish a new program.

    ``organizer_email`` defaults to the caller's e‑mail.
    """
    if not program.organizer_email and current_user.get("email"):
        program = program.model_copy(update={"organizer_email": current_user["email"]})
    try:
        return await service.create_program(program)
    except ServiceError as e:
        raise to_http_exception(e) from e
