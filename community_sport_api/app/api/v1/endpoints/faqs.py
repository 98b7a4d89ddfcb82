"""
FAQ endpoints for API v1.

The support page lists FAQ entries in display order.  Organizers may
add entries; adding one clears the catalog cache.
"""

from typing import List

from fastapi import APIRouter, Depends, status

from community_sport_api.app.core.errors import ServiceError, to_http_exception
from community_sport_api.app.core.security import require_roles
from community_sport_api.app.schemas.faq import FAQCreate, FAQRead
from community_sport_api.app.services.catalog_service import CatalogService
from community_sport_api.app.api.v1.endpoints.programs import get_catalog_service

router = APIRouter()


@router.get("/", response_model=List[FAQRead])
async def list_faqs(service: CatalogService = Depends(get_catalog_service)) -> List[FAQRead]:
    try:
        return await service.get_faqs()
    except ServiceError as e:
        raise to_http_exception(e) from e


@router.post("/", response_model=FAQRead, status_code=status.HTTP_201_CREATED)
async def create_faq(
    faq: FAQCreate,
    service: CatalogService = Depends(get_catalog_service),
    current_user: dict = Depends(require_roles("organizer")),
) -> FAQRead:
    try:
        return await service.create_faq(faq)
    except ServiceError as e:
        raise to_http_exception(e) from e
