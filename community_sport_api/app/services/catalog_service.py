"""
Business logic for the program catalog.

``CatalogService`` answers every catalog read through the
``CatalogCache`` and the pure functions in ``services.search``, and
performs catalog writes (programs and FAQs) against the store,
clearing the cache before reporting success so the next read sees the
new record.

Read failures are handled per operation: listing, searching and
single lookups raise ``UpstreamError`` with a message suitable for end
users, while the facet option lists and the featured list degrade to
an empty result.
"""

import logging
import sqlite3
from typing import Any, List, Optional

from ..core.context import AppContext
from ..core.errors import NotFoundError, UpstreamError, ValidationError
from ..schemas.faq import FAQCreate, FAQRead
from ..schemas.program import Program, ProgramCreate, ProgramCreated
from ..schemas.search import AccessibilityOption, CatalogOptions, SearchFilters
from . import search

logger = logging.getLogger(__name__)

# Checked in this order; the message names the wire field.
REQUIRED_PROGRAM_FIELDS = (
    ("title", "title"),
    ("sport", "sport"),
    ("organizer_email", "organizer_email"),
    ("description", "description"),
    ("age_groups", "ageGroups"),
    ("cost", "cost"),
    ("cost_unit", "costUnit"),
)


def _is_missing(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _parse_cost(value: Any) -> float:
    if isinstance(value, bool):
        raise ValidationError("Cost must be a non-negative number")
    try:
        cost = float(value)
    except (TypeError, ValueError):
        raise ValidationError("Cost must be a non-negative number") from None
    if cost != cost or cost < 0:
        raise ValidationError("Cost must be a non-negative number")
    return cost


class CatalogService:
    """Program and FAQ operations for one application context."""

    def __init__(self, ctx: AppContext) -> None:
        self.store = ctx.store
        self.cache = ctx.cache
        self.featured_limit = ctx.settings.featured_limit

    async def get_programs(self) -> List[Program]:
        try:
            return await self.cache.get_programs()
        except Exception as exc:
            logger.exception("Error fetching programs from the catalog store")
            raise UpstreamError("Failed to load programs. Please try again later.") from exc

    async def get_program(self, program_id: str) -> Program:
        try:
            program = await self.cache.get_program(program_id)
        except Exception as exc:
            logger.exception("Error fetching program %s from the catalog store", program_id)
            raise UpstreamError("Failed to load program details. Please try again later.") from exc
        if program is None:
            raise NotFoundError(f"Program {program_id} not found")
        return program

    async def search_programs(self, filters: Optional[SearchFilters] = None) -> List[Program]:
        try:
            programs = await self.cache.get_programs()
        except Exception as exc:
            logger.exception("Error searching programs")
            raise UpstreamError("Failed to search programs. Please try again later.") from exc
        return search.search_programs(programs, filters)

    async def featured_programs(self, limit: Optional[int] = None) -> List[Program]:
        """Home page selection; an empty list when the catalog is unavailable."""
        try:
            programs = await self.cache.get_programs()
        except Exception:
            logger.exception("Error getting featured programs")
            return []
        return search.featured_programs(programs, self.featured_limit if limit is None else limit)

    async def _programs_or_empty(self, purpose: str) -> List[Program]:
        try:
            return await self.cache.get_programs()
        except Exception:
            logger.exception("Error getting %s options", purpose)
            return []

    async def sport_options(self) -> List[str]:
        return search.sport_options(await self._programs_or_empty("sport"))

    async def age_group_options(self) -> List[str]:
        return search.age_group_options(await self._programs_or_empty("age group"))

    async def accessibility_options(self) -> List[AccessibilityOption]:
        return search.accessibility_options(await self._programs_or_empty("accessibility"))

    async def catalog_options(self) -> CatalogOptions:
        return CatalogOptions(
            sports=await self.sport_options(),
            age_groups=await self.age_group_options(),
            accessibility=await self.accessibility_options(),
        )

    async def create_program(self, data: ProgramCreate) -> ProgramCreated:
        """Validate and store a new program, then clear the cache."""
        for attr, wire_name in REQUIRED_PROGRAM_FIELDS:
            if _is_missing(getattr(data, attr)):
                raise ValidationError(f"Missing required field: {wire_name}")
        cost = _parse_cost(data.cost)

        now = self.store.timestamp()
        document = {
            "title": data.title,
            "sport": data.sport,
            "organizer_email": data.organizer_email,
            "description": data.description,
            "age_groups": list(data.age_groups or []),
            "cost": cost,
            "cost_unit": data.cost_unit,
            "accessibility": list(data.accessibility),
            "inclusivity_tags": list(data.inclusivity_tags),
            "schedule": data.schedule,
            "venue": data.venue.model_dump(),
            "equipment": data.equipment.model_dump(),
            "contact": data.contact,
            "images": list(data.images),
            "max_participants": data.max_participants,
            "status": "active",
            "created_at": now,
            "updated_at": now,
        }
        logger.info("Creating program '%s' for %s", data.title, data.organizer_email)
        try:
            program_id = await self.store.create("programs", document)
        except sqlite3.Error as exc:
            logger.exception("Error creating program '%s'", data.title)
            raise UpstreamError("Failed to create program. Please try again.") from exc
        self.cache.clear_cache()
        logger.info("Program created successfully: %s", program_id)
        return ProgramCreated(program_id=program_id, message="Program created successfully")

    async def get_faqs(self) -> List[FAQRead]:
        try:
            return await self.cache.get_faqs()
        except Exception as exc:
            logger.exception("Error fetching FAQs from the catalog store")
            raise UpstreamError("Failed to load FAQs. Please try again later.") from exc

    async def create_faq(self, data: FAQCreate) -> FAQRead:
        now = self.store.timestamp()
        document = {**data.model_dump(), "created_at": now, "updated_at": now}
        try:
            faq_id = await self.store.create("faqs", document)
        except sqlite3.Error as exc:
            logger.exception("Error creating FAQ")
            raise UpstreamError("Failed to create FAQ. Please try again.") from exc
        self.cache.clear_cache()
        logger.info("Created FAQ %s", faq_id)
        return FAQRead.model_validate({**document, "id": faq_id})

    def clear_cache(self) -> None:
        self.cache.clear_cache()
