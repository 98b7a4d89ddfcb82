"""
Time‑boxed cache in front of the catalog store.

Programs and FAQs are cached independently and each list stays fresh
for ``ttl_seconds`` after the last successful fetch.  There is no
partial invalidation: ``clear_cache`` always drops both lists, and
every successful write through the catalog must call it before
reporting success.

The cache lives on the ``AppContext`` of one process.  Separate
processes do not coordinate, so another replica may serve data up to
one freshness window old.
"""

import logging
import time
from typing import Callable, List, Optional

from ..core.store import CatalogStore
from ..schemas.faq import FAQRead
from ..schemas.program import Program

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 5 * 60


class CatalogCache:
    """Caches the ``programs`` and ``faqs`` collections."""

    def __init__(
        self,
        store: CatalogStore,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.store = store
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._programs: Optional[List[Program]] = None
        self._programs_fetched_at: Optional[float] = None
        self._faqs: Optional[List[FAQRead]] = None
        self._faqs_fetched_at: Optional[float] = None

    def _is_fresh(self, fetched_at: Optional[float]) -> bool:
        return fetched_at is not None and self._clock() - fetched_at < self.ttl_seconds

    async def get_programs(self) -> List[Program]:
        """Return all programs, reading the store only when the cache is stale.

        Store and decoding errors propagate to the caller; a failed
        fetch leaves the previous cache state untouched.
        """
        if self._programs is not None and self._is_fresh(self._programs_fetched_at):
            logger.debug("Serving %d programs from cache", len(self._programs))
            return self._programs
        documents = await self.store.list_all("programs")
        programs = [Program.model_validate(doc) for doc in documents]
        self._programs = programs
        self._programs_fetched_at = self._clock()
        logger.info("Loaded %d programs from the catalog store", len(programs))
        return programs

    async def get_program(self, program_id: str) -> Optional[Program]:
        """Return one program or ``None`` if it does not exist.

        A fresh cached list is consulted first.  Otherwise the store is
        read directly and the result is not added to the cache.
        """
        if self._programs is not None and self._is_fresh(self._programs_fetched_at):
            for program in self._programs:
                if program.id == program_id:
                    return program
        document = await self.store.get("programs", program_id)
        if document is None:
            return None
        return Program.model_validate(document)

    async def get_faqs(self) -> List[FAQRead]:
        if self._faqs is not None and self._is_fresh(self._faqs_fetched_at):
            logger.debug("Serving %d FAQs from cache", len(self._faqs))
            return self._faqs
        documents = await self.store.list_all("faqs")
        faqs = sorted(
            (FAQRead.model_validate(doc) for doc in documents),
            key=lambda faq: faq.position,
        )
        self._faqs = faqs
        self._faqs_fetched_at = self._clock()
        logger.info("Loaded %d FAQs from the catalog store", len(faqs))
        return faqs

    def clear_cache(self) -> None:
        self._programs = None
        self._programs_fetched_at = None
        self._faqs = None
        self._faqs_fetched_at = None
        logger.info("Catalog cache cleared")
