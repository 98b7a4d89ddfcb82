"""
Search, facet and ranking functions over the program catalog.

Everything here is a pure function of an in‑memory list of
``Program`` objects: nothing is mutated and nothing touches the store.
``CatalogService`` feeds these functions from the catalog cache.

Text matching trades precision for recall.  Every query word must
match, and a word matches a program when any of these hold:

1. the joined, lower‑cased searchable text contains it;
2. some searchable field has the word at a word boundary;
3. the word has at least three characters and a whitespace‑separated
   token of some field starts with or contains it.
"""

import re
from typing import Iterable, List, Sequence

from ..schemas.program import Program
from ..schemas.search import AccessibilityOption, SearchFilters

DEFAULT_FEATURED_LIMIT = 6
FUZZY_MIN_LENGTH = 3

ACCESSIBILITY_LABELS = {
    "wheelchair-access": "Wheelchair accessible",
    "accessible-toilets": "Accessible toilets",
    "pool-lift": "Pool lift",
    "family-change-rooms": "Family change rooms",
    "quiet-area": "Quiet area",
    "pet-friendly": "Pet friendly",
    "pram-access": "Pram accessible",
    "baby-change": "Baby change facilities",
    "seating-available": "Seating available",
}


def searchable_fields(program: Program) -> List[str]:
    """Return the non‑empty text fields a query is matched against."""
    venue = program.venue
    fields = [
        program.title,
        program.sport,
        program.description,
        venue.name,
        venue.suburb,
        venue.address,
        *program.inclusivity_tags,
        *program.accessibility,
        *program.age_groups,
        "free" if program.is_free else "",
        program.cost_unit,
    ]
    return [str(field) for field in fields if field]


def query_words(query: str | None) -> List[str]:
    if not query:
        return []
    return [word for word in query.lower().split() if word]


def _word_matches(word: str, search_text: str, fields: Sequence[str]) -> bool:
    if word in search_text:
        return True
    boundary = re.compile(r"\b" + re.escape(word), re.IGNORECASE)
    for field in fields:
        field_text = field.lower()
        if boundary.search(field_text):
            return True
        if len(word) >= FUZZY_MIN_LENGTH:
            if any(token.startswith(word) or word in token for token in field_text.split()):
                return True
    return False


def matches_query(program: Program, words: Sequence[str]) -> bool:
    """True when every word in ``words`` matches the program."""
    fields = searchable_fields(program)
    search_text = " ".join(fields).lower()
    return all(_word_matches(word, search_text, fields) for word in words)


def cost_order(programs: Iterable[Program]) -> List[Program]:
    """Free programs first, then ascending cost.

    The sort is stable, so programs with equal cost keep their input
    order.
    """
    return sorted(programs, key=lambda p: (not p.is_free, p.cost))


def search_programs(programs: Sequence[Program], filters: SearchFilters | None = None) -> List[Program]:
    """Filter ``programs`` by ``filters`` and order them by cost.

    Text filtering runs first, then the facet filters (``sport``,
    ``age_group``, ``max_cost`` and ``accessibility``) are AND‑combined.
    The accessibility facet matches programs carrying any of the
    requested tags.
    """
    filters = filters or SearchFilters()
    results = list(programs)

    words = query_words(filters.query)
    if words:
        results = [p for p in results if matches_query(p, words)]

    if filters.sport:
        results = [p for p in results if p.sport == filters.sport]

    if filters.age_group:
        results = [p for p in results if filters.age_group in p.age_groups]

    if filters.max_cost is not None and filters.max_cost >= 0:
        results = [p for p in results if p.cost <= filters.max_cost]

    if filters.accessibility:
        wanted = set(filters.accessibility)
        results = [p for p in results if wanted.intersection(p.accessibility)]

    return cost_order(results)


def featured_score(program: Program) -> int:
    score = 0
    if "beginner-friendly" in program.inclusivity_tags:
        score += 2
    if program.cost == 0:
        score += 2
    if 0 < program.cost <= 5:
        score += 1
    return score


def featured_programs(programs: Sequence[Program], limit: int = DEFAULT_FEATURED_LIMIT) -> List[Program]:
    """Pick up to ``limit`` programs for the home page.

    Programs are ranked by ``featured_score`` (highest first) with ties
    broken by ascending cost.
    """
    ranked = sorted(programs, key=lambda p: (-featured_score(p), p.cost))
    return ranked[:max(limit, 0)]


def sport_options(programs: Iterable[Program]) -> List[str]:
    return sorted({p.sport for p in programs if p.sport})


def age_group_options(programs: Iterable[Program]) -> List[str]:
    return sorted({age for p in programs for age in p.age_groups if age})


def accessibility_options(programs: Iterable[Program]) -> List[AccessibilityOption]:
    """Distinct accessibility tags with display labels, sorted by label."""
    tags = {tag for p in programs for tag in p.accessibility if tag}
    options = [
        AccessibilityOption(value=tag, label=ACCESSIBILITY_LABELS.get(tag, tag))
        for tag in tags
    ]
    return sorted(options, key=lambda option: (option.label.lower(), option.label))
