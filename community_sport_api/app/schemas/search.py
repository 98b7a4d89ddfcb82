"""
Typed search filters and facet option models.

``SearchFilters`` enumerates exactly the options the search engine
understands.  ``max_cost`` accepts the raw value from a form or query
string: a value that does not start with a non‑negative number is
dropped to ``None`` so the filter is silently ignored.
"""

import re
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

_LEADING_NUMBER = re.compile(r"^[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?")


def parse_max_cost(value: Any) -> Optional[float]:
    """Parse a cost ceiling the way a browser ``parseFloat`` would.

    Leading whitespace is skipped and trailing garbage after the number
    is ignored (``"12abc"`` -> ``12.0``).  Empty, non‑numeric and
    negative values return ``None``.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    else:
        match = _LEADING_NUMBER.match(str(value).strip())
        if not match:
            return None
        number = float(match.group(0))
    if number != number or number < 0:
        return None
    return number


class SearchFilters(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    query: Optional[str] = Field(None, examples=["netball carlton"])
    sport: Optional[str] = Field(None, examples=["Netball"])
    age_group: Optional[str] = Field(None, alias="ageGroup", examples=["adult"])
    max_cost: Optional[float] = Field(None, alias="maxCost", examples=[10])
    accessibility: List[str] = Field(default_factory=list, examples=[["wheelchair-access"]])

    @field_validator("max_cost", mode="before")
    @classmethod
    def _lenient_max_cost(cls, value: Any) -> Optional[float]:
        return parse_max_cost(value)

    @field_validator("accessibility", mode="before")
    @classmethod
    def _accessibility_list(cls, value: Any) -> List[str]:
        if value is None:
            return []
        if isinstance(value, str):
            return [value] if value else []
        return list(value)


class AccessibilityOption(BaseModel):
    value: str
    label: str


class CatalogOptions(BaseModel):
    """Facet values offered by the search form."""

    model_config = ConfigDict(populate_by_name=True)

    sports: List[str] = Field(default_factory=list)
    age_groups: List[str] = Field(default_factory=list, alias="ageGroups")
    accessibility: List[AccessibilityOption] = Field(default_factory=list)
