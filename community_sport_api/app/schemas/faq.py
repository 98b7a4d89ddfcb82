"""
Pydantic schemas for FAQ entries.

Each entry has a question, an answer, an optional category used to
group entries on the support page and a ``position`` controlling
display order.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class FAQCreate(BaseModel):
    """Schema for creating a new FAQ entry."""

    question: str = Field(..., min_length=1, examples=["Do I need to bring my own equipment?"])
    answer: str = Field(..., min_length=1, examples=["Most programs provide equipment; check the program page."])
    category: Optional[str] = Field(None, examples=["Bookings"])
    position: int = Field(0, description="Ordering position for display; lower numbers appear first")


class FAQRead(FAQCreate):
    """Schema for reading an FAQ entry."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    created_at: Optional[str] = Field(None, alias="createdAt")
    updated_at: Optional[str] = Field(None, alias="updatedAt")
