"""
Pydantic models for sport programs.

Programs are stored as documents using the Python field names and
exposed over the API with the camelCase names the web client uses
(``ageGroups``, ``costUnit``, ``inclusivityTags``, ``maxParticipants``).
``populate_by_name`` lets either spelling be used on input.

``ProgramCreate`` keeps every field optional: required fields are
checked by ``CatalogService.create_program`` so that the error message
can name the missing field.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class Venue(BaseModel):
    """Where a program runs.  Extra keys are kept as provided."""

    model_config = ConfigDict(extra="allow")

    name: Optional[str] = Field(None, examples=["Carlton Baths"])
    suburb: Optional[str] = Field(None, examples=["Carlton"])
    address: Optional[str] = Field(None, examples=["248 Rathdowne St"])


class Equipment(BaseModel):
    provided: bool = False
    required: List[str] = Field(default_factory=list)


class ProgramFields(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    accessibility: List[str] = Field(default_factory=list, examples=[["wheelchair-access"]])
    inclusivity_tags: List[str] = Field(default_factory=list, alias="inclusivityTags", examples=[["beginner-friendly"]])
    schedule: Any = Field(default_factory=list, description="Opaque schedule blob")
    venue: Venue = Field(default_factory=Venue)
    equipment: Equipment = Field(default_factory=Equipment)
    contact: Dict[str, Any] = Field(default_factory=dict)
    images: List[str] = Field(default_factory=list)
    max_participants: Optional[int] = Field(None, alias="maxParticipants", examples=[20])


class ProgramCreate(ProgramFields):
    """Schema for creating a program."""

    title: Optional[str] = Field(None, examples=["Netball Night"])
    sport: Optional[str] = Field(None, examples=["Netball"])
    organizer_email: Optional[str] = Field(None, examples=["coach@example.com"])
    description: Optional[str] = Field(None, examples=["Social netball for all levels"])
    age_groups: Optional[List[str]] = Field(None, alias="ageGroups", examples=[["adult"]])
    cost: Optional[Any] = Field(None, examples=[0])
    cost_unit: Optional[str] = Field(None, alias="costUnit", examples=["session"])


class Program(ProgramFields):
    """Schema for reading a program."""

    id: str
    title: str = ""
    sport: str = ""
    organizer_email: str = ""
    description: str = ""
    age_groups: List[str] = Field(default_factory=list, alias="ageGroups")
    cost: float = Field(..., ge=0)
    cost_unit: str = Field("", alias="costUnit")
    status: str = "active"
    created_at: Optional[str] = Field(None, alias="createdAt")
    updated_at: Optional[str] = Field(None, alias="updatedAt")

    @property
    def is_free(self) -> bool:
        return self.cost == 0


class ProgramCreated(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    program_id: str = Field(..., alias="programId")
    message: str
