"""
Pydantic models for appointments.

An appointment books one user onto one program for one or more time
slots.  Request bodies keep every field optional so the service can
report which required field is missing; responses mirror the result
shapes returned by the appointment callables of the web client.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

STATUS_CONFIRMED = "confirmed"
STATUS_CANCELLED = "cancelled"


class AppointmentCreate(BaseModel):
    program_id: Optional[str] = Field(None, examples=["3f2a9c0d"])
    user_email: Optional[str] = Field(None, examples=["a@x.com"])
    time_slot: Optional[List[str]] = Field(None, examples=[["mon-6pm"]])


class AppointmentUpdate(BaseModel):
    """Only the selected time slots can be changed."""

    time_slot: Optional[List[str]] = Field(None, examples=[["wed-6pm"]])
    user_email: Optional[str] = None


class AppointmentCancel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    user_email: Optional[str] = Field(None, alias="userEmail")


class Appointment(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    program_id: str
    user_email: str
    time_slot: List[str]
    status: str = STATUS_CONFIRMED
    created_at: Optional[str] = Field(None, alias="createdAt")
    updated_at: Optional[str] = Field(None, alias="updatedAt")
    cancelled_at: Optional[str] = Field(None, alias="cancelledAt")
    # Program details copied at read time for display
    program: Optional[Dict[str, Any]] = None

    @property
    def appointment_id(self) -> str:
        return self.id


class AppointmentResult(BaseModel):
    """Result of a create or update call."""

    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    appointment_id: str = Field(..., alias="appointmentId")
    message: str


class CancelResult(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    message: str
    appointment_id: str = Field(..., alias="appointmentId")


class AppointmentList(BaseModel):
    success: bool = True
    appointments: List[Appointment] = Field(default_factory=list)
    count: int = 0
