"""
Business logic for appointments.

An appointment is created ``confirmed`` and can only ever move to
``cancelled``; cancelled records stay in the store for audit.  Update
and cancel compare the stored ``user_email`` with the caller's before
writing.  That check is an application‑level comparison, not a
transaction: the final write is atomic per document, but a concurrent
writer between the read and the write is not detected.

Store failures are logged with their cause and re‑raised as
``UpstreamError`` carrying a generic message.
"""

import logging
from typing import Any, Dict, List, Optional

from ..core.context import AppContext
from ..core.errors import ConflictError, NotFoundError, PermissionDeniedError, UpstreamError, ValidationError
from ..schemas.appointment import (
    STATUS_CANCELLED,
    STATUS_CONFIRMED,
    Appointment,
    AppointmentList,
    AppointmentResult,
    CancelResult,
)

logger = logging.getLogger(__name__)

COLLECTION = "appointments"

MISSING_PROGRAM_TITLE = "Program not found"
ERROR_PROGRAM_TITLE = "Error loading program"


def _require(value: Any, field: str) -> None:
    if value is None or (isinstance(value, str) and not value.strip()):
        raise ValidationError(f"Missing required field: {field}")


def _require_time_slots(time_slot: Optional[List[str]]) -> List[str]:
    if time_slot is None:
        raise ValidationError("Missing required field: time_slot")
    if not isinstance(time_slot, list) or len(time_slot) == 0:
        raise ValidationError("At least one time slot must be selected")
    return list(time_slot)


def placeholder_program(program_id: str, title: str) -> Dict[str, Any]:
    """Stand‑in shown when an appointment's program cannot be loaded."""
    return {"id": program_id, "title": title, "placeholder": True}


class AppointmentService:
    """Create, update, cancel and list appointments."""

    def __init__(self, ctx: AppContext) -> None:
        self.store = ctx.store
        self.cache = ctx.cache

    async def _load_owned(self, appointment_id: str, user_email: str, action: str) -> Dict[str, Any]:
        try:
            document = await self.store.get(COLLECTION, appointment_id)
        except Exception as exc:
            logger.exception("Error loading appointment %s", appointment_id)
            raise UpstreamError(f"Failed to {action} appointment. Please try again later.") from exc
        if document is None:
            raise NotFoundError("Appointment not found")
        if document.get("user_email") != user_email:
            logger.warning(
                "User %s tried to %s appointment %s owned by another user",
                user_email,
                action,
                appointment_id,
            )
            raise PermissionDeniedError(f"You do not have permission to {action} this appointment")
        return document

    async def create_appointment(
        self,
        program_id: Optional[str],
        user_email: Optional[str],
        time_slot: Optional[List[str]],
    ) -> AppointmentResult:
        """Book ``user_email`` onto ``program_id`` for the given slots."""
        _require(program_id, "program_id")
        _require(user_email, "user_email")
        slots = _require_time_slots(time_slot)

        try:
            program = await self.cache.get_program(program_id)
        except Exception as exc:
            logger.exception("Error loading program %s for a new appointment", program_id)
            raise UpstreamError("Failed to create appointment. Please try again later.") from exc
        if program is None:
            raise NotFoundError(f"Program {program_id} not found")

        now = self.store.timestamp()
        document = {
            "program_id": program_id,
            "user_email": user_email,
            "time_slot": slots,
            "status": STATUS_CONFIRMED,
            "created_at": now,
            "updated_at": now,
        }
        logger.info("Creating appointment for %s on program %s", user_email, program_id)
        try:
            appointment_id = await self.store.create(COLLECTION, document)
        except Exception as exc:
            logger.exception("Error creating appointment for %s", user_email)
            raise UpstreamError("Failed to create appointment. Please try again later.") from exc
        logger.info("Appointment created successfully: %s", appointment_id)
        return AppointmentResult(appointment_id=appointment_id, message="Appointment booked successfully")

    async def update_appointment(
        self,
        appointment_id: Optional[str],
        time_slot: Optional[List[str]],
        user_email: Optional[str],
    ) -> AppointmentResult:
        """Replace the selected time slots of an appointment the caller owns.

        Program, owner and status are never changed here.
        """
        _require(appointment_id, "appointment_id")
        _require(user_email, "user_email")
        slots = _require_time_slots(time_slot)

        document = await self._load_owned(appointment_id, user_email, "update")
        if document.get("status") == STATUS_CANCELLED:
            raise ConflictError("Cannot update a cancelled appointment")

        try:
            await self.store.update(
                COLLECTION,
                appointment_id,
                {"time_slot": slots, "updated_at": self.store.timestamp()},
            )
        except Exception as exc:
            logger.exception("Error updating appointment %s", appointment_id)
            raise UpstreamError("Failed to update appointment. Please try again later.") from exc
        logger.info("Appointment %s updated by %s", appointment_id, user_email)
        return AppointmentResult(appointment_id=appointment_id, message="Appointment updated successfully")

    async def cancel_appointment(self, appointment_id: Optional[str], user_email: Optional[str]) -> CancelResult:
        """Move an appointment the caller owns from confirmed to cancelled.

        A second cancel fails with ``ConflictError`` rather than being a
        no‑op.  The record is kept.
        """
        _require(appointment_id, "appointmentId")
        _require(user_email, "userEmail")

        document = await self._load_owned(appointment_id, user_email, "cancel")
        if document.get("status") == STATUS_CANCELLED:
            raise ConflictError("Appointment is already cancelled")

        now = self.store.timestamp()
        try:
            await self.store.update(
                COLLECTION,
                appointment_id,
                {"status": STATUS_CANCELLED, "cancelled_at": now, "updated_at": now},
            )
        except Exception as exc:
            logger.exception("Error cancelling appointment %s", appointment_id)
            raise UpstreamError("Failed to cancel appointment. Please try again later.") from exc
        logger.info("Appointment %s cancelled by %s", appointment_id, user_email)
        return CancelResult(message="Appointment cancelled successfully", appointment_id=appointment_id)

    async def _program_details(self, program_id: str) -> Dict[str, Any]:
        try:
            program = await self.cache.get_program(program_id)
        except Exception:
            logger.exception("Error loading program %s for appointment listing", program_id)
            return placeholder_program(program_id, ERROR_PROGRAM_TITLE)
        if program is None:
            return placeholder_program(program_id, MISSING_PROGRAM_TITLE)
        return program.model_dump(by_alias=True)

    async def get_user_appointments(self, user_email: Optional[str]) -> AppointmentList:
        """Active appointments of ``user_email``, newest first, with program details."""
        _require(user_email, "user_email")
        try:
            documents = await self.store.query(COLLECTION, "user_email", user_email)
        except Exception as exc:
            logger.exception("Error fetching appointments for %s", user_email)
            raise UpstreamError("Failed to load appointments. Please try again later.") from exc

        appointments: List[Appointment] = []
        for document in documents:
            if document.get("status") == STATUS_CANCELLED:
                continue
            appointment = Appointment.model_validate(document)
            appointment.program = await self._program_details(appointment.program_id)
            appointments.append(appointment)

        appointments.sort(key=lambda a: a.created_at or "", reverse=True)
        return AppointmentList(appointments=appointments, count=len(appointments))
