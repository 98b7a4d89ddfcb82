"""
Appointment endpoints for API v1.

All routes require a signed‑in user.  The ``user_email`` of a request
defaults to the caller's own e‑mail; naming somebody else's e‑mail is
refused unless the request uses the privileged admin token.  Ownership
of existing appointments is then enforced by ``AppointmentService``.
"""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Path, Query, status

from community_sport_api.app.core.context import AppContext, get_context
from community_sport_api.app.core.errors import ServiceError, to_http_exception
from community_sport_api.app.core.security import get_current_user
from community_sport_api.app.schemas.appointment import (
    AppointmentCancel,
    AppointmentCreate,
    AppointmentList,
    AppointmentResult,
    AppointmentUpdate,
    CancelResult,
)
from community_sport_api.app.services.appointment_service import AppointmentService

router = APIRouter()


def get_appointment_service(ctx: AppContext = Depends(get_context)) -> AppointmentService:
    return AppointmentService(ctx)


def _acting_email(current_user: dict, requested: Optional[str]) -> Optional[str]:
    """Resolve whose appointments a request acts on."""
    if current_user.get("privileged"):
        return requested
    own_email = current_user.get("email")
    if requested and requested.strip().lower() != (own_email or "").lower():
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail={"kind": "permission_denied", "message": "You can only manage your own appointments"},
        )
    return own_email


@router.post("/", response_model=AppointmentResult, status_code=status.HTTP_201_CREATED)
async def create_appointment(
    body: AppointmentCreate,
    service: AppointmentService = Depends(get_appointment_service),
    current_user: dict = Depends(get_current_user),
) -> AppointmentResult:
    user_email = _acting_email(current_user, body.user_email)
    try:
        return await service.create_appointment(body.program_id, user_email, body.time_slot)
    except ServiceError as e:
        raise to_http_exception(e) from e


@router.get("/", response_model=AppointmentList)
async def list_my_appointments(
    user_email: Optional[str] = Query(None),
    service: AppointmentService = Depends(get_appointment_service),
    current_user: dict = Depends(get_current_user),
) -> AppointmentList:
    """Active appointments of the caller, newest first, with program details."""
    try:
        return await service.get_user_appointments(_acting_email(current_user, user_email))
    except ServiceError as e:
        raise to_http_exception(e) from e


@router.put("/{appointment_id}", response_model=AppointmentResult)
async def update_appointment(
    appointment_id: str = Path(..., description="ID of the appointment"),
    body: Optional[AppointmentUpdate] = None,
    service: AppointmentService = Depends(get_appointment_service),
    current_user: dict = Depends(get_current_user),
) -> AppointmentResult:
    body = body or AppointmentUpdate()
    user_email = _acting_email(current_user, body.user_email)
    try:
        return await service.update_appointment(appointment_id, body.time_slot, user_email)
    except ServiceError as e:
        raise to_http_exception(e) from e


@router.post("/{appointment_id}/cancel", response_model=CancelResult)
async def cancel_appointment(
    appointment_id: str = Path(..., description="ID of the appointment"),
    body: Optional[AppointmentCancel] = None,
    service: AppointmentService = Depends(get_appointment_service),
    current_user: dict = Depends(get_current_user),
) -> CancelResult:
    """Cancel an appointment.  The record is kept with status ``cancelled``."""
    user_email = _acting_email(current_user, body.user_email if body else None)
    try:
        return await service.cancel_appointment(appointment_id, user_email)
    except ServiceError as e:
        raise to_http_exception(e) from e
