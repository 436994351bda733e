from datetime import date

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_user, get_session
from app.api.schemas.appointment import RespondRequest
from app.models.appointment import (
    Appointment,
    AppointmentCreate,
    AppointmentPublic,
    AppointmentStatus,
    AppointmentUpdate,
)
from app.models.user import User
from app.services.appointment_service import (
    delete_appointment,
    get_appointment,
    list_provider_day,
    propose_appointment,
    respond_to_appointment,
    update_appointment,
)
from app.services.errors import ForbiddenActionError

router = APIRouter(prefix="/appointments", tags=["appointments"])


def _to_public(a: Appointment) -> AppointmentPublic:
    return AppointmentPublic.model_validate(a, from_attributes=True)


@router.post("", response_model=AppointmentPublic, status_code=status.HTTP_201_CREATED)
async def create_appointment(
    body: AppointmentCreate,
    session: AsyncSession = Depends(get_session),
    current_user: User = Depends(get_current_user),
) -> AppointmentPublic:
    """Book a slot. 409 with the colliding appointment id if the provider is busy."""
    appointment = await propose_appointment(session, current_user.id, body)
    return _to_public(appointment)


@router.get("", response_model=list[AppointmentPublic])
async def provider_planning(
    day: date = Query(..., alias="date"),
    provider_id: int | None = Query(None),
    session: AsyncSession = Depends(get_session),
    current_user: User = Depends(get_current_user),
) -> list[AppointmentPublic]:
    """One provider's calendar day, ordered by start time. Defaults to the caller's own calendar;
    on someone else's calendar only shared appointments are listed."""
    appointments = await list_provider_day(session, provider_id or current_user.id, day, viewer_id=current_user.id)
    return [_to_public(a) for a in appointments]


@router.get("/{appointment_id}", response_model=AppointmentPublic)
async def read_appointment(
    appointment_id: int,
    session: AsyncSession = Depends(get_session),
    current_user: User = Depends(get_current_user),
) -> AppointmentPublic:
    appointment = await get_appointment(session, appointment_id)
    parties = (appointment.creator_id, appointment.invitee_id, appointment.provider_id, appointment.client_id)
    if current_user.id not in parties:
        raise ForbiddenActionError("Not a party to this appointment")
    return _to_public(appointment)


@router.patch("/{appointment_id}", response_model=AppointmentPublic)
async def edit_appointment(
    appointment_id: int,
    body: AppointmentUpdate,
    session: AsyncSession = Depends(get_session),
    current_user: User = Depends(get_current_user),
) -> AppointmentPublic:
    appointment = await update_appointment(session, appointment_id, current_user.id, body)
    return _to_public(appointment)


@router.post("/{appointment_id}/respond", response_model=AppointmentPublic)
async def respond(
    appointment_id: int,
    body: RespondRequest,
    session: AsyncSession = Depends(get_session),
    current_user: User = Depends(get_current_user),
) -> AppointmentPublic:
    appointment = await respond_to_appointment(
        session, appointment_id, current_user.id, AppointmentStatus(body.decision)
    )
    return _to_public(appointment)


@router.delete("/{appointment_id}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_appointment(
    appointment_id: int,
    session: AsyncSession = Depends(get_session),
    current_user: User = Depends(get_current_user),
) -> None:
    await delete_appointment(session, appointment_id, current_user.id)
