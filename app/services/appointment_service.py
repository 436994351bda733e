import logging
from datetime import UTC, date, datetime, time

from sqlalchemy import or_, select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.appointment import (
    Appointment,
    AppointmentCreate,
    AppointmentStatus,
    AppointmentUpdate,
    ScheduleLock,
)
from app.models.user import UserProfile
from app.services.directory_service import get_user, run_query
from app.services.errors import (
    AppointmentConflictError,
    ForbiddenActionError,
    InvalidTransitionError,
    NotFoundError,
)

logger = logging.getLogger(__name__)

PROFESSIONAL_PROFILES = {UserProfile.BOAT_MANAGER.value, UserProfile.NAUTICAL_COMPANY.value}
RESPONSE_STATUSES = {AppointmentStatus.CONFIRMED, AppointmentStatus.CANCELLED}
TIME_FIELDS = {"appointment_date", "start_time", "duration_minutes"}
NULLABLE_FIELDS = {"duration_minutes", "service_category_id", "description"}

_LOCK_INSERTS = {"postgresql": pg_insert, "sqlite": sqlite_insert}


def _utc_naive_now() -> datetime:
    return datetime.now(UTC).replace(tzinfo=None)


def conflict_window(start: time, duration_minutes: int | None) -> tuple[int, int]:
    """Half-open [start, start+duration) in seconds since midnight; no duration is a zero-width instant."""
    begin = start.hour * 3600 + start.minute * 60 + start.second
    return begin, begin + (duration_minutes or 0) * 60


def windows_overlap(a: tuple[int, int], b: tuple[int, int]) -> bool:
    return a[0] < b[1] and b[0] < a[1]


async def _lock_provider_day(session: AsyncSession, provider_id: int, day: date) -> None:
    """Serialize check-then-insert for one provider calendar day until the transaction ends."""
    insert = _LOCK_INSERTS[session.get_bind().dialect.name]
    await run_query(
        session,
        insert(ScheduleLock).values(provider_id=provider_id, lock_date=day).on_conflict_do_nothing(),
    )
    await run_query(
        session,
        select(ScheduleLock)
        .where(ScheduleLock.provider_id == provider_id, ScheduleLock.lock_date == day)
        .with_for_update(),
    )


async def find_conflict(
    session: AsyncSession,
    provider_id: int,
    day: date,
    start: time,
    duration_minutes: int | None,
    exclude_id: int | None = None,
) -> Appointment | None:
    """First live appointment on the provider's day whose window overlaps the candidate."""
    q = (
        select(Appointment)
        .where(
            Appointment.provider_id == provider_id,
            Appointment.appointment_date == day,
            Appointment.status != AppointmentStatus.CANCELLED.value,
        )
        .order_by(Appointment.start_time, Appointment.id)
    )
    if exclude_id is not None:
        q = q.where(Appointment.id != exclude_id)
    result = await run_query(session, q)
    candidate = conflict_window(start, duration_minutes)
    for existing in result.scalars().all():
        if windows_overlap(candidate, conflict_window(existing.start_time, existing.duration_minutes)):
            return existing
    return None


def _initial_status(data: AppointmentCreate) -> AppointmentStatus:
    if data.status is None:
        return AppointmentStatus.PENDING if data.invitee_id is not None else AppointmentStatus.CONFIRMED
    if data.status not in (AppointmentStatus.PENDING, AppointmentStatus.CONFIRMED):
        raise InvalidTransitionError(f"Cannot create an appointment as {data.status.value}")
    return data.status


async def propose_appointment(session: AsyncSession, actor_id: int, data: AppointmentCreate) -> Appointment:
    actor = await get_user(session, actor_id)
    if not actor or actor.profile not in PROFESSIONAL_PROFILES:
        raise ForbiddenActionError("Only professionals can create appointments")
    if data.invitee_id == actor_id:
        raise ForbiddenActionError("Cannot invite yourself")
    if data.invitee_id is not None:
        invitee = await get_user(session, data.invitee_id)
        if not invitee or invitee.profile not in PROFESSIONAL_PROFILES:
            raise ForbiddenActionError("Only professionals can be invited")
    provider_id = data.provider_id if data.provider_id is not None else actor_id
    if provider_id not in (actor_id, data.invitee_id):
        raise ForbiddenActionError("Appointments can only be booked on the creator's or invitee's calendar")
    status = _initial_status(data)

    await _lock_provider_day(session, provider_id, data.appointment_date)
    existing = await find_conflict(
        session, provider_id, data.appointment_date, data.start_time, data.duration_minutes
    )
    if existing:
        logger.info(
            "Rejected slot %s %s for provider %d: overlaps appointment %d",
            data.appointment_date, data.start_time, provider_id, existing.id,
        )
        raise AppointmentConflictError(existing.id)

    appointment = Appointment(
        provider_id=provider_id,
        appointment_date=data.appointment_date,
        start_time=data.start_time,
        duration_minutes=data.duration_minutes,
        client_id=data.client_id,
        boat_id=data.boat_id,
        service_category_id=data.service_category_id,
        creator_id=actor_id,
        invitee_id=data.invitee_id,
        status=status.value,
        description=data.description,
    )
    session.add(appointment)
    await session.flush()
    await session.refresh(appointment)
    logger.info("Appointment %d created for provider %d as %s", appointment.id, provider_id, status.value)
    return appointment


async def get_appointment(session: AsyncSession, appointment_id: int) -> Appointment:
    result = await run_query(session, select(Appointment).where(Appointment.id == appointment_id))
    appointment = result.scalar_one_or_none()
    if not appointment:
        raise NotFoundError("Appointment", appointment_id)
    return appointment


async def list_provider_day(
    session: AsyncSession, provider_id: int, day: date, viewer_id: int | None = None
) -> list[Appointment]:
    """A provider's calendar day. Other viewers only see the entries they take part in."""
    q = (
        select(Appointment)
        .where(Appointment.provider_id == provider_id, Appointment.appointment_date == day)
        .order_by(Appointment.start_time, Appointment.id)
    )
    if viewer_id is not None and viewer_id != provider_id:
        q = q.where(
            or_(
                Appointment.creator_id == viewer_id,
                Appointment.invitee_id == viewer_id,
                Appointment.client_id == viewer_id,
            )
        )
    result = await run_query(session, q)
    return list(result.scalars().all())


async def update_appointment(
    session: AsyncSession, appointment_id: int, actor_id: int, changes: AppointmentUpdate
) -> Appointment:
    appointment = await get_appointment(session, appointment_id)
    if appointment.creator_id != actor_id:
        raise ForbiddenActionError("Only the creator can edit this appointment")
    if appointment.status == AppointmentStatus.CANCELLED.value:
        raise InvalidTransitionError("Cancelled appointments cannot be edited")

    fields = {
        key: value
        for key, value in changes.model_dump(exclude_unset=True).items()
        if value is not None or key in NULLABLE_FIELDS
    }
    if fields.keys() & TIME_FIELDS:
        day = fields.get("appointment_date") or appointment.appointment_date
        start = fields.get("start_time") or appointment.start_time
        duration = fields["duration_minutes"] if "duration_minutes" in fields else appointment.duration_minutes
        await _lock_provider_day(session, appointment.provider_id, day)
        existing = await find_conflict(
            session, appointment.provider_id, day, start, duration, exclude_id=appointment.id
        )
        if existing:
            logger.info("Rejected move of appointment %d: overlaps appointment %d", appointment.id, existing.id)
            raise AppointmentConflictError(existing.id)

    for key, value in fields.items():
        setattr(appointment, key, value)
    appointment.updated_at = _utc_naive_now()
    session.add(appointment)
    await session.flush()
    await session.refresh(appointment)
    return appointment


async def respond_to_appointment(
    session: AsyncSession, appointment_id: int, actor_id: int, decision: AppointmentStatus
) -> Appointment:
    """Invitee accepts (confirmed) or rejects (cancelled) a pending appointment."""
    appointment = await get_appointment(session, appointment_id)
    if appointment.invitee_id is None or appointment.invitee_id != actor_id:
        raise ForbiddenActionError("Only the invitee can respond to this appointment")
    if decision not in RESPONSE_STATUSES:
        raise InvalidTransitionError(f"Invitees cannot move an appointment to {decision.value}")
    if appointment.status != AppointmentStatus.PENDING.value:
        raise InvalidTransitionError(f"Appointment is already {appointment.status}")

    appointment.status = decision.value
    appointment.updated_at = _utc_naive_now()
    session.add(appointment)
    await session.flush()
    await session.refresh(appointment)
    logger.info("Appointment %d %s by invitee %d", appointment.id, decision.value, actor_id)
    return appointment


async def delete_appointment(session: AsyncSession, appointment_id: int, actor_id: int) -> None:
    appointment = await get_appointment(session, appointment_id)
    if appointment.creator_id != actor_id:
        raise ForbiddenActionError("Only the creator can delete this appointment")
    await session.delete(appointment)
    await session.flush()
    logger.info("Appointment %d deleted by creator %d", appointment_id, actor_id)
