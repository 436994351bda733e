import logging
from collections.abc import Iterable
from datetime import date
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.exc import InterfaceError, OperationalError
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.directory import Boat, UserPort, UserServiceCategory
from app.models.service_request import ServiceRequest
from app.models.user import User
from app.services.errors import DataUnavailableError, NotFoundError

logger = logging.getLogger(__name__)


async def run_query(session: AsyncSession, stmt: Any):
    """Execute against the directory store, reporting connection-level failures as DataUnavailableError."""
    try:
        return await session.execute(stmt)
    except (OperationalError, InterfaceError) as e:
        logger.error("Directory store query failed: %s", e)
        raise DataUnavailableError("Directory store unavailable") from e


async def get_boat(session: AsyncSession, boat_id: int) -> Boat:
    result = await run_query(session, select(Boat).where(Boat.id == boat_id))
    boat = result.scalar_one_or_none()
    if not boat:
        raise NotFoundError("Boat", boat_id)
    return boat


async def get_user(session: AsyncSession, user_id: int) -> User | None:
    result = await run_query(session, select(User).where(User.id == user_id))
    return result.scalar_one_or_none()


async def get_service_request(session: AsyncSession, request_id: int) -> ServiceRequest:
    result = await run_query(session, select(ServiceRequest).where(ServiceRequest.id == request_id))
    request = result.scalar_one_or_none()
    if not request:
        raise NotFoundError("Service request", request_id)
    return request


async def get_port_providers(session: AsyncSession, port_id: int, profile: str) -> list[int]:
    """Ids of users with `profile` covering the port, ascending."""
    result = await run_query(
        session,
        select(User.id)
        .join(UserPort, UserPort.user_id == User.id)
        .where(UserPort.port_id == port_id, User.profile == profile)
        .distinct()
        .order_by(User.id),
    )
    return [int(row[0]) for row in result.all()]


async def get_capable_providers(
    session: AsyncSession, provider_ids: Iterable[int], service_category_id: int
) -> list[int]:
    ids = list(provider_ids)
    if not ids:
        return []
    result = await run_query(
        session,
        select(UserServiceCategory.user_id)
        .where(
            UserServiceCategory.service_category_id == service_category_id,
            UserServiceCategory.user_id.in_(ids),
        )
        .distinct()
        .order_by(UserServiceCategory.user_id),
    )
    return [int(row[0]) for row in result.all()]


async def get_client_history(
    session: AsyncSession, client_id: int, provider_ids: Iterable[int]
) -> dict[int, tuple[int, date]]:
    """Per provider: (number of the client's past requests, calendar day of the most recent one)."""
    ids = list(provider_ids)
    if not ids:
        return {}
    result = await run_query(
        session,
        select(
            ServiceRequest.assigned_provider_id,
            func.count(ServiceRequest.id),
            func.max(ServiceRequest.created_at),
        )
        .where(
            ServiceRequest.client_id == client_id,
            ServiceRequest.assigned_provider_id.in_(ids),
        )
        .group_by(ServiceRequest.assigned_provider_id),
    )
    return {int(pid): (int(count), last.date()) for pid, count, last in result.all()}
