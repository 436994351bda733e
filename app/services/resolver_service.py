"""Provider resolution for new service requests.

A request is routed to one provider of the boat's home port by narrowing the
candidate set in stages: coverage, declared capability, the client's history
with each candidate, and finally the lowest id. Each stage stops as soon as a
single candidate is left, so the same directory content always yields the same
provider. ``None`` means no provider could be found and the request must be
assigned by hand.
"""
import logging
from datetime import date

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.models.service_request import RequestStatus, ServiceRequest, ServiceRequestCreate
from app.models.user import User, UserProfile
from app.services.directory_service import (
    get_boat,
    get_capable_providers,
    get_client_history,
    get_port_providers,
    get_service_request,
    get_user,
    run_query,
)
from app.services.errors import (
    AlreadyAssignedError,
    ForbiddenActionError,
    InvalidTransitionError,
)

logger = logging.getLogger(__name__)


def rank_by_history(history: dict[int, tuple[int, date]]) -> int | None:
    """Most requests first, then most recent day, then lowest id."""
    if not history:
        return None
    ranked = sorted(history.items(), key=lambda item: item[0])
    ranked.sort(key=lambda item: item[1][1], reverse=True)
    ranked.sort(key=lambda item: item[1][0], reverse=True)
    return ranked[0][0]


async def resolve_provider(
    session: AsyncSession,
    boat_id: int,
    service_category_id: int,
    client_id: int,
    provider_profile: str | None = None,
) -> int | None:
    profile = provider_profile or settings.resolver_provider_profile
    boat = await get_boat(session, boat_id)
    if boat.port_id is None:
        logger.info("Boat %d has no home port, request left unresolved", boat_id)
        return None

    covering = await get_port_providers(session, boat.port_id, profile)
    if not covering:
        logger.info("No %s covers port %d, request left unresolved", profile, boat.port_id)
        return None
    if len(covering) == 1:
        logger.debug("Resolved boat %d by coverage: %d", boat_id, covering[0])
        return covering[0]

    capable = await get_capable_providers(session, covering, service_category_id)
    if len(capable) == 1:
        logger.debug("Resolved boat %d by capability: %d", boat_id, capable[0])
        return capable[0]
    candidates = capable or covering

    history = await get_client_history(session, client_id, candidates)
    best = rank_by_history(history)
    if best is not None:
        logger.debug("Resolved boat %d by client %d history: %d", boat_id, client_id, best)
        return best

    logger.debug("Resolved boat %d by lowest id among %s", boat_id, candidates)
    return min(candidates)


async def assign_provider(session: AsyncSession, request: ServiceRequest, provider_id: int) -> ServiceRequest:
    """Write the resolved provider only if none is set yet."""
    result = await run_query(
        session,
        update(ServiceRequest)
        .where(
            ServiceRequest.id == request.id,
            ServiceRequest.assigned_provider_id.is_(None),
        )
        .values(assigned_provider_id=provider_id),
    )
    if not result.rowcount:
        raise AlreadyAssignedError(request.id)
    await session.refresh(request)
    logger.info("Service request %d assigned to provider %d", request.id, provider_id)
    return request


async def create_service_request(
    session: AsyncSession, client_id: int, data: ServiceRequestCreate
) -> ServiceRequest:
    boat = await get_boat(session, data.boat_id)
    if boat.owner_id != client_id:
        raise ForbiddenActionError("Boat does not belong to this client")
    request = ServiceRequest(
        client_id=client_id,
        boat_id=boat.id,
        service_category_id=data.service_category_id,
        description=data.description.strip(),
        urgency=data.urgency.value,
        status=RequestStatus.SUBMITTED.value,
    )
    session.add(request)
    await session.flush()
    await session.refresh(request)

    provider_id = await resolve_provider(session, boat.id, data.service_category_id, client_id)
    if provider_id is not None:
        await assign_provider(session, request, provider_id)
    return request


async def retry_resolution(session: AsyncSession, request_id: int, actor_id: int) -> ServiceRequest:
    """Run the resolver again for a request that was left unresolved."""
    request = await get_service_request(session, request_id)
    if request.client_id != actor_id:
        actor = await get_user(session, actor_id)
        if not actor or actor.profile != UserProfile.CORPORATE.value:
            raise ForbiddenActionError("Only the client or headquarters can re-run resolution")
    if request.assigned_provider_id is not None:
        raise AlreadyAssignedError(request.id)
    provider_id = await resolve_provider(session, request.boat_id, request.service_category_id, request.client_id)
    if provider_id is not None:
        await assign_provider(session, request, provider_id)
    return request


async def list_forward_candidates(session: AsyncSession, request: ServiceRequest) -> list[User]:
    """Nautical companies covering the boat's port and offering the requested service."""
    boat = await get_boat(session, request.boat_id)
    if boat.port_id is None:
        return []
    companies = await get_port_providers(session, boat.port_id, settings.forward_company_profile)
    eligible = await get_capable_providers(session, companies, request.service_category_id)
    if not eligible:
        return []
    result = await run_query(session, select(User).where(User.id.in_(eligible)).order_by(User.id))
    return list(result.scalars().all())


async def forward_request(
    session: AsyncSession, request_id: int, actor_id: int, company_id: int
) -> ServiceRequest:
    request = await get_service_request(session, request_id)
    if request.assigned_provider_id != actor_id:
        raise ForbiddenActionError("Only the assigned provider can forward this request")
    if request.status != RequestStatus.SUBMITTED.value:
        raise InvalidTransitionError(f"Cannot forward a request in status {request.status}")
    candidates = await list_forward_candidates(session, request)
    if company_id not in {c.id for c in candidates}:
        raise ForbiddenActionError("Company does not cover this port or service")
    request.status = RequestStatus.FORWARDED.value
    request.forwarded_company_id = company_id
    session.add(request)
    await session.flush()
    await session.refresh(request)
    logger.info("Service request %d forwarded to company %d", request.id, company_id)
    return request

