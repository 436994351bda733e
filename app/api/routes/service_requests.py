import logging

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_user, get_session
from app.api.schemas.service_request import (
    CompanyPublic,
    CreateServiceRequest,
    ForwardRequest,
    ResolutionResponse,
)
from app.models.service_request import ServiceRequest, ServiceRequestCreate, ServiceRequestPublic
from app.models.user import User
from app.services.directory_service import get_service_request
from app.services.errors import ForbiddenActionError
from app.services.resolver_service import (
    create_service_request,
    forward_request,
    list_forward_candidates,
    retry_resolution,
)

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/service-requests", tags=["service-requests"])


def _to_public(r: ServiceRequest) -> ServiceRequestPublic:
    return ServiceRequestPublic.model_validate(r, from_attributes=True)


def _resolution(r: ServiceRequest) -> ResolutionResponse:
    return ResolutionResponse(
        request=_to_public(r),
        resolution="resolved" if r.assigned_provider_id is not None else "unresolved",
    )


def _ensure_party(r: ServiceRequest, user: User) -> None:
    if user.id not in (r.client_id, r.assigned_provider_id, r.forwarded_company_id):
        raise ForbiddenActionError("Not a party to this service request")


@router.post("", response_model=ResolutionResponse, status_code=status.HTTP_201_CREATED)
async def submit_service_request(
    body: CreateServiceRequest,
    session: AsyncSession = Depends(get_session),
    current_user: User = Depends(get_current_user),
) -> ResolutionResponse:
    """Create the request and route it to a provider of the boat's home port.
    An unresolved request is still created; it waits for manual assignment."""
    data = ServiceRequestCreate(
        boat_id=body.boat_id,
        service_category_id=body.service_category_id,
        description=body.description,
        urgency=body.urgency,
    )
    request = await create_service_request(session, current_user.id, data)
    if request.assigned_provider_id is None:
        logger.info("Service request %d needs manual assignment", request.id)
    return _resolution(request)


@router.get("/{request_id}", response_model=ServiceRequestPublic)
async def read_service_request(
    request_id: int,
    session: AsyncSession = Depends(get_session),
    current_user: User = Depends(get_current_user),
) -> ServiceRequestPublic:
    request = await get_service_request(session, request_id)
    _ensure_party(request, current_user)
    return _to_public(request)


@router.post("/{request_id}/resolve", response_model=ResolutionResponse)
async def resolve_service_request(
    request_id: int,
    session: AsyncSession = Depends(get_session),
    current_user: User = Depends(get_current_user),
) -> ResolutionResponse:
    request = await retry_resolution(session, request_id, current_user.id)
    return _resolution(request)


@router.get("/{request_id}/companies", response_model=list[CompanyPublic])
async def eligible_companies(
    request_id: int,
    session: AsyncSession = Depends(get_session),
    current_user: User = Depends(get_current_user),
) -> list[CompanyPublic]:
    """Nautical companies the assigned provider may forward this request to."""
    request = await get_service_request(session, request_id)
    _ensure_party(request, current_user)
    companies = await list_forward_candidates(session, request)
    return [CompanyPublic(id=c.id, company_name=c.company_name, email=c.email) for c in companies]


@router.post("/{request_id}/forward", response_model=ServiceRequestPublic)
async def forward_service_request(
    body: ForwardRequest,
    request_id: int,
    session: AsyncSession = Depends(get_session),
    current_user: User = Depends(get_current_user),
) -> ServiceRequestPublic:
    request = await forward_request(session, request_id, current_user.id, body.company_id)
    return _to_public(request)
