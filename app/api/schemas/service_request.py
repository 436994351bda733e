from typing import Literal

from pydantic import BaseModel, Field

from app.models.service_request import ServiceRequestPublic, Urgency


class CreateServiceRequest(BaseModel):
    boat_id: int
    service_category_id: int
    description: str = Field(min_length=1)
    urgency: Urgency = Urgency.NORMAL


class ResolutionResponse(BaseModel):
    request: ServiceRequestPublic
    resolution: Literal["resolved", "unresolved"]


class ForwardRequest(BaseModel):
    company_id: int


class CompanyPublic(BaseModel):
    id: int
    company_name: str | None = None
    email: str
