from typing import Literal

from pydantic import BaseModel


class RespondRequest(BaseModel):
    decision: Literal["confirmed", "cancelled"]


class ConflictDetail(BaseModel):
    message: str
    conflicting_appointment_id: int
