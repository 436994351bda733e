from app.models.user import User, UserProfile, UserPublic
from app.models.directory import Boat, Port, ServiceCategory, UserPort, UserServiceCategory
from app.models.service_request import (
    RequestStatus,
    ServiceRequest,
    ServiceRequestCreate,
    ServiceRequestPublic,
    Urgency,
)
from app.models.appointment import (
    Appointment,
    AppointmentCreate,
    AppointmentPublic,
    AppointmentStatus,
    AppointmentUpdate,
    ScheduleLock,
)

__all__ = [
    "User",
    "UserProfile",
    "UserPublic",
    "Boat",
    "Port",
    "ServiceCategory",
    "UserPort",
    "UserServiceCategory",
    "RequestStatus",
    "ServiceRequest",
    "ServiceRequestCreate",
    "ServiceRequestPublic",
    "Urgency",
    "Appointment",
    "AppointmentCreate",
    "AppointmentPublic",
    "AppointmentStatus",
    "AppointmentUpdate",
    "ScheduleLock",
]
