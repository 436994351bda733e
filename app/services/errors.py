class DispatchError(Exception):
    """Base class for user-visible resolver/scheduler errors."""


class NotFoundError(DispatchError):
    def __init__(self, entity: str, entity_id: int) -> None:
        super().__init__(f"{entity} {entity_id} not found")
        self.entity = entity
        self.entity_id = entity_id


class ForbiddenActionError(DispatchError):
    pass


class InvalidTransitionError(DispatchError):
    pass


class AppointmentConflictError(DispatchError):
    def __init__(self, existing_id: int) -> None:
        super().__init__(f"Slot overlaps appointment {existing_id}")
        self.existing_id = existing_id


class AlreadyAssignedError(DispatchError):
    def __init__(self, request_id: int) -> None:
        super().__init__(f"Service request {request_id} already has an assigned provider")
        self.request_id = request_id


class DataUnavailableError(DispatchError):
    """The directory store could not be reached. Never treated as an empty result."""
