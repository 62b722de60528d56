"""Error taxonomy shared by the scheduling services and HTTP layer."""


class SchedulingError(Exception):
    """Base class for scheduling errors surfaced to callers."""

    status_code: int = 400

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(SchedulingError):
    """Raised for malformed input rejected before evaluation."""

    status_code = 400

    def __init__(self, message: str, field: str | None = None) -> None:
        super().__init__(message)
        self.field = field


class NotFoundError(SchedulingError):
    """Raised when an id that must exist does not resolve."""

    status_code = 404


class SlotUnavailableError(SchedulingError):
    """Raised when a requested timeslot is not offered for the date."""

    status_code = 409


class QuotaRaceError(SlotUnavailableError):
    """Raised when a slot filled up between the availability read and the reserve."""

    def __init__(self, message: str = "Slot no longer available") -> None:
        super().__init__(message)
