"""Typed failures raised by the scheduling engine."""


class SchedulingError(Exception):
    """Base class; ``kind`` and ``status_code`` drive the API translation."""

    kind = "SchedulingError"
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(SchedulingError):
    """Service, staff or appointment absent or not owned by the caller."""

    kind = "NotFound"
    status_code = 404


class BadRequestError(SchedulingError):
    """Malformed input or an illegal lifecycle transition."""

    kind = "BadRequest"
    status_code = 400


class ConflictError(SchedulingError):
    """Staff ineligible, unavailable, or no slot for a queue assignment."""

    kind = "Conflict"
    status_code = 409
