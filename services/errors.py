class SchedulingError(Exception):
    """Base for every failure the scheduling core reports to its caller."""

    status_code = 500
    code = "error"

    def __init__(self, message: str = None, details=None):
        super().__init__(message or self.__class__.__doc__)
        self.message = message or self.__class__.__doc__
        self.details = details or []

    def to_dict(self) -> dict:
        body = {"error": self.message, "code": self.code}
        if self.details:
            body["details"] = self.details
        return body


class ValidationError(SchedulingError):
    """Invalid data"""

    status_code = 400
    code = "validation_error"


class SlotUnavailableError(SchedulingError):
    """Slot is no longer available"""

    status_code = 409
    code = "slot_unavailable"


class ConflictError(SchedulingError):
    """Conflicting state"""

    status_code = 409
    code = "conflict"


class NotFoundError(SchedulingError):
    """Not found"""

    status_code = 404
    code = "not_found"


class StoreError(SchedulingError):
    """Storage failure"""

    status_code = 500
    code = "store_error"
