"""PayStream exception hierarchy.

All PayStream-specific exceptions inherit from PayStreamError.
"""


class PayStreamError(Exception):
    """Base exception for all PayStream errors."""


class InputValidationError(PayStreamError):
    """Raised when input to a session start is rejected.

    Named InputValidationError (not ValidationError) to avoid
    collision with pydantic.ValidationError.
    """

    def __init__(self, field: str, reason: str) -> None:
        self.field = field
        self.reason = reason
        super().__init__(reason)


class TransportError(PayStreamError):
    """Raised when the event subscription cannot open or drops."""


class ProtocolError(PayStreamError):
    """Raised when a stream frame cannot be parsed into an event."""

    def __init__(self, message: str, frame: str = "") -> None:
        self.frame = frame
        super().__init__(message)


class ApplicationError(PayStreamError):
    """An explicit fatal-error event reported by the analysis service."""


class RenderError(PayStreamError):
    """Raised by a diagram engine when it rejects a description."""

    def __init__(self, message: str, diagram_id: str = "") -> None:
        self.diagram_id = diagram_id
        super().__init__(message)


class InvalidStateError(PayStreamError):
    """Raised when a ledger or registry update violates session ordering."""


class ReportNotFoundError(PayStreamError):
    """Raised when a shared report does not exist or has expired."""

    def __init__(self, share_id: str) -> None:
        self.share_id = share_id
        super().__init__("Report not found or expired.")
