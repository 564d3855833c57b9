"""
Domain errors raised by the store, the lifecycle services and the email
dispatcher. Each one knows the HTTP status it maps to and may carry extra
context that is returned to the caller next to the message.
"""
from typing import Any, Dict


class CheckinError(Exception):
    status_code: int = 400

    def __init__(self, message: str, **context: Any):
        super().__init__(message)
        self.message = message
        self.context: Dict[str, Any] = context

    def to_dict(self) -> Dict[str, Any]:
        return {"error": self.message, **self.context}


class NotFoundError(CheckinError):
    status_code = 404


class InvalidInputError(CheckinError):
    status_code = 400


class InvalidDayError(InvalidInputError):
    """Scan attempted for a day the ticket or badge is not valid for."""


class AlreadyScannedError(CheckinError):
    status_code = 409


class StaleRowError(CheckinError):
    """The row changed between our read and our write."""
    status_code = 409


class GenerationExhaustedError(CheckinError):
    status_code = 503


class TransportError(CheckinError):
    status_code = 502

    def to_dict(self) -> Dict[str, Any]:
        # The underlying cause is logged, never returned
        return {"error": "Storage service unavailable, please try again"}
