from typing import Any, Dict, List, Optional


class HomepageError(Exception):
    """Base class for every error raised by the homepage core."""

    error_code = "HomepageError"
    status_code = 500

    def __init__(self, message: str, *, details: Optional[List[Dict[str, Any]]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or []

    def to_dict(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {
            "error": self.error_code,
            "message": self.message,
        }
        if self.details:
            body["details"] = self.details
        return body


class ValidationError(HomepageError):
    """
    Malformed input. ``details`` holds field-level issues as
    ``{"field": ..., "message": ...}`` entries.
    """

    error_code = "ValidationError"
    status_code = 400

    @property
    def issues(self) -> List[Dict[str, Any]]:
        return self.details


class InvariantViolation(ValidationError):
    error_code = "InvariantViolation"


class NotFoundError(HomepageError):
    error_code = "NotFoundError"
    status_code = 404


class ConflictError(HomepageError):
    error_code = "ConflictError"
    status_code = 409


class CapabilityError(HomepageError):
    error_code = "CapabilityError"
    status_code = 403


class GatewayError(HomepageError):
    error_code = "GatewayError"
    status_code = 503


def field_error(field: str, message: str) -> ValidationError:
    return ValidationError(message, details=[{"field": field, "message": message}])
