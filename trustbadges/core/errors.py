"""Error taxonomy shared by the services and the API layer.

Services raise these; ``trustbadges.main`` converts them into JSON responses
of the form ``{"success": false, "error": ..., "message": ..., "details": ...}``.
"""

from typing import Any, Dict, List, Optional


class TrustBadgesError(Exception):
    """Base class for errors surfaced to API callers."""

    status_code = 500
    code = "internal_error"

    def __init__(self, message: str, *, status_code: Optional[int] = None, details: Any = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        self.details = details

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "success": False,
            "error": self.code,
            "message": self.message,
        }
        if self.details is not None:
            payload["details"] = self.details
        return payload


class ValidationError(TrustBadgesError):
    """Malformed or missing client input. ``details`` lists the offending fields."""

    status_code = 400
    code = "validation_error"

    def __init__(self, message: str, *, errors: Optional[List[Dict[str, str]]] = None):
        super().__init__(message, details=errors or [])

    @classmethod
    def for_field(cls, field: str, message: str) -> "ValidationError":
        return cls(message, errors=[{"field": field, "message": message}])


class AuthError(TrustBadgesError):
    status_code = 401
    code = "auth_error"


class ProtectedGroupError(TrustBadgesError):
    status_code = 403
    code = "protected_group"


class NotFoundError(TrustBadgesError):
    status_code = 404
    code = "not_found"


class PersistenceError(TrustBadgesError):
    status_code = 500
    code = "persistence_error"


class ConflictError(TrustBadgesError):
    status_code = 409
    code = "conflict"
