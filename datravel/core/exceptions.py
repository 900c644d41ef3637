"""
Domain exceptions for the travel order service.

Every error carries the HTTP status it maps to; ``datravel.main`` turns them
into ``{"success": false, "message": ..., "errors": ...}`` bodies.
"""

from typing import Dict, List, Optional


class DATravelError(Exception):
    """Base class for all travel order errors."""

    status_code: int = 400
    default_message: str = "Request could not be processed."

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_dict(self) -> dict:
        return {"success": False, "message": self.message}


class ValidationError(DATravelError):
    """Malformed input or an unacceptable director selection."""

    status_code = 422
    default_message = "The given data was invalid."

    def __init__(self, message: Optional[str] = None, errors: Optional[Dict[str, List[str]]] = None):
        super().__init__(message)
        self.errors = errors or {}

    @classmethod
    def for_field(cls, field: str, message: str) -> "ValidationError":
        return cls(message, {field: [message]})

    def to_dict(self) -> dict:
        body = super().to_dict()
        if self.errors:
            body["errors"] = self.errors
        return body


class NotVisibleError(DATravelError):
    """
    The entity may exist but the caller's role, ownership or the step-2 gate
    hides it. Always reported as 404 so existence is never confirmed.
    """

    status_code = 404
    default_message = "Travel order not found."


class InvalidTransitionError(DATravelError):
    """The requested action is not legal for the order's current state."""

    status_code = 422
    default_message = "This action is not allowed for the travel order's current status."


class InvalidStepError(InvalidTransitionError):
    """recommend on a non-recommending step, or approve on a non-approving step."""

    default_message = "This action is not allowed for this approval step."


class RoleForbiddenError(DATravelError):
    """The caller's role may not use this operation at all."""

    status_code = 403
    default_message = "You are not allowed to access this resource."


class AssetMissingError(DATravelError):
    """A signature image or template file is absent or unreadable.

    Raised inside the export renderers and recovered there; never surfaced.
    """

    status_code = 500
    default_message = "Export asset is missing or unreadable."


class ExtensionUnavailableError(DATravelError):
    """A rendering capability is missing from the runtime; no document can be produced."""

    status_code = 500
    default_message = (
        "Document generation failed: a required imaging component is not available. "
        "Install Pillow with PNG (zlib) support and restart the server."
    )
