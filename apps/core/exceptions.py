"""
Service-layer errors shared by all apps.

Services raise ValueError for business-rule violations (rendered as 400).
The subclasses below carry a more specific HTTP meaning.
"""


class NotFoundError(ValueError):
    """A referenced object does not exist (404)."""


class ForbiddenError(ValueError):
    """The caller may not act on this object (403)."""


class ConflictError(ValueError):
    """The request duplicates existing state (409)."""


def status_for(error: ValueError) -> int:
    """Map a service error to the HTTP status an endpoint should return."""
    if isinstance(error, NotFoundError):
        return 404
    if isinstance(error, ForbiddenError):
        return 403
    if isinstance(error, ConflictError):
        return 409
    return 400
