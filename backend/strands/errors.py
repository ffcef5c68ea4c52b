"""Domain error taxonomy.

Services raise these; the handlers registered in ``strands.main`` turn them
into ``{"message": ...}`` JSON responses. "Not found" and "not visible to you"
share one class.
"""
from typing import Any, Optional


class StrandsError(Exception):
    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message: Optional[str] = None, **extra: Any):
        self.message = message or self.default_message
        self.extra = extra
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        return {"message": self.message, **self.extra}


class Internal(StrandsError):
    pass


class ValidationError(StrandsError):
    status_code = 400
    default_message = "Validation error"


class SelfReferenceError(ValidationError):
    default_message = "Cannot send friend request to yourself"


class NotFriends(ValidationError):
    default_message = "All members must be your friends"


class Unauthenticated(StrandsError):
    status_code = 401
    default_message = "Authorization token is required"


class Forbidden(StrandsError):
    status_code = 403
    default_message = "Access denied"


class NotFoundOrAccessDenied(StrandsError):
    status_code = 404
    default_message = "Not found or access denied"


class NotFound(NotFoundOrAccessDenied):
    default_message = "Not found"


class NotAMember(NotFoundOrAccessDenied):
    default_message = "Group not found or access denied"


class InvalidOrExpired(NotFoundOrAccessDenied):
    default_message = "Invalid or expired invite token"


class NotPinned(NotFoundOrAccessDenied):
    default_message = "Strand is not pinned in this group"


class Conflict(StrandsError):
    status_code = 409
    default_message = "Conflict"


class AlreadyExists(Conflict):
    default_message = "Relationship already exists"


class InvalidState(Conflict):
    default_message = "Invalid state for this operation"


class LastAdminError(Conflict):
    default_message = "Cannot remove the last admin from the group"


class NoNewMembers(Conflict):
    default_message = "All specified users are already members of this group"
