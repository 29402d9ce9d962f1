"""Domain error taxonomy shared by the gig and venue services.

Every error carries a stable ``kind`` (what the caller should do about it)
and a ``code`` (what exactly went wrong), plus a user-safe message.
"""

from enum import Enum


class ErrorKind(Enum):
    """Coarse error categories; each maps to one HTTP status."""

    UNAUTHENTICATED = "unauthenticated"
    FORBIDDEN = "forbidden"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    VALIDATION_ERROR = "validation_error"
    INTERNAL_ERROR = "internal_error"


class DomainError(Exception):
    """Base domain error with kind, code and user-safe message."""

    kind = ErrorKind.INTERNAL_ERROR
    code = "INTERNAL_ERROR"
    default_message = "Something went wrong"

    def __init__(self, message: str | None = None, **context) -> None:
        self.message = message or self.default_message
        self.context = context
        super().__init__(self.message)

    def __str__(self) -> str:
        return f"{self.code}: {self.message}"

    def as_dict(self) -> dict:
        return {
            "kind": self.kind.value,
            "code": self.code,
            "detail": self.message,
        }


# ─────────────────────────────────────────────────────────────
# Kinds
# ─────────────────────────────────────────────────────────────

class Unauthenticated(DomainError):
    kind = ErrorKind.UNAUTHENTICATED
    code = "UNAUTHENTICATED"
    default_message = "Authentication required"


class Forbidden(DomainError):
    kind = ErrorKind.FORBIDDEN
    code = "FORBIDDEN"
    default_message = "You do not have permission to do this"


class NotFound(DomainError):
    kind = ErrorKind.NOT_FOUND
    code = "NOT_FOUND"
    default_message = "Not found"


class Conflict(DomainError):
    kind = ErrorKind.CONFLICT
    code = "CONFLICT"
    default_message = "Conflicting state"


class ValidationError(DomainError):
    kind = ErrorKind.VALIDATION_ERROR
    code = "VALIDATION_ERROR"
    default_message = "Invalid request"


class InternalError(DomainError):
    kind = ErrorKind.INTERNAL_ERROR
    code = "INTERNAL_ERROR"
    default_message = "Internal server error"


# ─────────────────────────────────────────────────────────────
# Gigs & applications
# ─────────────────────────────────────────────────────────────

class NotGigOwner(Forbidden):
    code = "NOT_GIG_OWNER"
    default_message = "Only the gig poster can do this"


class GigNotFound(NotFound):
    code = "GIG_NOT_FOUND"
    default_message = "Gig not found"


class SlotNotFound(NotFound):
    code = "SLOT_NOT_FOUND"
    default_message = "Slot not found"


class ApplicationNotFound(NotFound):
    code = "APPLICATION_NOT_FOUND"
    default_message = "Application not found"


class GigNotOpen(Conflict):
    code = "GIG_NOT_OPEN"
    default_message = "This gig is no longer taking applications"


class SlotAlreadyFilled(Conflict):
    code = "SLOT_ALREADY_FILLED"
    default_message = "This slot has already been claimed"


class ApplicationNotPending(Conflict):
    code = "APPLICATION_NOT_PENDING"
    default_message = "This application has already been decided"


class DuplicateApplication(Conflict):
    code = "DUPLICATE_APPLICATION"
    default_message = "You have already applied for this slot"


class NotEligible(ValidationError):
    code = "NOT_ELIGIBLE"
    default_message = "You are not eligible for this slot"


class InvalidSlot(ValidationError):
    code = "INVALID_SLOT"
    default_message = "Invalid slot definition"


# ─────────────────────────────────────────────────────────────
# Venues & invitations
# ─────────────────────────────────────────────────────────────

class NotVenueManager(Forbidden):
    code = "NOT_VENUE_MANAGER"
    default_message = "Only venue managers can do this"


class WrongAccount(Forbidden):
    code = "WRONG_ACCOUNT"
    default_message = "This invitation is for a different email address"


class VenueNotFound(NotFound):
    code = "VENUE_NOT_FOUND"
    default_message = "Venue not found"


class MusicianNotFound(NotFound):
    code = "MUSICIAN_NOT_FOUND"
    default_message = "Musician not found"


class InvitationNotFound(NotFound):
    code = "INVITATION_NOT_FOUND"
    default_message = "Invitation not found"


class InvitationExpired(Conflict):
    code = "INVITATION_EXPIRED"
    default_message = "This invitation has expired"


class AlreadyAccepted(Conflict):
    code = "ALREADY_ACCEPTED"
    default_message = "This invitation has already been accepted"


class CodeGenerationFailed(InternalError):
    code = "CODE_GENERATION_FAILED"
    default_message = "Failed to generate unique invitation code"
