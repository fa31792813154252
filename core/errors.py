import enum
from dataclasses import dataclass
from typing import Optional


class ErrorKind(str, enum.Enum):
    # returned by the collaborator
    CAPACITY_EXCEEDED = "CAPACITY_EXCEEDED"
    ALREADY_BOOKED = "ALREADY_BOOKED"
    ACTOR_NOT_ALLOWED = "ACTOR_NOT_ALLOWED"
    NOT_FOUND = "NOT_FOUND"
    PAST_ACTIVITY = "PAST_ACTIVITY"
    UNAUTHORIZED = "UNAUTHORIZED"
    FORBIDDEN = "FORBIDDEN"
    VALIDATION = "VALIDATION"
    REJECTED = "REJECTED"
    SERVER_ERROR = "SERVER_ERROR"
    # raised before anything reaches the collaborator
    TRANSPORT = "TRANSPORT"
    NOT_SIGNED_IN = "NOT_SIGNED_IN"


USER_MESSAGES = {
    ErrorKind.CAPACITY_EXCEEDED: "Not enough spots are left for this activity anymore.",
    ErrorKind.ALREADY_BOOKED: "You have already booked this activity. You can view it in your profile.",
    ErrorKind.ACTOR_NOT_ALLOWED: "Admins cannot book activities. Please use a customer account.",
    ErrorKind.NOT_FOUND: "Activity not found or is no longer available.",
    ErrorKind.PAST_ACTIVITY: "Cannot book past activities.",
    ErrorKind.UNAUTHORIZED: "Your session has expired. Please sign in again.",
    ErrorKind.FORBIDDEN: "You are not allowed to do that.",
    ErrorKind.VALIDATION: "Some of the submitted values are not valid.",
    ErrorKind.REJECTED: "The request was rejected. Please try again.",
    ErrorKind.SERVER_ERROR: "Something went wrong on our side. Please try again later.",
    ErrorKind.TRANSPORT: "Could not reach the server. Please check your connection.",
    ErrorKind.NOT_SIGNED_IN: "Please sign in first.",
}


class CollaboratorError(Exception):
    """A failed call to the FarmVenture API, classified by kind."""

    def __init__(self, kind: ErrorKind, message: str = "", status_code: Optional[int] = None):
        self.kind = kind
        self.message = message or USER_MESSAGES[kind]
        self.status_code = status_code
        super().__init__(f"{kind.value}: {self.message}")


class ActionInProgress(Exception):
    """Raised when an action is triggered again while its request is still pending."""

    def __init__(self, key):
        self.key = key
        super().__init__(f"Action {key!r} is already in progress")


@dataclass
class Notice:
    """Dismissible, non-fatal message shown to the user."""
    kind: str
    message: str
    dismissed: bool = False

    def dismiss(self):
        self.dismissed = True

    @classmethod
    def from_error(cls, error: CollaboratorError) -> "Notice":
        return cls(kind=error.kind.value, message=USER_MESSAGES.get(error.kind, error.message))
