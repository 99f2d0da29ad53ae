from __future__ import annotations


class SantaError(RuntimeError):
    """Base for every failure a core operation reports to its caller."""

    status_code = 500
    default_message = "Something went wrong."

    def __init__(self, message: str | None = None):
        super().__init__(message or self.default_message)
        self.message = message or self.default_message

    def to_dict(self) -> dict:
        return {"success": False, "error": self.message}


class NotFound(SantaError):
    status_code = 404
    default_message = "Not found."


class HostAuthError(SantaError):
    status_code = 403
    default_message = "A valid host key is required for this action."


class ValidationError(SantaError):
    status_code = 400
    default_message = "Invalid input."

    def __init__(self, message: str | None = None, fields: dict | None = None):
        super().__init__(message)
        self.fields = fields or {}

    def to_dict(self) -> dict:
        data = super().to_dict()
        if self.fields:
            data["fields"] = self.fields
        return data


# --- Precondition violations: rejected before any mutation ------------------

class PreconditionError(SantaError):
    status_code = 409
    default_message = "This action is not allowed right now."


class RegistrationClosed(PreconditionError):
    default_message = "Registration is closed for this event."


class DuplicateRegistration(PreconditionError):
    default_message = "This email is already registered for this event."


class RosterTooSmall(PreconditionError):
    default_message = "Need at least 2 participants to run the draw."


class DrawStateError(PreconditionError):
    default_message = "The draw cannot be run in the event's current state."


class NoActiveMatch(PreconditionError):
    default_message = "You have no active pairing to message."


# --- Draw failures -----------------------------------------------------------

class PairingError(SantaError):
    status_code = 500
    default_message = "Could not compute a valid pairing."


class ConcurrentDrawError(SantaError):
    status_code = 409
    default_message = "Another draw for this event finished first. Reload and try again."


class PersistenceError(SantaError):
    status_code = 500
    default_message = "Saving the draw failed; nothing was changed. It is safe to retry."
