from __future__ import annotations


class VerificationError(Exception):
    """A failed verification request; `message` is safe to show the client."""

    status = 400
    message = "Verification failed."

    def __init__(self, message: str | None = None) -> None:
        if message is not None:
            self.message = message
        super().__init__(self.message)

    def to_dict(self) -> dict:
        return {"ok": False, "error": self.message}


class MissingToken(VerificationError):
    message = "Missing token."


class InvalidToken(VerificationError):
    message = "Invalid token."


class UnsupportedAction(VerificationError):
    message = "Unsupported action."


class MissingDob(VerificationError):
    message = "DOB required."


class InvalidDobFormat(VerificationError):
    message = "Invalid DOB format."


class ServerError(VerificationError):
    status = 500
    message = "server error"
