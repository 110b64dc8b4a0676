"""
Error taxonomy shared by the repository, auth gate and API surfaces.

Every error carries a message that can be shown to the user as-is.
"""
from typing import Optional


class DairyError(Exception):
    default_message = "Operation failed."

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class NotFound(DairyError):
    default_message = "Record not found."


class InvalidCredential(DairyError):
    default_message = "Invalid credentials."


class InvalidToken(DairyError):
    default_message = "Invalid reset token."


class ExpiredToken(DairyError):
    default_message = "Token has expired."


class ValidationError(DairyError):
    default_message = "Invalid data."


class PersistenceError(DairyError):
    default_message = "Could not save data."
