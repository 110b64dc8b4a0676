"""
Auth gate: admin and staff login, admin password change and reset.

Credentials are compared as plain values. Only one reset token is live at a
time; requesting a new one replaces the old.
"""
import logging
import secrets
import string
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

from errors import ExpiredToken, InvalidCredential, InvalidToken, ValidationError
from repository import DairyRepository
from schemas import AdminUser, LoginResult

logger = logging.getLogger(__name__)

ADMIN_ID = "admin"
TOKEN_LENGTH = 6
TOKEN_ALPHABET = string.ascii_uppercase + string.digits


@dataclass
class ResetToken:
    token: str
    expiry: datetime


def generate_token(length: int = TOKEN_LENGTH) -> str:
    return "".join(secrets.choice(TOKEN_ALPHABET) for _ in range(length))


def check_new_password(new_password: str, confirm_password: Optional[str]) -> None:
    if not new_password:
        raise ValidationError("New password cannot be empty.")
    if confirm_password is not None and confirm_password != new_password:
        raise ValidationError("New passwords do not match.")


class AuthGate:
    def __init__(
        self,
        repository: DairyRepository,
        *,
        clock: Optional[Callable[[], datetime]] = None,
        token_ttl: timedelta = timedelta(minutes=5),
    ):
        self.repository = repository
        self.clock = clock or (lambda: datetime.now(timezone.utc))
        self.token_ttl = token_ttl
        self.reset_token: Optional[ResetToken] = None

    def login(self, user_id: str, password: str) -> LoginResult:
        if user_id.lower() == ADMIN_ID and password == self.repository.admin_password:
            return LoginResult(role="admin", user=AdminUser())
        member = next(
            (s for s in self.repository.get_staff() if s.id == user_id and s.password == password),
            None,
        )
        if member is not None:
            return LoginResult(role="staff", user=member)
        logger.info("Rejected login for %r", user_id)
        return LoginResult()

    def change_admin_password(self, old_password: str, new_password: str,
                              confirm_password: Optional[str] = None) -> None:
        check_new_password(new_password, confirm_password)
        if old_password != self.repository.admin_password:
            raise InvalidCredential("Incorrect current password.")
        self.repository.set_admin_password(new_password)
        logger.info("Admin password changed")

    def request_password_reset(self, admin_id: str) -> ResetToken:
        if admin_id.lower() != ADMIN_ID:
            raise InvalidCredential("Invalid admin ID.")
        self.reset_token = ResetToken(token=generate_token(), expiry=self.clock() + self.token_ttl)
        logger.info("Password reset token issued, expires %s", self.reset_token.expiry.isoformat())
        return self.reset_token

    def reset_password(self, token: str, new_password: str, confirm_password: Optional[str] = None) -> None:
        check_new_password(new_password, confirm_password)
        live = self.reset_token
        if live is None or live.token != token:
            raise InvalidToken("Invalid reset token.")
        if self.clock() >= live.expiry:
            self.reset_token = None
            raise ExpiredToken("Token has expired.")
        self.repository.set_admin_password(new_password)
        self.reset_token = None
        logger.info("Admin password reset")
