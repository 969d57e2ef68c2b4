"""
Admin credential check for state-changing endpoints.

Credentials are injected (from config by default). A successful login
returns a random session token that must be sent in the admin token header.
When no password is configured the policy is disabled and every caller is
treated as admin, which is how local runs and tests use it.
"""

import logging
import secrets
from typing import Optional, Set

from .errors import AuctionError

logger = logging.getLogger(__name__)


class InvalidCredentialsError(AuctionError):
    """Raised for a wrong username/password or a missing/unknown token."""

    status_code = 401


class AdminPolicy:
    """Checks admin credentials and issued session tokens."""

    def __init__(self, username: str, password: Optional[str]):
        self.username = username
        self._password = password
        self._tokens: Set[str] = set()

    @property
    def enabled(self) -> bool:
        return self._password is not None

    def login(self, username: str, password: str) -> str:
        """
        Exchange credentials for a session token.

        Raises:
            InvalidCredentialsError: If the credentials do not match
        """
        if not self.enabled:
            return generate_token()

        # compare_digest only accepts ASCII str, so compare UTF-8 bytes
        user_ok = secrets.compare_digest(username.encode(), self.username.encode())
        password_ok = secrets.compare_digest(password.encode(), self._password.encode())
        if not (user_ok and password_ok):
            logger.warning(f"Rejected admin login for {username!r}")
            raise InvalidCredentialsError("Invalid credentials")

        token = generate_token()
        self._tokens.add(token)
        logger.info(f"Admin {username} logged in ({len(self._tokens)} active tokens)")
        return token

    def verify(self, token: Optional[str]) -> None:
        """
        Raises:
            InvalidCredentialsError: If the policy is enabled and the token
                was not issued by login()
        """
        if not self.enabled:
            return
        if not token or token not in self._tokens:
            raise InvalidCredentialsError("Missing or invalid admin token")

    def logout(self, token: str) -> None:
        """Revoke a token; unknown tokens are ignored."""
        self._tokens.discard(token)


def generate_token() -> str:
    """Generate a secure token for admin sessions."""
    return secrets.token_urlsafe(24)
