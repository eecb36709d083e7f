from typing import Optional
import secrets
import logging
from passlib.context import CryptContext
from fastapi import Request

from trustbadges.core.errors import AuthError

logger = logging.getLogger(__name__)

# Suppress passlib bcrypt version warnings
logging.getLogger("passlib").setLevel(logging.ERROR)

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

CSRF_HEADER = "X-CSRF-Token"
CSRF_SESSION_KEY = "csrf_token"


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against its hash."""
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password: str) -> str:
    """Hash a password."""
    return pwd_context.hash(password)


def generate_csrf_token() -> str:
    return secrets.token_urlsafe(32)


def create_session(request: Request, user_id: int, user_email: str) -> str:
    """Start a user session and return its CSRF token."""
    request.session.clear()
    csrf_token = generate_csrf_token()
    request.session["user_id"] = user_id
    request.session["user_email"] = user_email
    request.session[CSRF_SESSION_KEY] = csrf_token
    return csrf_token


def get_current_user_id(request: Request) -> Optional[int]:
    """Get current user ID from session."""
    return request.session.get("user_id")


def logout_user(request: Request) -> None:
    """Clear user session."""
    request.session.clear()


def is_authenticated(request: Request) -> bool:
    """Check if user is authenticated."""
    return "user_id" in request.session


def verify_csrf(request: Request) -> None:
    """
    Check the ``X-CSRF-Token`` header against the token stored at login.

    Raises:
        AuthError: 403 when the header is missing or does not match
    """
    expected = request.session.get(CSRF_SESSION_KEY)
    provided = request.headers.get(CSRF_HEADER)
    if not expected or not provided or not secrets.compare_digest(expected, provided):
        logger.warning(f"CSRF check failed for {request.method} {request.url.path}")
        raise AuthError("Invalid or missing CSRF token", status_code=403)
