"""Password hashing and signed bearer tokens."""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict

import jwt
from passlib.context import CryptContext
from pydantic import ValidationError as PydanticValidationError

from .config import Settings, get_settings
from .exceptions import InvalidTokenError
from .models import Account
from .schemas import TokenClaims, compute_expiry

ALGORITHM = "HS256"

# Use PBKDF2-SHA256 instead of bcrypt to avoid bcrypt backend issues
password_context = CryptContext(
    schemes=["pbkdf2_sha256"],
    deprecated="auto",
)


def hash_password(password: str) -> str:
    """Hash a password for storage."""
    return password_context.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    """Check a plain password against the stored hash."""
    return password_context.verify(password, password_hash)


def token_payload(account: Account) -> dict[str, Any]:
    """
    Generate the JWT payload for a given account.

    issue_access_token() will add "exp" on top of this.
    """
    return {
        "id": account.id,
        "email": account.email,
        "role": account.role,
        "iat": int(datetime.now(timezone.utc).timestamp()),
    }


def issue_access_token(
    account: Account, settings: Settings | None = None
) -> tuple[str, datetime]:
    """Sign a token for ``account`` and return it with its expiry."""

    settings = settings or get_settings()
    expires_at = compute_expiry(settings.access_token_expires_minutes)
    encoded = jwt.encode(
        {**token_payload(account), "exp": int(expires_at.timestamp())},
        settings.secret_key,
        algorithm=ALGORITHM,
    )
    return encoded, expires_at


def decode_access_token(token: str, settings: Settings | None = None) -> TokenClaims:
    """Verify signature and expiry, then return the claim set."""

    settings = settings or get_settings()
    try:
        payload: Dict[str, Any] = jwt.decode(
            token,
            settings.secret_key,
            algorithms=[ALGORITHM],
            options={"require": ["exp", "iat", "id", "role"]},
        )
    except jwt.ExpiredSignatureError as exc:
        raise InvalidTokenError("Token has expired") from exc
    except jwt.PyJWTError as exc:
        raise InvalidTokenError() from exc

    try:
        return TokenClaims(**payload)
    except PydanticValidationError as exc:
        raise InvalidTokenError() from exc
