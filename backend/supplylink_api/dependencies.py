"""Reusable FastAPI dependencies, including the authorization guard."""
from __future__ import annotations

import logging
from collections.abc import AsyncGenerator, Callable, Iterable

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from .config import Settings, get_settings
from .database import get_session
from .exceptions import InsufficientRoleError, MissingTokenError
from .models import Role
from .schemas import TokenClaims
from .security import decode_access_token
from .services.storage import ImageStorage, LocalImageStorage

logger = logging.getLogger(__name__)

# Use simple Bearer auth instead of OAuth2 password flow
bearer_scheme = HTTPBearer(auto_error=False)


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """Dependency that yields an AsyncSession."""
    async for session in get_session():
        yield session


def get_image_storage(settings: Settings = Depends(get_settings)) -> ImageStorage:
    return LocalImageStorage(settings.media_dir, settings.media_url)


def authenticate_token(token: str | None, settings: Settings) -> TokenClaims:
    """First guard stage: a valid, unexpired token must be present."""
    if not token:
        raise MissingTokenError()
    return decode_access_token(token, settings)


def check_role(claims: TokenClaims, allowed: frozenset[Role]) -> TokenClaims:
    """Second guard stage; only meaningful on claims from ``authenticate_token``."""
    if claims.role not in allowed:
        logger.warning("Access denied for role %s (account %s)", claims.role.value, claims.id)
        raise InsufficientRoleError(
            claims.role.value, sorted(role.value for role in allowed)
        )
    return claims


def authorize(
    token: str | None, allowed: Iterable[Role], settings: Settings
) -> TokenClaims:
    """Run both guard stages in order for ``(token, allow-set)``."""
    return check_role(authenticate_token(token, settings), frozenset(allowed))


async def get_current_claims(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    settings: Settings = Depends(get_settings),
) -> TokenClaims:
    """
    Return the caller's claims from the Authorization: Bearer <token> header.

    The token is the only session state; no store lookup happens here.
    """

    token = credentials.credentials if credentials is not None else None
    return authenticate_token(token, settings)


def require_roles(*roles: Role) -> Callable[..., TokenClaims]:
    """Build a dependency that admits only the given roles."""

    allowed = frozenset(roles)

    async def _guard(claims: TokenClaims = Depends(get_current_claims)) -> TokenClaims:
        return check_role(claims, allowed)

    return _guard


# Static allow-sets, one per audience
require_admin = require_roles(Role.ADMIN)
require_supplier = require_roles(Role.SUPPLIER)
require_manufacturer = require_roles(Role.MANUFACTURER)
require_customer = require_roles(Role.CUSTOMER)
