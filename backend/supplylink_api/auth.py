"""Authentication routes."""
from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from .config import Settings, get_settings
from .dependencies import get_db_session
from .models import Account
from .schemas import AccountCreate, AccountLogin, AccountRead, AuthResponse
from .security import issue_access_token
from .services import accounts

router = APIRouter(prefix="/auth", tags=["auth"])


def _auth_response(account: Account, settings: Settings) -> AuthResponse:
    token, expires_at = issue_access_token(account, settings)
    return AuthResponse(
        access_token=token,
        expires_at=expires_at,
        account=AccountRead.model_validate(account),
    )


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
async def register(
    payload: AccountCreate,
    session: AsyncSession = Depends(get_db_session),
    settings: Settings = Depends(get_settings),
) -> AuthResponse:
    """Create an account and sign the caller in."""

    account = await accounts.register_account(
        session, payload, allow_admin=settings.allow_admin_signup
    )
    return _auth_response(account, settings)


@router.post("/login", response_model=AuthResponse)
async def login(
    payload: AccountLogin,
    session: AsyncSession = Depends(get_db_session),
    settings: Settings = Depends(get_settings),
) -> AuthResponse:
    """Authenticate with email and password and return a bearer token."""

    account = await accounts.authenticate(session, payload.email, payload.password)
    return _auth_response(account, settings)
