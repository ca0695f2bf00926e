"""Administrator reporting endpoints."""
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from ..dependencies import get_db_session, require_admin
from ..schemas import AccountList, AccountRead, AccountStats, TokenClaims
from ..services import accounts

router = APIRouter(prefix="/admin", tags=["admin"])


@router.get("/users", response_model=AccountList)
async def list_users(
    claims: TokenClaims = Depends(require_admin),
    session: AsyncSession = Depends(get_db_session),
) -> AccountList:
    """Every account, secrets excluded."""

    rows = await accounts.list_accounts(session)
    return AccountList(users=[AccountRead.model_validate(row) for row in rows])


@router.get("/stats", response_model=AccountStats)
async def stats(
    claims: TokenClaims = Depends(require_admin),
    session: AsyncSession = Depends(get_db_session),
) -> AccountStats:
    return await accounts.account_stats(session)
