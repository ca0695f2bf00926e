"""Credential store: registration, authentication and account reporting."""
from __future__ import annotations

import logging
from datetime import datetime
from typing import Sequence

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from ..exceptions import ConflictError, InvalidCredentialsError, NotFoundError, ValidationError
from ..models import Account, Role
from ..schemas import AccountCreate, AccountStats
from ..security import hash_password, verify_password

logger = logging.getLogger(__name__)


async def register_account(
    session: AsyncSession,
    payload: AccountCreate,
    *,
    allow_admin: bool = True,
) -> Account:
    """Create an account with a hashed secret; email must be unused."""

    if payload.role is Role.ADMIN and not allow_admin:
        raise ValidationError("Role not available for self-registration", details={"role": "admin"})

    existing = await session.execute(select(Account.id).where(Account.email == payload.email))
    if existing.scalar_one_or_none() is not None:
        raise ConflictError("User already exists")

    account = Account(
        name=payload.name,
        email=payload.email,
        password_hash=hash_password(payload.password),
        organization=payload.organization,
        role=payload.role.value,
        wallet_address=payload.wallet_address,
    )
    session.add(account)
    try:
        await session.commit()
    except IntegrityError as exc:
        # Lost a race with a concurrent registration for the same email
        await session.rollback()
        raise ConflictError("User already exists") from exc
    await session.refresh(account)
    logger.info("Registered account %s as %s", account.email, account.role)
    return account


async def authenticate(session: AsyncSession, email: str, password: str) -> Account:
    """
    Return the account for valid credentials and stamp ``last_login``.

    Unknown email, wrong password and deactivated accounts all raise the
    same InvalidCredentialsError.
    """

    email = email.strip().lower()
    result = await session.execute(select(Account).where(Account.email == email))
    account = result.scalar_one_or_none()
    if (
        account is None
        or not account.is_active
        or not verify_password(password, account.password_hash)
    ):
        logger.warning("Invalid credentials for %s", email)
        raise InvalidCredentialsError()

    account.last_login = datetime.utcnow()
    await session.commit()
    await session.refresh(account)
    logger.info("Account %s logged in", account.email)
    return account


async def get_account(session: AsyncSession, account_id: int) -> Account:
    account = await session.get(Account, account_id)
    if account is None:
        raise NotFoundError("Account not found")
    return account


async def list_accounts(session: AsyncSession) -> Sequence[Account]:
    result = await session.execute(select(Account).order_by(Account.created_at.desc(), Account.id.desc()))
    return list(result.scalars().all())


async def account_stats(session: AsyncSession) -> AccountStats:
    """Counts over the credential store; recomputed on every call."""

    total = await session.scalar(select(func.count(Account.id))) or 0
    active = await session.scalar(
        select(func.count(Account.id)).where(Account.is_active.is_(True))
    ) or 0
    grouped = await session.execute(
        select(Account.role, func.count(Account.id)).group_by(Account.role)
    )
    return AccountStats(
        total_accounts=total,
        active_accounts=active,
        inactive_accounts=total - active,
        accounts_by_role={role: count for role, count in grouped.all()},
    )
