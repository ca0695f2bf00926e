"""
Client-side state machine that ties a backend write to a wallet transaction.

    Idle -> ConnectingWallet -> AwaitingSignature -> Confirming -> Finalizing
         -> Completed | Failed

Only the Finalizing stage talks to the backend. Confirming is a fixed wait;
the transaction hash is handed to the backend as an opaque string.
"""

from __future__ import annotations

import asyncio
import logging
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, List, Optional, Protocol, TypeVar

from .api_client import APIError

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_COUNTERPARTY = "0x70997970C51812dc3A010C7d01b50e0d17dc79C8"
DEFAULT_VALUE_WEI = 10**14  # 0.0001 ETH
DEFAULT_SETTLE_SECONDS = 3.0

# EIP-1193 provider error codes
USER_REJECTED = 4001
REQUEST_PENDING = -32002


class WorkflowState(str, Enum):
    IDLE = "idle"
    CONNECTING_WALLET = "connecting_wallet"
    AWAITING_SIGNATURE = "awaiting_signature"
    CONFIRMING = "confirming"
    FINALIZING = "finalizing"
    COMPLETED = "completed"
    FAILED = "failed"


TERMINAL_STATES = frozenset({WorkflowState.COMPLETED, WorkflowState.FAILED})

_TRANSITIONS: Dict[WorkflowState, frozenset[WorkflowState]] = {
    WorkflowState.IDLE: frozenset({WorkflowState.CONNECTING_WALLET}),
    WorkflowState.CONNECTING_WALLET: frozenset({WorkflowState.AWAITING_SIGNATURE, WorkflowState.FAILED}),
    WorkflowState.AWAITING_SIGNATURE: frozenset({WorkflowState.CONFIRMING, WorkflowState.FAILED}),
    WorkflowState.CONFIRMING: frozenset({WorkflowState.FINALIZING, WorkflowState.FAILED}),
    WorkflowState.FINALIZING: frozenset({WorkflowState.COMPLETED, WorkflowState.FAILED}),
    WorkflowState.COMPLETED: frozenset(),
    WorkflowState.FAILED: frozenset(),
}


# -----------------------------
# Wallet boundary
# -----------------------------


class WalletError(Exception):
    """Failure reported by the external wallet agent."""

    def __init__(self, message: str, code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.code = code


class WalletNotConnectedError(WalletError):
    def __init__(self, message: str = "Connect your wallet first"):
        super().__init__(message)


class WalletMismatchError(WalletError):
    def __init__(
        self,
        message: str = "Active wallet account does not match the connected wallet for this session",
    ):
        super().__init__(message)


class SignatureRejectedError(WalletError):
    def __init__(self, message: str = "Transaction was rejected in the wallet"):
        super().__init__(message, USER_REJECTED)


class PendingRequestError(WalletError):
    def __init__(
        self,
        message: str = "A wallet request is already pending; open your wallet to continue",
    ):
        super().__init__(message, REQUEST_PENDING)


def wallet_error_from_code(code: Optional[int], message: str = "") -> WalletError:
    """Map a provider error code to the matching readable error."""
    if code == USER_REJECTED:
        return SignatureRejectedError()
    if code == REQUEST_PENDING:
        return PendingRequestError()
    return WalletError(message or "Transaction cancelled or failed", code)


class WalletAgent(Protocol):
    """The pieces of an injected wallet provider the workflow relies on."""

    async def get_address(self) -> Optional[str]:
        """Address already linked to this session, if any."""
        ...

    async def request_accounts(self) -> List[str]:
        """Ask the wallet for its active accounts (may prompt the user)."""
        ...

    async def send_transaction(self, sender: str, recipient: str, value_wei: int) -> str:
        """Authorize a value transfer and return the transaction hash."""
        ...


# -----------------------------
# Workflow
# -----------------------------


class WorkflowStateError(Exception):
    """Illegal transition, e.g. running a workflow that is not idle."""


class WorkflowFailedError(Exception):
    """Raised when a run ends in Failed; ``stage`` is where it broke."""

    def __init__(self, message: str, stage: WorkflowState, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.message = message
        self.stage = stage
        self.cause = cause


class CorrelatedCreationWorkflow:
    """
    Runs one wallet-backed creation attempt.

    A failed or completed workflow must be ``reset()`` before it can run
    again; retrying re-prompts the wallet for a fresh signature.
    """

    def __init__(
        self,
        wallet: WalletAgent,
        counterparty: str = DEFAULT_COUNTERPARTY,
        value_wei: int = DEFAULT_VALUE_WEI,
        settle_seconds: float = DEFAULT_SETTLE_SECONDS,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ) -> None:
        self.wallet = wallet
        self.counterparty = counterparty
        self.value_wei = value_wei
        self.settle_seconds = settle_seconds
        self._sleep = sleep
        self.state = WorkflowState.IDLE
        self.history: List[WorkflowState] = [WorkflowState.IDLE]
        self.tx_hash: Optional[str] = None
        self.error: Optional[str] = None

    def _advance(self, target: WorkflowState) -> None:
        if target not in _TRANSITIONS[self.state]:
            raise WorkflowStateError(f"Cannot move from {self.state.value} to {target.value}")
        logger.debug("Workflow %s -> %s", self.state.value, target.value)
        self.state = target
        self.history.append(target)

    def _fail(self, message: str, cause: Optional[BaseException] = None) -> WorkflowFailedError:
        stage = self.state
        self.error = message
        self._advance(WorkflowState.FAILED)
        logger.warning("Workflow failed during %s: %s", stage.value, message)
        return WorkflowFailedError(message, stage, cause)

    def reset(self) -> None:
        if self.state not in TERMINAL_STATES and self.state is not WorkflowState.IDLE:
            raise WorkflowStateError(f"Cannot reset while {self.state.value}")
        self.state = WorkflowState.IDLE
        self.history = [WorkflowState.IDLE]
        self.tx_hash = None
        self.error = None

    async def _connect(self) -> str:
        address = await self.wallet.get_address()
        if not address:
            raise WalletNotConnectedError()
        accounts = await self.wallet.request_accounts()
        if not accounts or accounts[0].lower() != address.lower():
            raise WalletMismatchError()
        return address

    async def run(self, finalize: Callable[[str], Awaitable[T]]) -> T:
        """
        Drive the stages in order and hand the hash to ``finalize``.

        ``finalize`` is the single backend call, e.g.
        ``lambda tx: client.create_product(..., external_tx_id=tx)``.
        """

        if self.state is not WorkflowState.IDLE:
            raise WorkflowStateError(f"Workflow is {self.state.value}; reset() before running again")

        self._advance(WorkflowState.CONNECTING_WALLET)
        try:
            sender = await self._connect()
        except WalletError as exc:
            raise self._fail(exc.message, exc) from exc

        self._advance(WorkflowState.AWAITING_SIGNATURE)
        try:
            tx_hash = await self.wallet.send_transaction(sender, self.counterparty, self.value_wei)
        except WalletError as exc:
            raise self._fail(exc.message, exc) from exc
        if not tx_hash:
            raise self._fail("Wallet did not return a transaction hash")
        self.tx_hash = tx_hash

        self._advance(WorkflowState.CONFIRMING)
        await self._sleep(self.settle_seconds)

        self._advance(WorkflowState.FINALIZING)
        try:
            result = await finalize(tx_hash)
        except APIError as exc:
            raise self._fail(exc.message, exc) from exc

        self._advance(WorkflowState.COMPLETED)
        logger.info("Workflow completed with tx %s", tx_hash)
        return result
