"""State transition entrypoints for MPA Python specs."""

from __future__ import annotations

import logging
from copy import deepcopy
from typing import Optional

from .config import MAX_NONCE_GAP, U256_MAX
from .errors import ErrorCode, SpecError
from .types import ChainState, Transaction, TransactionType, TxVersion
from .tx import core as tx_core
from .tx import factory as tx_factory
from .tx import mpa as tx_mpa

logger = logging.getLogger(__name__)

_FACTORY_TYPES = frozenset({
    TransactionType.DEPLOY_FACTORY,
    TransactionType.CREATE_MPA,
})

_MPA_TYPES = frozenset({
    TransactionType.FREEZE_MPA,
    TransactionType.SET_TERMS,
    TransactionType.DISTRIBUTE,
})


class TransitionResult:
    """Thin wrapper for verify/apply results."""

    def __init__(self, ok: bool, error: Optional[SpecError] = None):
        self.ok = ok
        self.error = error

    def __repr__(self) -> str:
        if self.ok:
            return "TransitionResult(ok)"
        return f"TransitionResult(failed: {self.error})"

    @classmethod
    def success(cls) -> "TransitionResult":
        return cls(True, None)

    @classmethod
    def failure(cls, error: SpecError) -> "TransitionResult":
        return cls(False, error)


def _dispatch_verify(state: ChainState, tx: Transaction) -> None:
    tt = tx.tx_type
    if tt == TransactionType.TRANSFER:
        return tx_core.verify(state, tx)
    if tt in _FACTORY_TYPES:
        return tx_factory.verify(state, tx)
    if tt in _MPA_TYPES:
        return tx_mpa.verify(state, tx)

    raise SpecError(ErrorCode.NOT_IMPLEMENTED, f"verify not implemented for {tx.tx_type}")


def _dispatch_apply(state: ChainState, tx: Transaction) -> ChainState:
    tt = tx.tx_type
    if tt == TransactionType.TRANSFER:
        return tx_core.apply(state, tx)
    if tt in _FACTORY_TYPES:
        return tx_factory.apply(state, tx)
    if tt in _MPA_TYPES:
        return tx_mpa.apply(state, tx)

    raise SpecError(ErrorCode.NOT_IMPLEMENTED, f"apply not implemented for {tx.tx_type}")


def _verify_common(state: ChainState, tx: Transaction) -> None:
    if tx.version != TxVersion.T1:
        raise SpecError(ErrorCode.INVALID_VERSION, "unsupported tx version")

    if tx.chain_id != state.network_chain_id:
        raise SpecError(ErrorCode.INVALID_TYPE, "chain_id mismatch")

    if not isinstance(tx.tx_type, TransactionType):
        raise SpecError(ErrorCode.INVALID_TYPE, "unknown tx type")

    sender = state.accounts.get(tx.source)
    if sender is None:
        raise SpecError(ErrorCode.ACCOUNT_NOT_FOUND, "sender not found")

    # Contracts never originate transactions.
    if state.is_contract(tx.source):
        raise SpecError(ErrorCode.UNAUTHORIZED, "contract accounts cannot send transactions")

    if tx.fee < 0:
        raise SpecError(ErrorCode.INVALID_AMOUNT, "fee negative")
    if tx.fee > U256_MAX:
        raise SpecError(ErrorCode.OVERFLOW, "fee exceeds u256 max")

    # Nonce range rules (verification phase)
    if tx.nonce < sender.nonce:
        raise SpecError(ErrorCode.NONCE_TOO_LOW, "nonce too low")

    if tx.nonce > sender.nonce + MAX_NONCE_GAP:
        raise SpecError(ErrorCode.NONCE_TOO_HIGH, "nonce too high")


def _check_fee_availability(state: ChainState, tx: Transaction) -> None:
    """Check sender has enough balance to cover the fee.

    Called after type-specific validation so that payload errors take
    precedence over fee insufficiency.
    """
    sender = state.accounts.get(tx.source)
    if sender is None:
        return
    if sender.balance < tx.fee:
        raise SpecError(ErrorCode.INSUFFICIENT_FEE, "insufficient fee")


def verify_tx(state: ChainState, tx: Transaction) -> TransitionResult:
    """Stateless + stateful verification for a single tx."""
    try:
        _verify_common(state, tx)
        _dispatch_verify(state, tx)
        _check_fee_availability(state, tx)
        return TransitionResult.success()
    except SpecError as exc:
        return TransitionResult.failure(exc)


def _require_strict_nonce(sender_nonce: int, tx_nonce: int) -> None:
    if tx_nonce < sender_nonce:
        raise SpecError(ErrorCode.NONCE_TOO_LOW, "nonce too low")
    if tx_nonce > sender_nonce:
        raise SpecError(ErrorCode.NONCE_TOO_HIGH, "nonce too high")


def apply_tx(state: ChainState, tx: Transaction) -> tuple[ChainState, TransitionResult]:
    """Apply tx to state after verification.

    Failed-tx semantics:
    - Pre-validation failure: no fee, no nonce, state unchanged
    - Execution failure (revert): no fee, no nonce, state unchanged
    """
    # Pre-validation
    try:
        _verify_common(state, tx)
        # Strict nonce validation happens before execution.
        sender = state.accounts[tx.source]
        _require_strict_nonce(sender.nonce, tx.nonce)
        _dispatch_verify(state, tx)
        _check_fee_availability(state, tx)
    except SpecError as exc:
        logger.debug("rejected %s from %s: %s", tx.tx_type, tx.source.hex(), exc)
        return state, TransitionResult.failure(exc)

    try:
        working = _dispatch_apply(deepcopy(state), tx)
    except SpecError as exc:
        logger.debug("reverted %s from %s: %s", tx.tx_type, tx.source.hex(), exc)
        return state, TransitionResult.failure(exc)

    # Success: deduct fee + advance nonce
    sender = working.accounts[tx.source]
    sender.balance -= tx.fee
    sender.nonce += 1
    working.global_state.total_burned += tx.fee
    return working, TransitionResult.success()


def apply_block(state: ChainState, txs: list[Transaction]) -> tuple[ChainState, TransitionResult]:
    """Apply a block worth of transactions in order (block-atomic semantics).

    If any transaction fails, the entire block is rejected and the state is
    unchanged.
    """
    working = state
    for index, tx in enumerate(txs):
        working, result = apply_tx(working, tx)
        if not result.ok:
            logger.debug("block rejected at tx %d: %s", index, result.error)
            return state, result

    if working is state:
        working = deepcopy(state)
    working.global_state.block_height += 1
    return working, TransitionResult.success()
