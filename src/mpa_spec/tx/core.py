"""Core transaction specs (plain value transfers).

Value moving into a contract account goes through `credit`, which applies
the receiving contract's fallback rules: factories do not accept value and
frozen agreements revert.
"""

from __future__ import annotations

from copy import deepcopy

from ..addresses import require_address, to_address
from ..config import U256_MAX
from ..errors import ErrorCode, SpecError
from ..types import AccountState, ChainState, Transaction, TransactionType, TransferPayload


def verify(state: ChainState, tx: Transaction) -> None:
    if tx.tx_type != TransactionType.TRANSFER:
        raise SpecError(ErrorCode.INVALID_TYPE, "unsupported core tx type")

    t = tx.payload
    if not isinstance(t, TransferPayload):
        raise SpecError(ErrorCode.INVALID_PAYLOAD, "invalid transfer payload")

    destination = require_address(t.destination, "destination")
    if destination == tx.source:
        raise SpecError(ErrorCode.SELF_OPERATION, "sender cannot be receiver")
    if isinstance(t.amount, bool) or not isinstance(t.amount, int) or t.amount < 0:
        raise SpecError(ErrorCode.INVALID_AMOUNT, "transfer amount invalid")
    if t.amount > U256_MAX:
        raise SpecError(ErrorCode.OVERFLOW, "transfer amount exceeds u256 max")
    if t.amount + tx.fee > U256_MAX:
        raise SpecError(ErrorCode.INSUFFICIENT_FEE, "amount plus fee overflow")

    sender = state.accounts.get(tx.source)
    if sender is not None and sender.balance < t.amount + tx.fee:
        raise SpecError(ErrorCode.INSUFFICIENT_BALANCE, "insufficient balance for transfer")


def apply(state: ChainState, tx: Transaction) -> ChainState:
    if tx.tx_type != TransactionType.TRANSFER:
        raise SpecError(ErrorCode.INVALID_TYPE, "unsupported core tx type")

    next_state = deepcopy(state)
    t = tx.payload
    sender = next_state.accounts.get(tx.source)
    if sender is None:
        raise SpecError(ErrorCode.ACCOUNT_NOT_FOUND, "sender not found")
    if sender.balance < t.amount:
        raise SpecError(ErrorCode.INSUFFICIENT_BALANCE, "insufficient balance")

    sender.balance -= t.amount
    credit(next_state, to_address(t.destination), t.amount)
    return next_state


def credit(state: ChainState, destination: bytes, amount: int) -> None:
    """Move `amount` wei into `destination`, mutating `state` in place.

    Raises CONTRACT_REVERT / MPA_FROZEN when the receiving contract rejects
    the value; callers work on a copy so the failure discards the mutation.
    """
    if destination in state.factories:
        raise SpecError(ErrorCode.CONTRACT_REVERT, "factory does not accept value")

    mpa = state.mpas.get(destination)
    if mpa is not None:
        if mpa.frozen:
            raise SpecError(ErrorCode.MPA_FROZEN, "agreement is frozen")
        mpa.total_received += amount

    receiver = state.accounts.get(destination)
    if receiver is None:
        receiver = AccountState(address=destination, balance=0, nonce=0)
        state.accounts[destination] = receiver
    if receiver.balance + amount > U256_MAX:
        raise SpecError(ErrorCode.OVERFLOW, "receiver balance overflow")
    receiver.balance += amount
