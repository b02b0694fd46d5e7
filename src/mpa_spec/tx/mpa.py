"""Agreement (MPA instance) transaction specs.

FREEZE_MPA is reserved for the admin of the factory that deployed the
agreement. SET_TERMS and DISTRIBUTE act on the agreement's beneficiaries and
percentage shares; a locked agreement keeps the terms it was created with.
"""

from __future__ import annotations

from copy import deepcopy

from ..addresses import require_address
from ..config import MAX_BENEFICIARIES, MIN_BENEFICIARIES, SHARE_TOTAL
from ..errors import ErrorCode, SpecError
from ..types import ChainState, MpaState, Transaction, TransactionType
from .core import credit


def validate_terms(beneficiaries: object, shares: object) -> tuple[list[bytes], list[int]]:
    """Validate positional (beneficiary, share) pairs and normalize them."""
    if not isinstance(beneficiaries, (list, tuple)) or not isinstance(shares, (list, tuple)):
        raise SpecError(ErrorCode.INVALID_PAYLOAD, "beneficiaries and shares must be lists")
    if len(beneficiaries) != len(shares):
        raise SpecError(ErrorCode.LENGTH_MISMATCH, "beneficiaries and shares length mismatch")
    if len(beneficiaries) < MIN_BENEFICIARIES:
        raise SpecError(ErrorCode.INVALID_PAYLOAD, "at least one beneficiary required")
    if len(beneficiaries) > MAX_BENEFICIARIES:
        raise SpecError(ErrorCode.INVALID_PAYLOAD, "too many beneficiaries")

    addrs = [require_address(b, "beneficiary") for b in beneficiaries]
    if len(set(addrs)) != len(addrs):
        raise SpecError(ErrorCode.INVALID_PAYLOAD, "duplicate beneficiary")

    total = 0
    for s in shares:
        if isinstance(s, bool) or not isinstance(s, int) or s <= 0:
            raise SpecError(ErrorCode.INVALID_SHARES, "shares must be positive integers")
        total += s
    if total != SHARE_TOTAL:
        raise SpecError(ErrorCode.INVALID_SHARES, f"shares must sum to {SHARE_TOTAL}, got {total}")
    return addrs, list(shares)


def compute_payouts(mpa: MpaState, balance: int) -> list[tuple[bytes, int]]:
    """Split `balance` by share; the rounding remainder is not paid out."""
    return [
        (beneficiary, balance * share // SHARE_TOTAL)
        for beneficiary, share in zip(mpa.beneficiaries, mpa.shares)
    ]


def _lookup(state: ChainState, p: dict) -> MpaState:
    addr = require_address(p.get("mpa"), "mpa")
    mpa = state.mpas.get(addr)
    if mpa is None:
        raise SpecError(ErrorCode.CONTRACT_NOT_FOUND, "agreement not found")
    return mpa


def verify(state: ChainState, tx: Transaction) -> None:
    p = tx.payload
    if not isinstance(p, dict):
        raise SpecError(ErrorCode.INVALID_PAYLOAD, "agreement payload must be dict")

    tt = tx.tx_type
    if tt == TransactionType.FREEZE_MPA:
        _verify_freeze(state, tx, p)
    elif tt == TransactionType.SET_TERMS:
        _verify_set_terms(state, tx, p)
    elif tt == TransactionType.DISTRIBUTE:
        _verify_distribute(state, tx, p)
    else:
        raise SpecError(ErrorCode.INVALID_TYPE, f"unsupported agreement tx type: {tt}")


def apply(state: ChainState, tx: Transaction) -> ChainState:
    p = tx.payload
    tt = tx.tx_type
    if tt == TransactionType.FREEZE_MPA:
        return _apply_freeze(state, tx, p)
    elif tt == TransactionType.SET_TERMS:
        return _apply_set_terms(state, tx, p)
    elif tt == TransactionType.DISTRIBUTE:
        return _apply_distribute(state, tx, p)
    raise SpecError(ErrorCode.INVALID_TYPE, f"unsupported agreement tx type: {tt}")


# --- FREEZE_MPA ---

def _verify_freeze(state: ChainState, tx: Transaction, p: dict) -> None:
    mpa = _lookup(state, p)

    frozen = p.get("frozen")
    if not isinstance(frozen, bool):
        raise SpecError(ErrorCode.INVALID_PAYLOAD, "frozen must be a bool")

    factory = state.factories.get(mpa.factory)
    if factory is None:
        raise SpecError(ErrorCode.CONTRACT_NOT_FOUND, "factory not found")
    if tx.source != factory.admin:
        raise SpecError(ErrorCode.UNAUTHORIZED, "only the factory admin may freeze")


def _apply_freeze(state: ChainState, tx: Transaction, p: dict) -> ChainState:
    ns = deepcopy(state)
    mpa = _lookup(ns, p)
    mpa.frozen = p["frozen"]
    return ns


# --- SET_TERMS ---

def _verify_set_terms(state: ChainState, tx: Transaction, p: dict) -> None:
    mpa = _lookup(state, p)
    if tx.source != mpa.owner:
        raise SpecError(ErrorCode.NOT_OWNER, "only the agreement owner may change terms")
    if mpa.locked:
        raise SpecError(ErrorCode.MPA_LOCKED, "agreement terms are locked")
    validate_terms(p.get("beneficiaries"), p.get("shares"))


def _apply_set_terms(state: ChainState, tx: Transaction, p: dict) -> ChainState:
    ns = deepcopy(state)
    mpa = _lookup(ns, p)
    mpa.beneficiaries, mpa.shares = validate_terms(p.get("beneficiaries"), p.get("shares"))
    return ns


# --- DISTRIBUTE ---

def _verify_distribute(state: ChainState, tx: Transaction, p: dict) -> None:
    mpa = _lookup(state, p)
    if tx.source != mpa.owner and tx.source not in mpa.beneficiaries:
        raise SpecError(ErrorCode.UNAUTHORIZED, "only the owner or a beneficiary may distribute")
    if mpa.frozen:
        raise SpecError(ErrorCode.MPA_FROZEN, "agreement is frozen")

    account = state.accounts.get(mpa.address)
    balance = account.balance if account is not None else 0
    if balance == 0:
        raise SpecError(ErrorCode.INVALID_AMOUNT, "nothing to distribute")
    if sum(amount for _, amount in compute_payouts(mpa, balance)) == 0:
        raise SpecError(ErrorCode.INVALID_AMOUNT, "balance too small to pay any beneficiary")


def _apply_distribute(state: ChainState, tx: Transaction, p: dict) -> ChainState:
    ns = deepcopy(state)
    mpa = _lookup(ns, p)
    account = ns.accounts[mpa.address]

    paid = 0
    for beneficiary, amount in compute_payouts(mpa, account.balance):
        if amount == 0:
            continue
        account.balance -= amount
        credit(ns, beneficiary, amount)
        paid += amount

    mpa.total_distributed += paid
    return ns
