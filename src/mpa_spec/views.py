"""Read-only calls against a ChainState (no transaction, no state change)."""

from __future__ import annotations

from .addresses import require_address
from .errors import ErrorCode, err
from .types import ChainState, FactoryState, MpaState
from .tx.mpa import compute_payouts


def _factory(state: ChainState, factory: bytes) -> FactoryState:
    f = state.factories.get(require_address(factory, "factory"))
    if f is None:
        raise err(ErrorCode.CONTRACT_NOT_FOUND, "factory not found")
    return f


def get_owned_mpas(state: ChainState, factory: bytes, owner: bytes) -> list[bytes]:
    """Agreements created through `factory` by `owner`, in creation order."""
    f = _factory(state, factory)
    return list(f.owned_mpas.get(require_address(owner, "owner", allow_zero=True), []))


def get_all_mpas(state: ChainState, factory: bytes) -> list[bytes]:
    return list(_factory(state, factory).all_mpas)


def get_mpa(state: ChainState, address: bytes) -> MpaState:
    mpa = state.mpas.get(require_address(address, "mpa"))
    if mpa is None:
        raise err(ErrorCode.CONTRACT_NOT_FOUND, "agreement not found")
    return mpa


def is_frozen(state: ChainState, address: bytes) -> bool:
    return get_mpa(state, address).frozen


def balance_of(state: ChainState, address: bytes) -> int:
    account = state.accounts.get(require_address(address, allow_zero=True))
    return account.balance if account is not None else 0


def preview_distribution(state: ChainState, address: bytes) -> list[tuple[bytes, int]]:
    """Payouts a DISTRIBUTE issued now would make, as (beneficiary, wei)."""
    mpa = get_mpa(state, address)
    return compute_payouts(mpa, balance_of(state, mpa.address))
