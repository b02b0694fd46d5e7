"""Factory transaction specs (DeployFactory, CreateMpa)."""

from __future__ import annotations

from copy import deepcopy

from ..addresses import compute_contract_address, require_address
from ..config import MAX_DESCRIPTION_LEN, MAX_NAME_LEN
from ..errors import ErrorCode, SpecError
from ..types import AccountState, ChainState, FactoryState, MpaState, Transaction, TransactionType
from .mpa import validate_terms


def verify(state: ChainState, tx: Transaction) -> None:
    if tx.tx_type == TransactionType.DEPLOY_FACTORY:
        _verify_deploy(state, tx)
    elif tx.tx_type == TransactionType.CREATE_MPA:
        _verify_create(state, tx)
    else:
        raise SpecError(ErrorCode.INVALID_TYPE, f"unsupported factory tx type: {tx.tx_type}")


def apply(state: ChainState, tx: Transaction) -> ChainState:
    if tx.tx_type == TransactionType.DEPLOY_FACTORY:
        return _apply_deploy(state, tx)
    elif tx.tx_type == TransactionType.CREATE_MPA:
        return _apply_create(state, tx)
    raise SpecError(ErrorCode.INVALID_TYPE, f"unsupported factory tx type: {tx.tx_type}")


# --- DEPLOY_FACTORY ---

def _verify_deploy(state: ChainState, tx: Transaction) -> None:
    p = tx.payload
    if p is not None and not isinstance(p, dict):
        raise SpecError(ErrorCode.INVALID_PAYLOAD, "deploy_factory payload must be dict")

    address = compute_contract_address(tx.source, tx.nonce)
    if state.is_contract(address):
        raise SpecError(ErrorCode.ACCOUNT_EXISTS, "contract address already in use")


def _apply_deploy(state: ChainState, tx: Transaction) -> ChainState:
    ns = deepcopy(state)
    address = compute_contract_address(tx.source, tx.nonce)
    ns.accounts.setdefault(address, AccountState(address=address))
    ns.factories[address] = FactoryState(address=address, admin=tx.source)
    return ns


# --- CREATE_MPA ---

def _verify_create(state: ChainState, tx: Transaction) -> None:
    p = tx.payload
    if not isinstance(p, dict):
        raise SpecError(ErrorCode.INVALID_PAYLOAD, "create_mpa payload must be dict")

    factory_addr = require_address(p.get("factory"), "factory")
    if factory_addr not in state.factories:
        raise SpecError(ErrorCode.CONTRACT_NOT_FOUND, "factory not found")

    name = p.get("name")
    if not isinstance(name, str) or not name or len(name.encode()) > MAX_NAME_LEN:
        raise SpecError(ErrorCode.INVALID_PAYLOAD, "invalid name")

    description = p.get("description", "")
    if not isinstance(description, str) or len(description.encode()) > MAX_DESCRIPTION_LEN:
        raise SpecError(ErrorCode.INVALID_PAYLOAD, "invalid description")

    if not isinstance(p.get("locked"), bool):
        raise SpecError(ErrorCode.INVALID_PAYLOAD, "locked must be a bool")

    validate_terms(p.get("beneficiaries"), p.get("shares"))


def _apply_create(state: ChainState, tx: Transaction) -> ChainState:
    ns = deepcopy(state)
    p = tx.payload
    factory_addr = require_address(p.get("factory"), "factory")
    factory = ns.factories[factory_addr]
    factory_account = ns.accounts.setdefault(factory_addr, AccountState(address=factory_addr))

    # The factory deploys with its own account nonce.
    address = compute_contract_address(factory_addr, factory_account.nonce)
    if ns.is_contract(address):
        raise SpecError(ErrorCode.ACCOUNT_EXISTS, "contract address already in use")
    factory_account.nonce += 1

    beneficiaries, shares = validate_terms(p.get("beneficiaries"), p.get("shares"))
    ns.accounts.setdefault(address, AccountState(address=address))
    ns.mpas[address] = MpaState(
        address=address,
        factory=factory_addr,
        owner=tx.source,
        name=p["name"],
        description=p.get("description", ""),
        beneficiaries=beneficiaries,
        shares=shares,
        locked=p["locked"],
    )
    factory.owned_mpas.setdefault(tx.source, []).append(address)
    factory.all_mpas.append(address)
    return ns
