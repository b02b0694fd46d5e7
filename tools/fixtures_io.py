"""Helpers to serialize/deserialize fixtures for MPA specs."""

from __future__ import annotations

from typing import Any

from mpa_spec.state_digest import compute_state_digest
from mpa_spec.types import (
    AccountState,
    ChainState,
    FactoryState,
    MpaState,
    Transaction,
    TransactionType,
    TransferPayload,
    TxVersion,
)


def _hex_to_bytes(v: str) -> bytes:
    return bytes.fromhex(v[2:] if v.startswith(("0x", "0X")) else v)


def _bytes_to_hex(v: bytes) -> str:
    return v.hex()


def state_to_json(state: ChainState) -> dict[str, Any]:
    result: dict[str, Any] = {
        "network_chain_id": state.network_chain_id,
        "global_state": {
            "total_supply": state.global_state.total_supply,
            "total_burned": state.global_state.total_burned,
            "block_height": state.global_state.block_height,
            "timestamp": state.global_state.timestamp,
        },
        "accounts": [
            {
                "address": _bytes_to_hex(a.address),
                "balance": a.balance,
                "nonce": a.nonce,
            }
            for a in state.accounts.values()
        ],
    }

    if state.factories:
        result["factories"] = [
            {
                "address": _bytes_to_hex(f.address),
                "admin": _bytes_to_hex(f.admin),
                "owned_mpas": {
                    _bytes_to_hex(owner): [_bytes_to_hex(m) for m in mpas]
                    for owner, mpas in f.owned_mpas.items()
                },
                "all_mpas": [_bytes_to_hex(m) for m in f.all_mpas],
            }
            for f in state.factories.values()
        ]

    if state.mpas:
        result["mpas"] = [
            {
                "address": _bytes_to_hex(m.address),
                "factory": _bytes_to_hex(m.factory),
                "owner": _bytes_to_hex(m.owner),
                "name": m.name,
                "description": m.description,
                "beneficiaries": [_bytes_to_hex(b) for b in m.beneficiaries],
                "shares": list(m.shares),
                "locked": m.locked,
                "frozen": m.frozen,
                "total_received": m.total_received,
                "total_distributed": m.total_distributed,
            }
            for m in state.mpas.values()
        ]

    return result


def state_from_json(data: dict[str, Any]) -> ChainState:
    state = ChainState(network_chain_id=data["network_chain_id"])
    gs = data.get("global_state", {})
    state.global_state.total_supply = gs.get("total_supply", 0)
    state.global_state.total_burned = gs.get("total_burned", 0)
    state.global_state.block_height = gs.get("block_height", 0)
    state.global_state.timestamp = gs.get("timestamp", 0)

    for a in data.get("accounts", []):
        acct = AccountState(
            address=_hex_to_bytes(a["address"]),
            balance=a.get("balance", 0),
            nonce=a.get("nonce", 0),
        )
        state.accounts[acct.address] = acct

    for f in data.get("factories", []):
        addr = _hex_to_bytes(f["address"])
        state.factories[addr] = FactoryState(
            address=addr,
            admin=_hex_to_bytes(f["admin"]),
            owned_mpas={
                _hex_to_bytes(owner): [_hex_to_bytes(m) for m in mpas]
                for owner, mpas in f.get("owned_mpas", {}).items()
            },
            all_mpas=[_hex_to_bytes(m) for m in f.get("all_mpas", [])],
        )

    for m in data.get("mpas", []):
        addr = _hex_to_bytes(m["address"])
        state.mpas[addr] = MpaState(
            address=addr,
            factory=_hex_to_bytes(m["factory"]),
            owner=_hex_to_bytes(m["owner"]),
            name=m.get("name", ""),
            description=m.get("description", ""),
            beneficiaries=[_hex_to_bytes(b) for b in m.get("beneficiaries", [])],
            shares=list(m.get("shares", [])),
            locked=m.get("locked", False),
            frozen=m.get("frozen", False),
            total_received=m.get("total_received", 0),
            total_distributed=m.get("total_distributed", 0),
        )

    return state


def state_digest(state: ChainState) -> str:
    return compute_state_digest(state_to_json(state))


def _payload_to_json(payload: Any) -> Any:
    """Recursively convert a payload value, turning bytes into hex strings."""
    if payload is None:
        return None
    if isinstance(payload, (bytes, bytearray)):
        return _bytes_to_hex(bytes(payload))
    if isinstance(payload, dict):
        return {k: _payload_to_json(v) for k, v in payload.items()}
    if isinstance(payload, (list, tuple)):
        return [_payload_to_json(item) for item in payload]
    return payload


def tx_to_json(tx: Transaction) -> dict[str, Any]:
    payload: Any
    if tx.tx_type == TransactionType.TRANSFER and isinstance(tx.payload, TransferPayload):
        payload = {
            "destination": _bytes_to_hex(tx.payload.destination),
            "amount": tx.payload.amount,
            "data": _bytes_to_hex(tx.payload.data) if tx.payload.data else None,
        }
    else:
        payload = _payload_to_json(tx.payload)

    return {
        "version": int(tx.version),
        "chain_id": tx.chain_id,
        "source": _bytes_to_hex(tx.source),
        "tx_type": tx.tx_type.value,
        "payload": payload,
        "fee": tx.fee,
        "nonce": tx.nonce,
    }


_BYTES_FIELDS: set[str] = {"factory", "mpa", "destination", "data"}
_BYTES_LIST_FIELDS: set[str] = {"beneficiaries"}


def _json_to_bytes_payload(payload: Any) -> Any:
    """Convert hex string fields of a JSON payload back to bytes."""
    if not isinstance(payload, dict):
        return payload
    result: dict[str, Any] = {}
    for key, value in payload.items():
        if key in _BYTES_FIELDS and isinstance(value, str) and value:
            result[key] = _hex_to_bytes(value)
        elif key in _BYTES_LIST_FIELDS and isinstance(value, list):
            result[key] = [_hex_to_bytes(v) if isinstance(v, str) else v for v in value]
        else:
            result[key] = value
    return result


def tx_from_json(data: dict[str, Any]) -> Transaction:
    tx_type = TransactionType(data["tx_type"])

    if tx_type == TransactionType.TRANSFER:
        p = data.get("payload") or {}
        payload: Any = TransferPayload(
            destination=_hex_to_bytes(p["destination"]),
            amount=p["amount"],
            data=_hex_to_bytes(p["data"]) if p.get("data") else None,
        )
    else:
        payload = _json_to_bytes_payload(data.get("payload"))

    return Transaction(
        version=TxVersion(data["version"]),
        chain_id=data["chain_id"],
        source=_hex_to_bytes(data["source"]),
        tx_type=tx_type,
        payload=payload,
        fee=data["fee"],
        nonce=data["nonce"],
    )
