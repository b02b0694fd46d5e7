"""Canonical state digest implementation (v1)."""
from __future__ import annotations

from typing import Any

from blake3 import blake3

from .config import ADDRESS_SIZE

DIGEST_VERSION = 1


def _hex_to_bytes(value: str | None) -> bytes:
    if value is None:
        return b""
    if not isinstance(value, str):
        raise TypeError("hex value must be string")
    v = value[2:] if value.startswith(("0x", "0X")) else value
    if v == "":
        return b""
    return bytes.fromhex(v)


def _address(value: str | None) -> bytes:
    addr = _hex_to_bytes(value)
    if len(addr) != ADDRESS_SIZE:
        raise ValueError(f"address must be {ADDRESS_SIZE} bytes, got {len(addr)}")
    return addr


def _u64_be(value: int) -> bytes:
    if value < 0:
        raise ValueError("u64 must be non-negative")
    return int(value).to_bytes(8, "big", signed=False)


def _u256_be(value: int) -> bytes:
    if value < 0:
        raise ValueError("u256 must be non-negative")
    return int(value).to_bytes(32, "big", signed=False)


def _str(value: str) -> bytes:
    raw = value.encode("utf-8")
    return _u64_be(len(raw)) + raw


def compute_state_digest(post_state: dict[str, Any]) -> str:
    """Compute state digest v1 from a JSON-exported state.

    Sections are hashed in a fixed order (global state, accounts, factories,
    agreements), each sorted by address, with BLAKE3-256.
    """
    if not isinstance(post_state, dict):
        raise TypeError("post_state must be a dict")

    buf = bytearray()
    buf += _u64_be(DIGEST_VERSION)

    gs = post_state.get("global_state", {})
    for field in ("total_supply", "total_burned"):
        buf += _u256_be(int(gs.get(field, 0)))
    for field in ("block_height", "timestamp"):
        buf += _u64_be(int(gs.get(field, 0)))

    accounts = sorted(
        ((_address(a.get("address")), a) for a in post_state.get("accounts", [])),
        key=lambda x: x[0],
    )
    buf += _u64_be(len(accounts))
    for addr, acc in accounts:
        buf += addr
        buf += _u256_be(int(acc.get("balance", 0)))
        buf += _u64_be(int(acc.get("nonce", 0)))

    factories = sorted(
        ((_address(f.get("address")), f) for f in post_state.get("factories", [])),
        key=lambda x: x[0],
    )
    buf += _u64_be(len(factories))
    for addr, fac in factories:
        buf += addr
        buf += _address(fac.get("admin"))
        created = [_address(m) for m in fac.get("all_mpas", [])]
        buf += _u64_be(len(created))
        for m in created:
            buf += m

    mpas = sorted(
        ((_address(m.get("address")), m) for m in post_state.get("mpas", [])),
        key=lambda x: x[0],
    )
    buf += _u64_be(len(mpas))
    for addr, mpa in mpas:
        buf += addr
        buf += _address(mpa.get("factory"))
        buf += _address(mpa.get("owner"))
        buf += _str(mpa.get("name", ""))
        buf += _str(mpa.get("description", ""))
        beneficiaries = mpa.get("beneficiaries", [])
        shares = mpa.get("shares", [])
        buf += _u64_be(len(beneficiaries))
        for b, s in zip(beneficiaries, shares):
            buf += _address(b)
            buf += _u64_be(int(s))
        buf += bytes([1 if mpa.get("locked") else 0, 1 if mpa.get("frozen") else 0])
        buf += _u256_be(int(mpa.get("total_received", 0)))
        buf += _u256_be(int(mpa.get("total_distributed", 0)))

    return blake3(buf).hexdigest()
