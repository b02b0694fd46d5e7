"""Address helpers (validation and deterministic contract addresses)."""

from __future__ import annotations

from blake3 import blake3

from .config import ADDRESS_SIZE, ZERO_ADDRESS
from .errors import ErrorCode, SpecError


def to_address(v: object) -> bytes:
    """Coerce a payload value into raw address bytes.

    Accepts bytes, a list of ints, or a hex string with or without `0x`.
    """
    if isinstance(v, (bytes, bytearray)):
        return bytes(v)
    if isinstance(v, (list, tuple)):
        return bytes(v)
    if isinstance(v, str):
        h = v[2:] if v.startswith(("0x", "0X")) else v
        try:
            return bytes.fromhex(h)
        except ValueError:
            raise SpecError(ErrorCode.INVALID_ADDRESS, f"invalid hex address: {v!r}") from None
    raise SpecError(ErrorCode.INVALID_ADDRESS, f"unsupported address value: {type(v).__name__}")


def require_address(v: object, name: str = "address", *, allow_zero: bool = False) -> bytes:
    addr = to_address(v)
    if len(addr) != ADDRESS_SIZE:
        raise SpecError(ErrorCode.INVALID_ADDRESS, f"{name} must be {ADDRESS_SIZE} bytes")
    if not allow_zero and addr == ZERO_ADDRESS:
        raise SpecError(ErrorCode.INVALID_ADDRESS, f"{name} must not be the zero address")
    return addr


def compute_contract_address(deployer: bytes, nonce: int) -> bytes:
    """address = blake3(0xff || deployer || nonce_be64)[-20:]"""
    data = b"\xff" + deployer + nonce.to_bytes(8, "big")
    return blake3(data).digest()[-ADDRESS_SIZE:]
