"""Denomination helpers (wei / gwei / ether) on top of eth_utils."""

from __future__ import annotations

from decimal import Decimal, InvalidOperation, localcontext

import eth_utils

from .config import ETHER_DECIMALS, GWEI_VALUE, WEI_PER_ETHER

UNITS = {
    "wei": 1,
    "gwei": GWEI_VALUE,
    "ether": WEI_PER_ETHER,
}


def _unit(unit: str) -> str:
    name = unit.lower()
    if name not in UNITS:
        raise ValueError(f"unknown unit {unit!r}, expected one of {sorted(UNITS)}")
    return name


def to_wei(value: int | str | Decimal, unit: str = "ether") -> int:
    """Convert `value` expressed in `unit` to an integer amount of wei.

    Fractions below one wei are rejected rather than truncated.
    """
    name = _unit(unit)
    try:
        number = Decimal(str(value))
    except InvalidOperation:
        raise ValueError(f"invalid amount: {value!r}") from None
    # eth_utils raises ValueError outside [0, 2**256 - 1]
    wei = eth_utils.to_wei(number, name)
    with localcontext() as ctx:
        ctx.prec = 999
        exact = number * UNITS[name]
    if Decimal(wei) != exact:
        raise ValueError(f"{value} {unit} is not a whole number of wei")
    return wei


def from_wei(wei: int, unit: str = "ether") -> int | Decimal:
    return eth_utils.from_wei(wei, _unit(unit))


def format_ether(wei: int) -> str:
    """Render wei as an ether string without trailing zeros."""
    text = f"{from_wei(wei):.{ETHER_DECIMALS}f}".rstrip("0").rstrip(".")
    return text or "0"
