"""Denomination helper specs."""

from __future__ import annotations

from decimal import Decimal

import eth_utils
import pytest

from mpa_spec.config import GWEI_VALUE, U256_MAX, WEI_PER_ETHER
from mpa_spec.units import format_ether, from_wei, to_wei


def test_to_wei_ether() -> None:
    assert to_wei("1", "ether") == WEI_PER_ETHER
    assert to_wei(2) == 2 * WEI_PER_ETHER
    assert to_wei("0.5", "ether") == WEI_PER_ETHER // 2


def test_to_wei_gwei_and_wei() -> None:
    assert to_wei(3, "gwei") == 3 * GWEI_VALUE
    assert to_wei(7, "WEI") == 7


def test_to_wei_rejects_fraction_of_wei() -> None:
    with pytest.raises(ValueError):
        to_wei("0.5", "wei")


def test_to_wei_rejects_negative_and_garbage() -> None:
    with pytest.raises(ValueError):
        to_wei(-1)
    with pytest.raises(ValueError):
        to_wei("one")
    with pytest.raises(ValueError):
        to_wei(1, "finney")


def test_from_wei() -> None:
    assert from_wei(WEI_PER_ETHER) == Decimal(1)
    assert from_wei(1_500_000_000, "gwei") == Decimal("1.5")


def test_format_ether() -> None:
    assert format_ether(2 * WEI_PER_ETHER) == "2"
    assert format_ether(WEI_PER_ETHER // 4) == "0.25"
    assert format_ether(0) == "0"
    assert format_ether(1) == "0.000000000000000001"


def test_to_wei_matches_eth_utils() -> None:
    assert to_wei("1.5", "gwei") == eth_utils.to_wei(Decimal("1.5"), "gwei")
    assert to_wei("0.000000000000000001") == 1
    assert to_wei(U256_MAX, "wei") == U256_MAX


def test_to_wei_rejects_above_u256() -> None:
    with pytest.raises(ValueError):
        to_wei(U256_MAX + 1, "wei")
