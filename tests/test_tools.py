"""Fixture consumer and scenario CLI specs."""

from __future__ import annotations

import json

import pytest
from click.testing import CliRunner

from mpa_spec.config import CHAIN_ID_DEVNET, WEI_PER_ETHER
from mpa_spec.state_transition import apply_tx
from mpa_spec.test_accounts import ALICE, BOB
from mpa_spec.types import AccountState, ChainState, Transaction, TransactionType, TransferPayload, TxVersion
from tools.consume import check_case
from tools.fixtures_io import state_digest, state_to_json, tx_to_json
from tools.harness_config import HarnessConfig
from tools.run_scenario import cli


def _case() -> dict:
    state = ChainState(network_chain_id=CHAIN_ID_DEVNET)
    state.accounts[ALICE] = AccountState(address=ALICE, balance=WEI_PER_ETHER)
    tx = Transaction(
        version=TxVersion.T1,
        chain_id=CHAIN_ID_DEVNET,
        source=ALICE,
        tx_type=TransactionType.TRANSFER,
        payload=TransferPayload(destination=BOB, amount=5),
        fee=1,
        nonce=0,
    )
    post, result = apply_tx(state, tx)
    return {
        "name": "transfer",
        "pre_state": state_to_json(state),
        "tx": tx_to_json(tx),
        "expected": {
            "ok": result.ok,
            "error": None,
            "post_state": state_to_json(post),
            "state_digest": state_digest(post),
        },
    }


def test_consume_accepts_matching_case() -> None:
    assert check_case(_case()) is None


def test_consume_flags_tampered_case() -> None:
    case = _case()
    case["expected"]["post_state"]["accounts"][0]["balance"] += 1
    assert check_case(case) == "transfer: account_state_mismatch"

    case = _case()
    case["expected"]["ok"] = False
    assert check_case(case) == "transfer: ok_mismatch"


def test_scenario_command() -> None:
    result = CliRunner().invoke(cli, ["scenario", "--ether", "1"])
    assert result.exit_code == 0, result.output


def test_digest_command(tmp_path) -> None:
    case = _case()
    path = tmp_path / "transfer.json"
    path.write_text(json.dumps({"cases": [case]}))

    result = CliRunner().invoke(cli, ["digest", str(path)])
    assert result.exit_code == 0, result.output
    assert result.output.strip() == f"transfer: {case['expected']['state_digest']}"


def test_harness_config_from_env(monkeypatch) -> None:
    monkeypatch.setenv("FIXTURE_DIR", "/tmp/mpa-fixtures")
    monkeypatch.setenv("FIXTURE_FORMAT", "YAML")
    monkeypatch.setenv("VERBOSE", "1")
    monkeypatch.delenv("STOP_ON_FIRST_FAILURE", raising=False)
    config = HarnessConfig.from_env()
    assert config.fixture_dir == "/tmp/mpa-fixtures"
    assert config.fixture_format == "yaml"
    assert config.verbose is True
    assert config.stop_on_first_failure is False


def test_harness_config_rejects_unknown_format(monkeypatch) -> None:
    monkeypatch.setenv("FIXTURE_FORMAT", "toml")
    with pytest.raises(ValueError):
        HarnessConfig.from_env()
