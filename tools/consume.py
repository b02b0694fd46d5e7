"""Consume fixtures and validate them against the Python specs."""

from __future__ import annotations

import json
from pathlib import Path
import sys

ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(ROOT / "src"))
sys.path.insert(0, str(ROOT / "tools"))

from mpa_spec.state_transition import apply_block, apply_tx  # noqa: E402
from fixtures_io import state_digest, state_from_json, tx_from_json  # noqa: E402
from harness_config import HarnessConfig  # noqa: E402
from yaml_dump import load_yaml  # noqa: E402


def _load(path: Path) -> dict:
    if path.suffix in (".yaml", ".yml"):
        return load_yaml(path.read_text())
    return json.loads(path.read_text())


def check_case(case: dict) -> str | None:
    """Replay one fixture case; return a failure label or None."""
    pre_state = state_from_json(case["pre_state"])
    if "txs" in case:
        post_state, result = apply_block(pre_state, [tx_from_json(t) for t in case["txs"]])
    else:
        post_state, result = apply_tx(pre_state, tx_from_json(case["tx"]))

    expected = case["expected"]
    if result.ok != expected["ok"]:
        return f"{case['name']}: ok_mismatch"

    actual_err = result.error.code.name if result.error else None
    if actual_err != expected["error"]:
        return f"{case['name']}: error_mismatch"

    if "state_digest" in expected and state_digest(post_state) != expected["state_digest"]:
        return f"{case['name']}: state_digest_mismatch"

    expected_state = state_from_json(expected["post_state"])
    if post_state.accounts.keys() != expected_state.accounts.keys():
        return f"{case['name']}: accounts_mismatch"

    for addr, acct in post_state.accounts.items():
        exp = expected_state.accounts[addr]
        if (acct.balance, acct.nonce) != (exp.balance, exp.nonce):
            return f"{case['name']}: account_state_mismatch"

    return None


def check_file(path: Path) -> list[str]:
    failures: list[str] = []
    for case in _load(path).get("cases", []):
        failure = check_case(case)
        if failure is not None:
            failures.append(f"{path.name}/{failure}")
    return failures


def main() -> None:
    config = HarnessConfig.from_env()
    fixtures = Path(config.fixture_dir)
    if not fixtures.exists():
        raise SystemExit(f"Missing fixture directory: {fixtures}")

    failures: list[str] = []
    checked = 0
    for path in sorted(fixtures.rglob("*")):
        if path.suffix not in (".json", ".yaml", ".yml"):
            continue
        checked += 1
        failures.extend(check_file(path))
        if failures and config.stop_on_first_failure:
            break

    if failures:
        for f in failures:
            print("FAIL", f)
        raise SystemExit(1)

    print(f"All fixtures passed ({checked} files)")


if __name__ == "__main__":
    main()
