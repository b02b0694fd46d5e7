#!/usr/bin/env python3
"""
MPA scenario runner

Drives the model through the factory/freeze scenario (deploy factory,
create an agreement, send value around a freeze/unfreeze cycle) and logs
balances along the way. Also exposes the state digest of a fixture file.
"""

import json
import logging
import sys
from pathlib import Path

import click

ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(ROOT / "src"))
sys.path.insert(0, str(ROOT / "tools"))

from mpa_spec.state_digest import compute_state_digest  # noqa: E402
from mpa_spec.session import ChainSession  # noqa: E402
from mpa_spec.test_accounts import ACCOUNTS  # noqa: E402
from mpa_spec.units import to_wei  # noqa: E402
from harness_config import HarnessConfig  # noqa: E402
from yaml_dump import load_yaml  # noqa: E402

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(message)s",
)
logger = logging.getLogger(__name__)


def run_freeze_scenario(session: ChainSession, amount: int, locked: bool = True) -> dict:
    """Replay the freeze scenario; returns the observed balances per step."""
    owner, admin = ACCOUNTS[0], ACCOUNTS[9]
    factory = session.deploy_factory(admin)
    session.create_mpa(
        owner,
        factory,
        "Test",
        "This contract is to be locked",
        [ACCOUNTS[1], ACCOUNTS[2]],
        [50, 50],
        locked,
    )
    mpa = session.owned_mpas(factory, owner)[0]

    observed = {}
    logger.info("Sending Eth to MPA...")
    session.send_value(owner, mpa, amount)
    observed["after_first_send"] = session.balance_of("MPA", mpa)

    session.freeze(admin, mpa, True)
    logger.info("Sending Eth to MPA...")
    if not session.send_value(owner, mpa, amount).ok:
        logger.error("Error: Failed to send eth!")
    observed["while_frozen"] = session.balance_of("MPA", mpa)

    session.freeze(admin, mpa, False)
    logger.info("Sending Eth to MPA...")
    if not session.send_value(owner, mpa, amount).ok:
        logger.error("Error: Failed to send eth!")
    observed["after_unfreeze"] = session.balance_of("MPA", mpa)
    return observed


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Verbose output")
def cli(verbose: bool):
    """MPA executable spec tools."""
    config = HarnessConfig.from_env()
    if verbose or config.verbose:
        logging.getLogger().setLevel(logging.DEBUG)


@cli.command()
@click.option("--ether", default="1", show_default=True, help="Value sent per transfer, in ether")
@click.option("--unlocked", is_flag=True, help="Create the agreement with locked=false")
def scenario(ether: str, unlocked: bool):
    """Run the factory/freeze scenario against a fresh dev chain."""
    amount = to_wei(ether, "ether")
    observed = run_freeze_scenario(ChainSession(), amount, locked=not unlocked)

    expected = {
        "after_first_send": amount,
        "while_frozen": amount,
        "after_unfreeze": 2 * amount,
    }
    if observed != expected:
        logger.error(f"Unexpected balances: {observed} != {expected}")
        sys.exit(1)
    logger.info("Scenario matched expected balances")


@cli.command()
@click.argument("fixture", type=click.Path(exists=True, dir_okay=False, path_type=Path))
def digest(fixture: Path):
    """Print the post-state digest of every case in FIXTURE."""
    text = fixture.read_text()
    data = load_yaml(text) if fixture.suffix in (".yaml", ".yml") else json.loads(text)
    for case in data.get("cases", []):
        click.echo(f"{case['name']}: {compute_state_digest(case['expected']['post_state'])}")


if __name__ == "__main__":
    cli()
