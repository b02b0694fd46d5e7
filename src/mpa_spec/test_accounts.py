"""Deterministic test accounts, mirroring a dev chain's `accounts[0..9]`."""

from __future__ import annotations

from blake3 import blake3

from .config import ADDRESS_SIZE, CHAIN_ID_DEVNET, DEFAULT_ACCOUNT_BALANCE, TEST_ACCOUNT_COUNT
from .types import AccountState, ChainState

_ACCOUNT_SEED = b"mpa-spec/test-account/"

NAMES = ["Deployer", "Alice", "Bob", "Carol", "Dave",
         "Eve", "Frank", "Grace", "Heidi", "Admin"]


def derive_account(index: int) -> bytes:
    """Derive the 20-byte address for test account `index`."""
    return blake3(_ACCOUNT_SEED + index.to_bytes(4, "big")).digest()[:ADDRESS_SIZE]


ACCOUNTS: tuple[bytes, ...] = tuple(derive_account(i) for i in range(TEST_ACCOUNT_COUNT))

# Named constants
DEPLOYER = ACCOUNTS[0]
ALICE = ACCOUNTS[1]
BOB = ACCOUNTS[2]
CAROL = ACCOUNTS[3]
DAVE = ACCOUNTS[4]
EVE = ACCOUNTS[5]
FRANK = ACCOUNTS[6]
GRACE = ACCOUNTS[7]
HEIDI = ACCOUNTS[8]
ADMIN = ACCOUNTS[9]

NAME_BY_ADDRESS: dict[bytes, str] = dict(zip(ACCOUNTS, NAMES))


def genesis_state(
    balance: int = DEFAULT_ACCOUNT_BALANCE, chain_id: int = CHAIN_ID_DEVNET
) -> ChainState:
    """Dev chain genesis: every test account funded with `balance` wei."""
    state = ChainState(network_chain_id=chain_id)
    for addr in ACCOUNTS:
        state.accounts[addr] = AccountState(address=addr, balance=balance, nonce=0)
    state.global_state.total_supply = balance * len(ACCOUNTS)
    return state
