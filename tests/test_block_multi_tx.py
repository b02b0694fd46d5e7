"""Block processing fixtures (multi-tx atomic semantics)."""

from __future__ import annotations

from mpa_spec.config import CHAIN_ID_DEVNET
from mpa_spec.errors import ErrorCode
from mpa_spec.test_accounts import ALICE, BOB, CAROL
from mpa_spec.types import (
    AccountState,
    ChainState,
    Transaction,
    TransactionType,
    TransferPayload,
    TxVersion,
)

FEE_MIN = 21_000


def _base_state() -> ChainState:
    state = ChainState(network_chain_id=CHAIN_ID_DEVNET)
    state.global_state.block_height = 1
    state.accounts[ALICE] = AccountState(address=ALICE, balance=1_000_000, nonce=5)
    state.accounts[BOB] = AccountState(address=BOB, balance=0, nonce=0)
    state.accounts[CAROL] = AccountState(address=CAROL, balance=0, nonce=0)
    return state


def _mk_transfer(
    sender: bytes, receiver: bytes, nonce: int, amount: int, *, fee: int = FEE_MIN
) -> Transaction:
    return Transaction(
        version=TxVersion.T1,
        chain_id=CHAIN_ID_DEVNET,
        source=sender,
        tx_type=TransactionType.TRANSFER,
        payload=TransferPayload(destination=receiver, amount=amount),
        fee=fee,
        nonce=nonce,
    )


def test_block_multi_tx_success(block_test_group) -> None:
    state = _base_state()
    tx1 = _mk_transfer(ALICE, BOB, nonce=5, amount=10_000)
    tx2 = _mk_transfer(ALICE, CAROL, nonce=6, amount=20_000)
    post, result = block_test_group(
        "transactions/block/multi_tx.json", "block_multi_tx_success", state, [tx1, tx2]
    )

    assert result.ok
    assert post.accounts[ALICE].balance == 1_000_000 - 30_000 - 2 * FEE_MIN
    assert post.accounts[ALICE].nonce == 7
    assert post.global_state.block_height == 2


def test_block_chained_spend(block_test_group) -> None:
    """A receiver may spend value it received earlier in the same block."""
    state = _base_state()
    tx1 = _mk_transfer(ALICE, BOB, nonce=5, amount=50_000)
    tx2 = _mk_transfer(BOB, CAROL, nonce=0, amount=10_000)
    post, result = block_test_group(
        "transactions/block/multi_tx.json", "block_chained_spend", state, [tx1, tx2]
    )

    assert result.ok
    assert post.accounts[CAROL].balance == 10_000
    assert post.accounts[BOB].balance == 50_000 - 10_000 - FEE_MIN


def test_block_reject_atomic_on_second_tx_nonce_gap(block_test_group) -> None:
    state = _base_state()
    tx1 = _mk_transfer(ALICE, BOB, nonce=5, amount=10_000)
    tx2 = _mk_transfer(ALICE, BOB, nonce=7, amount=10_000)
    post, result = block_test_group(
        "transactions/block/multi_tx.json", "block_reject_nonce_gap", state, [tx1, tx2]
    )

    assert result.error.code == ErrorCode.NONCE_TOO_HIGH
    assert post is state
    assert post.accounts[BOB].balance == 0
    assert post.global_state.block_height == 1


def test_empty_block(block_test_group) -> None:
    state = _base_state()
    post, result = block_test_group("transactions/block/multi_tx.json", "empty_block", state, [])

    assert result.ok
    assert post.global_state.block_height == 2
    assert state.global_state.block_height == 1


def test_empty_block_does_not_share_state(block_test_group) -> None:
    state = _base_state()
    post, result = block_test_group("transactions/block/multi_tx.json", "block_empty", state, [])

    assert result.ok
    assert post.global_state.block_height == 2
    assert state.global_state.block_height == 1
    assert post.accounts is not state.accounts
    post.accounts[ALICE].balance = 0
    assert state.accounts[ALICE].balance == 1_000_000
