"""Stateful convenience wrapper for driving the model transaction by transaction.

`ChainSession` keeps the current `ChainState`, fills in nonces, and logs
every submitted transaction. Failed transactions leave the state untouched
and are returned as failed `TransitionResult`s, never raised.
"""

from __future__ import annotations

import logging
from typing import Optional, Sequence

from .addresses import compute_contract_address
from .config import CHAIN_ID_DEVNET
from .errors import ErrorCode, SpecError
from .state_transition import TransitionResult, apply_tx
from .test_accounts import genesis_state
from .types import ChainState, Transaction, TransactionType, TransferPayload, TxVersion
from .units import format_ether
from .views import balance_of, get_owned_mpas

logger = logging.getLogger(__name__)


class ChainSession:
    def __init__(self, state: Optional[ChainState] = None, *, fee: int = 0):
        self.state = state if state is not None else genesis_state(chain_id=CHAIN_ID_DEVNET)
        self.fee = fee
        self.history: list[tuple[Transaction, TransitionResult]] = []

    def _tx(self, source: bytes, tx_type: TransactionType, payload: object) -> Transaction:
        account = self.state.accounts.get(source)
        return Transaction(
            version=TxVersion.T1,
            chain_id=self.state.network_chain_id,
            source=source,
            tx_type=tx_type,
            payload=payload,
            fee=self.fee,
            nonce=account.nonce if account is not None else 0,
        )

    def submit(self, tx: Transaction) -> TransitionResult:
        self.state, result = apply_tx(self.state, tx)
        self.history.append((tx, result))
        if result.ok:
            logger.info("%s from %s ok", tx.tx_type.value, tx.source.hex())
        else:
            logger.warning("%s from %s failed: %s", tx.tx_type.value, tx.source.hex(), result.error)
        return result

    # --- transactions ---

    def deploy_factory(self, sender: bytes) -> bytes:
        tx = self._tx(sender, TransactionType.DEPLOY_FACTORY, {})
        address = compute_contract_address(sender, tx.nonce)
        result = self.submit(tx)
        if not result.ok:
            raise result.error
        return address

    def create_mpa(
        self,
        sender: bytes,
        factory: bytes,
        name: str,
        description: str,
        beneficiaries: Sequence[bytes],
        shares: Sequence[int],
        locked: bool,
    ) -> TransitionResult:
        payload = {
            "factory": factory,
            "name": name,
            "description": description,
            "beneficiaries": list(beneficiaries),
            "shares": list(shares),
            "locked": locked,
        }
        return self.submit(self._tx(sender, TransactionType.CREATE_MPA, payload))

    def send_value(self, sender: bytes, destination: bytes, amount: int) -> TransitionResult:
        payload = TransferPayload(destination=destination, amount=amount)
        return self.submit(self._tx(sender, TransactionType.TRANSFER, payload))

    def freeze(self, sender: bytes, mpa: bytes, frozen: bool) -> TransitionResult:
        payload = {"mpa": mpa, "frozen": frozen}
        return self.submit(self._tx(sender, TransactionType.FREEZE_MPA, payload))

    def set_terms(
        self, sender: bytes, mpa: bytes, beneficiaries: Sequence[bytes], shares: Sequence[int]
    ) -> TransitionResult:
        payload = {"mpa": mpa, "beneficiaries": list(beneficiaries), "shares": list(shares)}
        return self.submit(self._tx(sender, TransactionType.SET_TERMS, payload))

    def distribute(self, sender: bytes, mpa: bytes) -> TransitionResult:
        return self.submit(self._tx(sender, TransactionType.DISTRIBUTE, {"mpa": mpa}))

    # --- reads ---

    def owned_mpas(self, factory: bytes, owner: bytes) -> list[bytes]:
        return get_owned_mpas(self.state, factory, owner)

    def last_owned_mpa(self, factory: bytes, owner: bytes) -> bytes:
        owned = self.owned_mpas(factory, owner)
        if not owned:
            raise SpecError(ErrorCode.CONTRACT_NOT_FOUND, "owner has no agreements")
        return owned[-1]

    def balance_of(self, tag: str, address: bytes) -> int:
        """Balance in wei, logged the way the dev-chain scripts print it."""
        bal = balance_of(self.state, address)
        logger.info("  => Balance of %s: 0x%s is %d Wei (%s ether)", tag, address.hex(), bal, format_ether(bal))
        return bal
