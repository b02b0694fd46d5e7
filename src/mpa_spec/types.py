"""Core types for MPA Python specs.

The model tracks the ledger surface the MPAFactory/MPA contracts touch:
plain value transfers, factory deployment, agreement creation, the admin
freeze switch, and the owner-side terms/distribution calls.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import Optional


class TxVersion(IntEnum):
    T1 = 0x01


class TransactionType(Enum):
    TRANSFER = "transfer"
    DEPLOY_FACTORY = "deploy_factory"
    CREATE_MPA = "create_mpa"
    FREEZE_MPA = "freeze_mpa"
    SET_TERMS = "set_terms"
    DISTRIBUTE = "distribute"


@dataclass
class TransferPayload:
    destination: bytes
    amount: int
    data: Optional[bytes] = None


@dataclass
class Transaction:
    version: TxVersion
    chain_id: int
    source: bytes
    tx_type: TransactionType
    payload: object
    fee: int
    nonce: int


@dataclass
class AccountState:
    address: bytes
    balance: int = 0
    nonce: int = 0


@dataclass
class GlobalState:
    total_supply: int = 0
    total_burned: int = 0
    block_height: int = 0
    timestamp: int = 0


# --- Contracts ---


@dataclass
class FactoryState:
    address: bytes
    admin: bytes
    # owner -> agreements created by that owner, in creation order
    owned_mpas: dict[bytes, list[bytes]] = field(default_factory=dict)
    all_mpas: list[bytes] = field(default_factory=list)


@dataclass
class MpaState:
    address: bytes
    factory: bytes
    owner: bytes
    name: str
    description: str
    beneficiaries: list[bytes]
    shares: list[int]
    locked: bool
    frozen: bool = False
    total_received: int = 0
    total_distributed: int = 0


@dataclass
class ChainState:
    accounts: dict[bytes, AccountState] = field(default_factory=dict)
    global_state: GlobalState = field(default_factory=GlobalState)
    network_chain_id: int = 0
    factories: dict[bytes, FactoryState] = field(default_factory=dict)
    mpas: dict[bytes, MpaState] = field(default_factory=dict)

    def is_contract(self, address: bytes) -> bool:
        return address in self.factories or address in self.mpas
