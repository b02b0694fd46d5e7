"""Wire-format encoding for MPA spec transactions.

Layout (all integers big-endian):

    u8 version | u64 chain_id | source[20] | u8 tx_type | u64 nonce | u256 fee | payload

Payloads:
    TRANSFER        destination[20] | u256 amount | option<u16-prefixed data>
    DEPLOY_FACTORY  (empty)
    CREATE_MPA      factory[20] | str name | str description | terms | bool locked
    FREEZE_MPA      mpa[20] | bool frozen
    SET_TERMS       mpa[20] | terms
    DISTRIBUTE      mpa[20]

`str` is u16 length + UTF-8; `terms` is u8 count, count addresses, u8
count, count u8 shares.
"""

from __future__ import annotations

from dataclasses import dataclass

from blake3 import blake3

from .addresses import to_address
from .config import ADDRESS_SIZE, U64_MAX, U256_MAX
from .errors import ErrorCode, SpecError
from .types import Transaction, TransactionType, TransferPayload, TxVersion


TX_TYPE_IDS = {
    TransactionType.TRANSFER: 0,
    TransactionType.DEPLOY_FACTORY: 1,
    TransactionType.CREATE_MPA: 2,
    TransactionType.FREEZE_MPA: 3,
    TransactionType.SET_TERMS: 4,
    TransactionType.DISTRIBUTE: 5,
}
TX_TYPES_BY_ID = {v: k for k, v in TX_TYPE_IDS.items()}


@dataclass
class Writer:
    buf: bytearray

    def write_u8(self, v: int) -> None:
        self.buf.extend(int(v).to_bytes(1, "big", signed=False))

    def write_u16(self, v: int) -> None:
        self.buf.extend(int(v).to_bytes(2, "big", signed=False))

    def write_u64(self, v: int) -> None:
        self.buf.extend(int(v).to_bytes(8, "big", signed=False))

    def write_u256(self, v: int) -> None:
        self.buf.extend(int(v).to_bytes(32, "big", signed=False))

    def write_bytes(self, b: bytes) -> None:
        self.buf.extend(b)

    def write_bool(self, v: bool) -> None:
        self.write_u8(1 if v else 0)

    def write_address(self, v: object) -> None:
        addr = to_address(v)
        _expect_len("address", addr, ADDRESS_SIZE)
        self.write_bytes(addr)

    def write_str(self, s: str) -> None:
        if not isinstance(s, str):
            raise SpecError(ErrorCode.INVALID_FORMAT, "expected string")
        raw = s.encode("utf-8")
        if len(raw) > 0xFFFF:
            raise SpecError(ErrorCode.INVALID_FORMAT, "string too long")
        self.write_u16(len(raw))
        self.write_bytes(raw)


@dataclass
class Reader:
    data: bytes
    pos: int = 0

    def _take(self, n: int) -> bytes:
        end = self.pos + n
        if end > len(self.data):
            raise SpecError(ErrorCode.INVALID_FORMAT, "unexpected end of input")
        out = self.data[self.pos:end]
        self.pos = end
        return out

    def read_bytes(self, n: int) -> bytes:
        return self._take(n)

    def read_u8(self) -> int:
        return self._take(1)[0]

    def read_u16(self) -> int:
        return int.from_bytes(self._take(2), "big")

    def read_u64(self) -> int:
        return int.from_bytes(self._take(8), "big")

    def read_u256(self) -> int:
        return int.from_bytes(self._take(32), "big")

    def read_bool(self) -> bool:
        v = self.read_u8()
        if v not in (0, 1):
            raise SpecError(ErrorCode.INVALID_FORMAT, f"invalid bool byte {v}")
        return v == 1

    def read_address(self) -> bytes:
        return self._take(ADDRESS_SIZE)

    def read_str(self) -> str:
        raw = self._take(self.read_u16())
        try:
            return raw.decode("utf-8")
        except UnicodeDecodeError:
            raise SpecError(ErrorCode.INVALID_FORMAT, "invalid utf-8 string") from None

    def finish(self) -> None:
        if self.pos != len(self.data):
            raise SpecError(ErrorCode.INVALID_FORMAT, "trailing bytes")


def _expect_len(name: str, value: bytes, size: int) -> None:
    if len(value) != size:
        raise SpecError(ErrorCode.INVALID_FORMAT, f"{name} must be {size} bytes")


def _check_range(name: str, value: int, maximum: int) -> None:
    if isinstance(value, bool) or not isinstance(value, int) or value < 0 or value > maximum:
        raise SpecError(ErrorCode.INVALID_FORMAT, f"{name} out of range")


def _field(p: dict, key: str) -> object:
    if key not in p:
        raise SpecError(ErrorCode.INVALID_FORMAT, f"missing payload field {key!r}")
    return p[key]


def _write_flag(w: Writer, name: str, value: object) -> None:
    if not isinstance(value, bool):
        raise SpecError(ErrorCode.INVALID_FORMAT, f"{name} must be a bool")
    w.write_bool(value)


def _write_terms(w: Writer, beneficiaries: object, shares: object) -> None:
    if not isinstance(beneficiaries, (list, tuple)) or not isinstance(shares, (list, tuple)):
        raise SpecError(ErrorCode.INVALID_FORMAT, "terms must be lists")
    if len(beneficiaries) > 0xFF or len(shares) > 0xFF:
        raise SpecError(ErrorCode.INVALID_FORMAT, "too many terms entries")
    w.write_u8(len(beneficiaries))
    for b in beneficiaries:
        w.write_address(b)
    w.write_u8(len(shares))
    for s in shares:
        _check_range("share", s, 0xFF)
        w.write_u8(s)


def _read_terms(r: Reader) -> tuple[list[bytes], list[int]]:
    beneficiaries = [r.read_address() for _ in range(r.read_u8())]
    shares = [r.read_u8() for _ in range(r.read_u8())]
    return beneficiaries, shares


def _encode_payload(w: Writer, tx: Transaction) -> None:
    tt = tx.tx_type
    p = tx.payload
    if tt == TransactionType.TRANSFER:
        if not isinstance(p, TransferPayload):
            raise SpecError(ErrorCode.INVALID_PAYLOAD, "invalid transfer payload")
        w.write_address(p.destination)
        _check_range("amount", p.amount, U256_MAX)
        w.write_u256(p.amount)
        if p.data is None:
            w.write_bool(False)
        else:
            if len(p.data) > 0xFFFF:
                raise SpecError(ErrorCode.INVALID_FORMAT, "data too long")
            w.write_bool(True)
            w.write_u16(len(p.data))
            w.write_bytes(p.data)
        return

    if tt == TransactionType.DEPLOY_FACTORY:
        return

    if not isinstance(p, dict):
        raise SpecError(ErrorCode.INVALID_PAYLOAD, f"{tt.value} payload must be dict")

    if tt == TransactionType.CREATE_MPA:
        w.write_address(_field(p, "factory"))
        w.write_str(_field(p, "name"))
        w.write_str(_field(p, "description"))
        _write_terms(w, _field(p, "beneficiaries"), _field(p, "shares"))
        _write_flag(w, "locked", _field(p, "locked"))
    elif tt == TransactionType.FREEZE_MPA:
        w.write_address(_field(p, "mpa"))
        _write_flag(w, "frozen", _field(p, "frozen"))
    elif tt == TransactionType.SET_TERMS:
        w.write_address(_field(p, "mpa"))
        _write_terms(w, _field(p, "beneficiaries"), _field(p, "shares"))
    elif tt == TransactionType.DISTRIBUTE:
        w.write_address(_field(p, "mpa"))
    else:
        raise SpecError(ErrorCode.INVALID_TYPE, f"cannot encode {tt}")


def _decode_payload(r: Reader, tt: TransactionType) -> object:
    if tt == TransactionType.TRANSFER:
        destination = r.read_address()
        amount = r.read_u256()
        data = r.read_bytes(r.read_u16()) if r.read_bool() else None
        return TransferPayload(destination=destination, amount=amount, data=data)
    if tt == TransactionType.DEPLOY_FACTORY:
        return {}
    if tt == TransactionType.CREATE_MPA:
        factory = r.read_address()
        name = r.read_str()
        description = r.read_str()
        beneficiaries, shares = _read_terms(r)
        return {
            "factory": factory,
            "name": name,
            "description": description,
            "beneficiaries": beneficiaries,
            "shares": shares,
            "locked": r.read_bool(),
        }
    if tt == TransactionType.FREEZE_MPA:
        return {"mpa": r.read_address(), "frozen": r.read_bool()}
    if tt == TransactionType.SET_TERMS:
        mpa = r.read_address()
        beneficiaries, shares = _read_terms(r)
        return {"mpa": mpa, "beneficiaries": beneficiaries, "shares": shares}
    return {"mpa": r.read_address()}


def encode_transaction(tx: Transaction) -> bytes:
    w = Writer(bytearray())
    w.write_u8(int(tx.version))
    _check_range("chain_id", tx.chain_id, U64_MAX)
    w.write_u64(tx.chain_id)
    _expect_len("source", tx.source, ADDRESS_SIZE)
    w.write_bytes(tx.source)
    w.write_u8(TX_TYPE_IDS[tx.tx_type])
    _check_range("nonce", tx.nonce, U64_MAX)
    w.write_u64(tx.nonce)
    _check_range("fee", tx.fee, U256_MAX)
    w.write_u256(tx.fee)
    _encode_payload(w, tx)
    return bytes(w.buf)


def decode_transaction(data: bytes) -> Transaction:
    r = Reader(bytes(data))
    version_raw = r.read_u8()
    try:
        version = TxVersion(version_raw)
    except ValueError:
        raise SpecError(ErrorCode.INVALID_VERSION, f"unknown version {version_raw}") from None
    chain_id = r.read_u64()
    source = r.read_address()
    type_id = r.read_u8()
    tx_type = TX_TYPES_BY_ID.get(type_id)
    if tx_type is None:
        raise SpecError(ErrorCode.INVALID_TYPE, f"unknown tx type id {type_id}")
    nonce = r.read_u64()
    fee = r.read_u256()
    payload = _decode_payload(r, tx_type)
    r.finish()
    return Transaction(
        version=version,
        chain_id=chain_id,
        source=source,
        tx_type=tx_type,
        payload=payload,
        fee=fee,
        nonce=nonce,
    )


def tx_hash(tx: Transaction) -> bytes:
    return blake3(encode_transaction(tx)).digest()
