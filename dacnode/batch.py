"""Batches exchanged with the sequencer, and their signatures."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from . import hexutil
from .crypto import PrivateKey, keccak256, recover_address, sign


def _check_length(name: str, value: bytes, size: int) -> bytes:
    value = bytes(value)
    if len(value) != size:
        raise ValueError(f"{name} must be {size} bytes, got {len(value)}")
    return value


def _decode_fixed(name: str, text: str, size: int) -> bytes:
    return _check_length(name, hexutil.decode_bytes(text), size)


@dataclass(frozen=True)
class OffChainData:
    """Data kept off chain, keyed by its Keccak-256 hash."""

    key: bytes
    value: bytes


@dataclass
class Batch:
    """A batch used for synchronisation."""

    number: int = 0
    global_exit_root: bytes = bytes(hexutil.HASH_LENGTH)
    timestamp: int = 0
    coinbase: bytes = bytes(hexutil.ADDRESS_LENGTH)
    l2_data: bytes = b""
    transactions: List[Optional[bytes]] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.global_exit_root = _check_length(
            "global exit root", self.global_exit_root, hexutil.HASH_LENGTH
        )
        self.coinbase = _check_length("coinbase", self.coinbase, hexutil.ADDRESS_LENGTH)
        self.l2_data = bytes(self.l2_data)

    def hash_to_sign(self) -> bytes:
        """A hash that uniquely identifies the batch."""
        return keccak256(
            hexutil.encode_uint64(self.number).encode(),
            self.global_exit_root,
            hexutil.encode_uint64(self.timestamp).encode(),
            self.coinbase,
            self.l2_data,
        )

    def sign(self, private_key: PrivateKey) -> "SignedBatch":
        return SignedBatch(batch=self, signature=sign(self.hash_to_sign(), private_key))

    def to_json(self) -> Dict[str, Any]:
        return {
            "number": hexutil.encode_uint64(self.number),
            "globalExitRoot": hexutil.encode_bytes(self.global_exit_root),
            "timestamp": hexutil.encode_uint64(self.timestamp),
            "coinbase": hexutil.encode_bytes(self.coinbase),
            "batchL2Data": hexutil.encode_bytes(self.l2_data),
            "transactions": [
                {"Hash": None if tx is None else hexutil.encode_bytes(tx)}
                for tx in self.transactions
            ],
        }

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> "Batch":
        transactions = [
            None if entry.get("Hash") is None
            else _decode_fixed("transaction hash", entry["Hash"], hexutil.HASH_LENGTH)
            for entry in data.get("transactions") or []
        ]
        return cls(
            number=hexutil.decode_uint64(data.get("number", "0x0")),
            global_exit_root=_decode_fixed(
                "global exit root",
                data.get("globalExitRoot", hexutil.encode_bytes(bytes(hexutil.HASH_LENGTH))),
                hexutil.HASH_LENGTH,
            ),
            timestamp=hexutil.decode_uint64(data.get("timestamp", "0x0")),
            coinbase=_decode_fixed(
                "coinbase",
                data.get("coinbase", hexutil.encode_bytes(bytes(hexutil.ADDRESS_LENGTH))),
                hexutil.ADDRESS_LENGTH,
            ),
            l2_data=hexutil.decode_bytes(data.get("batchL2Data", "0x")),
            transactions=transactions,
        )


@dataclass
class SignedBatch:
    """A batch together with its signature."""

    batch: Batch
    signature: bytes

    def signer(self) -> bytes:
        """The address that signed the batch."""
        return recover_address(self.batch.hash_to_sign(), self.signature)