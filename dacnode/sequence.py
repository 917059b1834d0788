"""Sequences sent by the sequencer to L1, and their signatures."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List

from . import hexutil
from .batch import Batch, OffChainData
from .crypto import (
    SIGNATURE_LENGTH,
    InvalidSignatureError,
    PrivateKey,
    keccak256,
    recover_address,
    sign,
)

_S_UPPER_BOUND = int("7FFFFFFFFFFFFFFFFFFFFFFFFFFFFFFF5D576E7357A4501DDFE92F46681B20A0", 16)
_CURVE_ORDER = int("FFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFEBAAEDCE6AF48A03BBFD25E8CD0364141", 16)
_V_OFFSET = 27


@dataclass
class Sequence:
    """Batches plus the accumulated input hash they build upon."""

    batches: List[Batch] = field(default_factory=list)
    old_acc_input_hash: bytes = bytes(hexutil.HASH_LENGTH)

    def hash_to_sign(self) -> bytes:
        """The accumulated input hash, computed as the contract does."""
        current = bytes(self.old_acc_input_hash)
        for batch in self.batches:
            current = keccak256(
                current,
                keccak256(batch.l2_data),
                batch.global_exit_root,
                batch.timestamp.to_bytes(8, "big"),
                batch.coinbase,
            )
        return current

    def sign(self, private_key: PrivateKey) -> "SignedSequence":
        """Sign the accumulated input hash; v is returned as 27 or 28."""
        signature = sign(self.hash_to_sign(), private_key)
        r_bytes = signature[:32]
        s_bytes = signature[32:64]
        v = signature[64]
        s_value = int.from_bytes(s_bytes, "big")
        if s_value > _S_UPPER_BOUND:
            s_value = _CURVE_ORDER - s_value
            s_bytes = s_value.to_bytes((s_value.bit_length() + 7) // 8, "big")
            v = 1 if v == 0 else 0
        v = (v + _V_OFFSET) % 256
        return SignedSequence(sequence=self, signature=r_bytes + s_bytes + bytes([v]))

    def off_chain_data(self) -> List[OffChainData]:
        """The data of each batch keyed by its hash."""
        return [OffChainData(key=keccak256(b.l2_data), value=b.l2_data) for b in self.batches]


@dataclass
class SignedSequence:
    """A sequence together with its signature."""

    sequence: Sequence = field(default_factory=Sequence)
    signature: bytes = b""

    def signer(self) -> bytes:
        """The address that signed the sequence."""
        if len(self.signature) != SIGNATURE_LENGTH:
            raise InvalidSignatureError("invalid signature")
        signature = bytearray(self.signature)
        signature[64] = (signature[64] - _V_OFFSET) % 256
        return recover_address(self.sequence.hash_to_sign(), bytes(signature))