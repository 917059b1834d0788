"""Decoding of ``sequenceBatches`` transaction input data."""

from __future__ import annotations

from typing import List

SEQUENCE_BATCHES_SELECTOR = bytes((0x43, 0x8A, 0x53, 0x99))

_SELECTOR_LENGTH = 4
_WORD = 32
# transactionsHash, globalExitRoot, timestamp, minForcedTimestamp
_BATCH_DATA_SIZE = 4 * _WORD


class TxDataError(ValueError):
    """Transaction input data that is not a valid ``sequenceBatches`` call."""


def _uint_at(data: bytes, offset: int) -> int:
    end = offset + _WORD
    if offset < 0 or end > len(data):
        raise TxDataError(
            f"abi: cannot unmarshal, insufficient data at offset {offset} (length {len(data)})"
        )
    return int.from_bytes(data[offset:end], "big")


def _check_span(data: bytes, start: int, size: int, what: str) -> None:
    if start + size > len(data):
        raise TxDataError(
            f"abi: cannot unmarshal {what}, need {start + size} bytes, have {len(data)}"
        )


def unpack_tx_data(tx_data: bytes) -> List[bytes]:
    """The transaction hashes of the batches in a ``sequenceBatches`` call, in order."""
    tx_data = bytes(tx_data)
    if len(tx_data) < _SELECTOR_LENGTH:
        raise TxDataError("transaction data too short to hold a method id")
    selector = tx_data[:_SELECTOR_LENGTH]
    if selector != SEQUENCE_BATCHES_SELECTOR:
        raise TxDataError(f"no method with id: {selector.hex()!r}")
    args = tx_data[_SELECTOR_LENGTH:]

    batches_offset = _uint_at(args, 0)
    _uint_at(args, _WORD)  # l2Coinbase
    signatures_offset = _uint_at(args, 2 * _WORD)

    signatures_length = _uint_at(args, signatures_offset)
    _check_span(args, signatures_offset + _WORD, signatures_length, "signatures")

    count = _uint_at(args, batches_offset)
    base = batches_offset + _WORD
    _check_span(args, base, count * _BATCH_DATA_SIZE, "batches")

    return [
        args[start:start + _WORD]
        for start in range(base, base + count * _BATCH_DATA_SIZE, _BATCH_DATA_SIZE)
    ]