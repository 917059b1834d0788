import pytest

from dacnode.crypto import keccak256
from dacnode.txdata import SEQUENCE_BATCHES_SELECTOR, TxDataError, unpack_tx_data

SELECTOR = bytes([67, 138, 83, 153])


def _word(value: int) -> bytes:
    return value.to_bytes(32, "big")


def _calldata(hashes, selector=SELECTOR, coinbase=b"\xab\xcd", signatures=b"\x16\x17\x18"):
    batches = _word(len(hashes)) + b"".join(
        h + bytes(26) + bytes([6, 7, 8, 9, 10, 11]) + _word(101) + _word(11) for h in hashes
    )
    padded = signatures + bytes(-len(signatures) % 32)
    head = _word(96) + coinbase.rjust(32, b"\x00") + _word(96 + len(batches))
    return selector + head + batches + _word(len(signatures)) + padded


def test_exported_selector_is_accepted():
    tx_hash = keccak256(b"selector")
    data = _calldata([tx_hash], selector=SEQUENCE_BATCHES_SELECTOR)
    assert unpack_tx_data(data) == [tx_hash]


def test_single_batch_hash_is_unpacked():
    tx_hash = keccak256(bytes([1, 2, 3, 4, 5, 6]))
    assert unpack_tx_data(_calldata([tx_hash])) == [tx_hash]


def test_multiple_batches_keep_their_order():
    hashes = [keccak256(bytes([i])) for i in range(5)]
    assert unpack_tx_data(_calldata(hashes)) == hashes


def test_no_batches_gives_empty_list():
    assert unpack_tx_data(_calldata([])) == []


def test_invalid_data_is_rejected():
    with pytest.raises(TxDataError):
        unpack_tx_data(bytes([0, 1, 3, 4, 5, 6, 7]))


def test_data_shorter_than_selector_is_rejected():
    with pytest.raises(TxDataError):
        unpack_tx_data(b"\x43\x8a")


def test_unknown_selector_is_rejected():
    data = _calldata([keccak256(b"x")], selector=b"\x00\x00\x00\x01")
    with pytest.raises(TxDataError, match="no method with id"):
        unpack_tx_data(data)


@pytest.mark.parametrize("cut", [1, 40, 100])
def test_truncated_data_is_rejected(cut):
    data = _calldata([keccak256(b"a"), keccak256(b"b")])
    with pytest.raises(TxDataError):
        unpack_tx_data(data[:-cut])


def test_error_is_a_value_error():
    with pytest.raises(ValueError):
        unpack_tx_data(SELECTOR)