import pytest

from dacnode.batch import Batch, OffChainData, SignedBatch
from dacnode.crypto import InvalidSignatureError, PrivateKey, keccak256
from dacnode.hexutil import hex_to_address, hex_to_hash


@pytest.fixture
def batch():
    return Batch(
        number=1,
        global_exit_root=hex_to_hash("0x001"),
        timestamp=1,
        coinbase=hex_to_address("0x011"),
        l2_data=bytes([0, 1]),
    )


def test_sign_and_signer(batch):
    key = PrivateKey.generate()
    signed = batch.sign(key)
    assert signed.batch is batch
    assert signed.signer() == key.address()


def test_hash_changes_with_fields(batch):
    original = batch.hash_to_sign()
    assert len(original) == 32
    assert Batch(number=2, global_exit_root=batch.global_exit_root, timestamp=1,
                 coinbase=batch.coinbase, l2_data=batch.l2_data).hash_to_sign() != original
    assert Batch(number=1, global_exit_root=batch.global_exit_root, timestamp=1,
                 coinbase=batch.coinbase, l2_data=b"\x02").hash_to_sign() != original


def test_json_fields(batch):
    data = batch.to_json()
    assert data["number"] == "0x1"
    assert data["batchL2Data"] == "0x0001"
    assert data["transactions"] == []


def test_json_round_trip(batch):
    batch.transactions = [hex_to_hash("0xabc"), None]
    assert Batch.from_json(batch.to_json()) == batch


def test_from_json_rejects_short_coinbase(batch):
    data = batch.to_json()
    data["coinbase"] = "0x01"
    with pytest.raises(ValueError):
        Batch.from_json(data)


def test_rejects_wrong_root_length():
    with pytest.raises(ValueError):
        Batch(global_exit_root=b"\x00" * 31)


def test_signer_with_empty_signature(batch):
    with pytest.raises(InvalidSignatureError):
        SignedBatch(batch=batch, signature=b"").signer()


def test_signature_from_other_batch_gives_other_signer(batch):
    key = PrivateKey(7)
    signature = Batch(number=5).sign(key).signature
    assert SignedBatch(batch=batch, signature=signature).signer() != key.address()


def test_off_chain_data_holds_key_and_value():
    key = keccak256(b"v")
    data = OffChainData(key=key, value=b"v")
    assert (data.key, data.value) == (key, b"v")
    assert data == OffChainData(key=key, value=b"v")
    assert data != OffChainData(key=key, value=b"w")