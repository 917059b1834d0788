# dacnode

`dacnode` holds the building blocks of a data availability committee member.
A committee member does three things:

* **Signs sequences.** The trusted sequencer sends it a signed sequence of
  batches. The member checks that the sequencer really signed it, stores the
  batch data and answers with its own signature over the accumulated input
  hash.
* **Serves off-chain data.** Other nodes ask for the data behind a batch hash.
* **Keeps its store complete.** It watches L1 for `sequenceBatches` calls and
  fetches any batch data it lacks. It asks the trusted sequencer first, then
  the other committee members in random order.

## Installation

```
pip install .
```

To run the test suite:

```
pip install .[test]
pytest
```

## Hex helpers

`dacnode.hexutil` encodes and decodes the `0x` forms used in JSON-RPC
payloads:

```python
from dacnode.hexutil import encode_uint64, decode_uint64, encode_bytes, decode_bytes

encode_uint64(255)        # "0xff"
decode_uint64("0xff")     # 255
encode_bytes(b"\x01\x02") # "0x0102"
decode_bytes("0x102")     # b"\x01\x02"
```

`decode_uint64` and `decode_bytes` raise `ValueError` on malformed input.
`parse_hash` accepts a hash shorter than 32 bytes, such as `0x00`.
`hex_to_hash` and `hex_to_address` pad on the left, or keep the rightmost
bytes, to give a 32-byte hash or a 20-byte address. `hex_is_valid`,
`hex_encode_big`, `encode_big` and `decode_big` cover the remaining cases.

## Keys and signatures

`dacnode.crypto` provides Keccak-256 hashing and secp256k1 signing and
recovery. Signatures are deterministic (RFC 6979 nonces) and always have a
low `s` value:

```python
from dacnode.crypto import PrivateKey, keccak256, sign, recover_address

key = PrivateKey.generate()
digest = keccak256(b"hello")
signature = sign(digest, key)          # 65 bytes: r || s || v, v in {0, 1}
assert recover_address(digest, signature) == key.address()
```

A signature that cannot be parsed or recovered raises
`InvalidSignatureError`, a subclass of `ValueError`.

## Batches and sequences

`dacnode.batch.Batch` is a single batch. `Batch.hash_to_sign` identifies it,
`Batch.sign` returns a `SignedBatch`, and `Batch.to_json` / `Batch.from_json`
convert to and from the JSON-RPC form.

A `dacnode.sequence.Sequence` is a list of batches plus the previous
accumulated input hash:

```python
from dacnode.batch import Batch
from dacnode.sequence import Sequence
from dacnode.hexutil import hex_to_hash, hex_to_address

sequence = Sequence(
    batches=[
        Batch(
            number=1,
            global_exit_root=hex_to_hash("0x01"),
            timestamp=1,
            coinbase=hex_to_address("0x11"),
            l2_data=b"\x00\x01",
        ),
    ],
    old_acc_input_hash=hex_to_hash("0x101"),
)

signed = sequence.sign(key)
assert signed.signer() == key.address()
sequence.off_chain_data()   # [OffChainData(key=keccak256(l2_data), value=l2_data)]
```

`Sequence.hash_to_sign` computes the same accumulated input hash as the
on-chain contract. `Sequence.sign` returns a signature with a low `s` value
and `v` of 27 or 28, and `SignedSequence.signer` expects that form.

## Services

`dacnode.datacom.DataComEndpoints.sign_sequence` checks the sender against
the sequencer tracker's address. It then puts each batch's data into EigenDA
in parallel, stores the JSON-encoded references in the database under the
batch hashes, and returns this node's signature.

`dacnode.syncservice.SyncEndpoints.get_off_chain_data` reads the stored
reference for a hash and fetches the data behind it from EigenDA.

Both run their database work through `dacnode.dbtx.run_in_tx`. It commits on
success and rolls back when the work fails. Failures in either service raise
`dacnode.interfaces.RpcError`, which carries a JSON-RPC error code.

## Synchronization

`dacnode.synchronizer.BatchSynchronizer` scans L1 for `sequenceBatches`
events in windows of blocks. The window size comes from `SyncConfig`; 0 means
the default of 32. For each event, `dacnode.txdata.unpack_tx_data` decodes
the batch hashes from the transaction input. Any batch missing from the
database is resolved and stored.

`dacnode.reorg.ReorgDetector` polls the latest L1 block. By default it uses
`eth_getBlockByNumber` over HTTP(S), or it calls a fetcher function you pass
in. It puts a `BlockReorg` on each subscriber's queue when a reorg is seen,
and `None` when it stops. On a reorg, the synchronizer moves its start block
back to the reorg's block if it had already gone past it.

`dacnode.startblock.init_start_block` finds the block in which the validium
contract was deployed, using a binary search over the contract code. It does
this only when no start block has been recorded yet.

## What the package does not include

The database, the L1 contract client, the Ethereum client, the sequencer
tracker, the committee RPC clients and EigenDA are all abstract classes in
`dacnode.interfaces`. No concrete implementations ship with the package, so
implement them for your own storage and network back ends. The package also
has no JSON-RPC server, no configuration or keystore loading, and no command
to start a node. The endpoint classes are meant to be mounted in a server of
your choosing.

## Version information

```python
import sys
from dacnode.version import print_version

print_version(sys.stdout)
```