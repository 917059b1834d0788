"""The ``datacom`` RPC endpoints: signing sequences for the sequencer."""

from __future__ import annotations

import json
import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Dict, List

from .batch import OffChainData
from .crypto import PrivateKey
from .dbtx import run_in_tx
from .interfaces import DB, EigenDA, RpcError, SequencerTracker, Tx
from .sequence import SignedSequence

log = logging.getLogger(__name__)

API_DATACOM = "datacom"


class DataComEndpoints:
    """Implements the ``datacom`` namespace."""

    def __init__(
        self,
        db: DB,
        private_key: PrivateKey,
        sequencer_tracker: SequencerTracker,
        eigenda: EigenDA,
    ) -> None:
        self._db = db
        self._private_key = private_key
        self._sequencer_tracker = sequencer_tracker
        self._eigenda = eigenda

    def sign_sequence(self, signed_sequence: SignedSequence) -> bytes:
        """Store the sequence's data and return this node's signature over it.

        Only the trusted sequencer may call this.
        """
        try:
            sender = signed_sequence.signer()
        except Exception as exc:
            raise RpcError("failed to verify sender") from exc
        if sender != bytes(self._sequencer_tracker.addr):
            raise RpcError("unauthorized")

        refs = self._store_in_eigenda(signed_sequence.sequence.off_chain_data())
        eigenda_refs = [
            OffChainData(key=key, value=json.dumps(ref).encode()) for key, ref in refs.items()
        ]

        def store(tx: Tx) -> None:
            try:
                self._db.store_off_chain_data(eigenda_refs, tx)
            except Exception as exc:
                raise RpcError(f"failed to store offchain data. Error: {exc}") from exc

        run_in_tx(self._db, store)

        try:
            signed_by_me = signed_sequence.sequence.sign(self._private_key)
        except Exception as exc:
            raise RpcError(f"failed to sign. Error: {exc}") from exc
        return signed_by_me.signature

    def _store_in_eigenda(self, data: List[OffChainData]) -> Dict[bytes, Any]:
        if not data:
            return {}
        try:
            with ThreadPoolExecutor() as pool:
                futures = {item.key: pool.submit(self._eigenda.put, item.value) for item in data}
                return {key: future.result() for key, future in futures.items()}
        except Exception as exc:
            log.error("failed to store data in eigenda: %s", exc)
            raise RpcError("failed to store data in eigenda") from exc