"""The ``sync`` RPC endpoints: serving stored off-chain data to other nodes."""

from __future__ import annotations

import json
import logging

from .dbtx import run_in_tx
from .interfaces import DB, EigenDA, RpcError, Tx

log = logging.getLogger(__name__)

API_SYNC = "sync"


class SyncEndpoints:
    """Implements the ``sync`` namespace."""

    def __init__(self, db: DB, eigenda: EigenDA) -> None:
        self._db = db
        self._eigenda = eigenda

    def get_off_chain_data(self, key: bytes) -> bytes:
        """The data whose hash is ``key``."""

        def fetch(tx: Tx) -> bytes:
            try:
                return self._db.get_off_chain_data(key, tx)
            except Exception as exc:
                log.error("failed to get the offchain requested data from the DB: %s", exc)
                raise RpcError("failed to get the requested data") from exc

        ref_data = run_in_tx(self._db, fetch)

        try:
            ref = json.loads(bytes(ref_data))
        except (ValueError, TypeError) as exc:
            raise RpcError("failed to unmarshal eigenda ref") from exc

        try:
            data = self._eigenda.get(ref)
        except Exception as exc:
            log.error("failed to get data from eigenda: %s", exc)
            raise RpcError("failed to get data from eigenda") from exc
        return bytes(data)