"""Persistence helpers used by the L1 synchroniser."""

from __future__ import annotations

import logging
from typing import List

from .batch import OffChainData
from .interfaces import DB, Tx

log = logging.getLogger(__name__)

L1_SYNC_TASK = "L1"


def get_start_block(db: DB) -> int:
    """The block to resume from: one before the last processed block."""
    try:
        start = db.get_last_processed_block(L1_SYNC_TASK)
    except Exception as exc:
        log.error("error retrieving last processed block: %s", exc)
        raise
    if start > 0:
        # the last block may have been only partially processed
        start -= 1
    return start


def set_start_block(db: DB, block: int) -> None:
    """Record the block from which synchronisation continues."""
    tx = db.begin_state_transaction()
    db.store_last_processed_block(L1_SYNC_TASK, block, tx)
    tx.commit()


def exists(db: DB, key: bytes) -> bool:
    """Tell whether data for the key is already stored."""
    return db.exists(key)


def store(db: DB, data: List[OffChainData]) -> None:
    """Store off-chain data in one transaction, rolling back on failure."""
    tx = db.begin_state_transaction()
    try:
        db.store_off_chain_data(data, tx)
    except Exception as exc:
        _rollback(exc, tx)
        raise
    tx.commit()


def _rollback(err: Exception, tx: Tx) -> None:
    try:
        tx.rollback()
    except Exception as tx_err:
        log.error("failed to roll back transaction after error %s : %s", err, tx_err)