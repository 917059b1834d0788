"""Running work inside a database transaction on behalf of RPC endpoints."""

from __future__ import annotations

import logging
from typing import Callable, TypeVar

from .interfaces import DB, RpcError, Tx

log = logging.getLogger(__name__)

T = TypeVar("T")


def run_in_tx(db: DB, fn: Callable[[Tx], T]) -> T:
    """Call ``fn`` with a fresh transaction and commit it, or roll it back on failure.

    Failures to open, roll back or commit the transaction are raised as
    :class:`RpcError`; an error raised by ``fn`` is raised again after the
    transaction has been rolled back.
    """
    try:
        tx = db.begin_state_transaction()
    except Exception as exc:
        log.error("failed to begin db transaction: %s", exc)
        raise RpcError("failed to connect to the state") from exc

    try:
        result = fn(tx)
    except Exception as exc:
        try:
            tx.rollback()
        except Exception as rollback_exc:
            log.error(
                "failed to rollback db transaction after error %s: %s", exc, rollback_exc
            )
            raise RpcError(
                f"failed to rollback db transaction, error: {rollback_exc}"
            ) from rollback_exc
        raise

    try:
        tx.commit()
    except Exception as exc:
        log.error("failed to commit db transaction: %s", exc)
        raise RpcError("failed to commit db transaction") from exc
    return result