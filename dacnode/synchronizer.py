"""Watches L1 for sequenced batches and fetches any data missing locally."""

from __future__ import annotations

import logging
import queue
import random
import threading
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from . import hexutil
from .batch import OffChainData
from .crypto import keccak256
from .interfaces import (
    DB,
    DataCommitteeMember,
    Etherman,
    NotFoundError,
    RpcClientFactory,
    SequencerTracker,
)
from .reorg import BlockReorg
from .store import exists, get_start_block, set_start_block, store
from .txdata import unpack_tx_data

log = logging.getLogger(__name__)

DEFAULT_BLOCK_BATCH_SIZE = 32
_ZERO_ADDRESS = bytes(hexutil.ADDRESS_LENGTH)
_QUEUE_POLL = 0.1


@dataclass
class SyncConfig:
    """Settings of the batch synchroniser; a block batch size of 0 means the default."""

    retry_period: float
    block_batch_size: int = 0


@dataclass(frozen=True)
class BatchKey:
    """A batch number paired with the hash of the batch's data."""

    number: int
    hash: bytes


class BatchSynchronizer:
    """Resolves the data of sequenced batches that are not stored locally."""

    def __init__(
        self,
        config: SyncConfig,
        self_addr: bytes,
        db: DB,
        reorgs: Optional["queue.Queue[Optional[BlockReorg]]"],
        etherman: Etherman,
        sequencer: SequencerTracker,
        rpc_client_factory: RpcClientFactory,
    ) -> None:
        block_batch_size = config.block_batch_size
        if block_batch_size == 0:
            log.info(
                "block number size is not set, setting to default %d", DEFAULT_BLOCK_BATCH_SIZE
            )
            block_batch_size = DEFAULT_BLOCK_BATCH_SIZE
        self._retry = config.retry_period
        self._block_batch_size = block_batch_size
        self._self = bytes(self_addr)
        self._db = db
        self._reorgs = reorgs
        self._client = etherman
        self._sequencer = sequencer
        self._rpc_client_factory = rpc_client_factory
        self._lock = threading.Lock()
        self._committee: Dict[bytes, DataCommitteeMember] = {}
        self._stop_event = threading.Event()
        self._threads: List[threading.Thread] = []
        self.resolve_committee()

    def resolve_committee(self) -> None:
        """Load the current committee, leaving out this node itself."""
        with self._lock:
            current = self._client.get_current_data_committee()
            self._committee = {
                member.addr: member for member in current.members if member.addr != self._self
            }

    def start(self) -> None:
        """Start producing and handling events and watching for reorgs."""
        log.info("starting number synchronizer, DAC addr: 0x%s", self._self.hex())
        self._stop_event.clear()
        targets = [self._produce_events]
        if self._reorgs is not None:
            targets.append(self._handle_reorgs)
        self._threads = [threading.Thread(target=t, daemon=True) for t in targets]
        for thread in self._threads:
            thread.start()

    def stop(self) -> None:
        """Stop the background work and wait for it to finish."""
        self._stop_event.set()
        for thread in self._threads:
            thread.join()
        self._threads = []

    def _handle_reorgs(self) -> None:
        assert self._reorgs is not None
        while not self._stop_event.is_set():
            try:
                reorg = self._reorgs.get(timeout=_QUEUE_POLL)
            except queue.Empty:
                continue
            if reorg is None:
                return
            self.handle_reorg(reorg)

    def handle_reorg(self, reorg: BlockReorg) -> None:
        """Rewind the start block to the reorg's block if it lies behind it."""
        try:
            latest = get_start_block(self._db)
        except Exception as exc:
            log.error("could not determine latest processed block: %s", exc)
            return
        if latest < reorg.number:
            return
        try:
            set_start_block(self._db, reorg.number)
        except Exception as exc:
            log.error("failed to store new start block to %d: %s", reorg.number, exc)

    def _produce_events(self) -> None:
        log.info("starting event producer")
        while not self._stop_event.wait(self._retry):
            try:
                self.filter_events()
            except Exception as exc:
                log.error("error filtering events: %s", exc)

    def filter_events(self) -> None:
        """Handle SequenceBatches events from the start block on, then advance it."""
        start = get_start_block(self._db)
        end = min(start + self._block_batch_size, self._client.latest_block_number())
        for event in self._client.filter_sequence_batches(start, end):
            try:
                self.handle_event(event)
            except Exception as exc:
                log.error("failed to handle event: %s", exc)
        set_start_block(self._db, end)

    def handle_event(self, event: Any) -> None:
        """Fetch and store the data of every batch in the event not yet stored."""
        tx_data = self._client.get_tx_data(event.tx_hash)
        keys = unpack_tx_data(tx_data)
        # the event carries the last batch number; earlier hashes belong to earlier batches
        batch_keys = [
            BatchKey(number=event.num_batch - offset, hash=key)
            for offset, key in enumerate(reversed(keys))
        ]
        missing = [key for key in batch_keys if not exists(self._db, key.hash)]
        if not missing:
            return
        store(self._db, [self.resolve(key) for key in missing])

    def resolve(self, batch: BatchKey) -> OffChainData:
        """The batch's data from the sequencer or, failing that, a committee member."""
        data = self._try_sequencer(batch)
        if data is not None:
            return data

        if not self._committee:
            # members are evicted for lacking data or being malformed; reload once all are gone
            self.resolve_committee()

        members = list(self._committee.values())
        random.shuffle(members)
        for member in members:
            if not member.url or member.addr == _ZERO_ADDRESS or member.addr == self._self:
                self._committee.pop(member.addr, None)
                continue
            try:
                return self._resolve_with_member(batch.hash, member)
            except Exception as exc:
                log.warning("error resolving, continuing: %s", exc)
                self._committee.pop(member.addr, None)
        raise NotFoundError(
            f"no data found for number {batch.number}, key {hexutil.encode_bytes(batch.hash)}"
        )

    def _try_sequencer(self, batch: BatchKey) -> Optional[OffChainData]:
        try:
            seq_batch = self._sequencer.get_sequence_batch(batch.number)
        except Exception as exc:
            log.warning("failed to get data from sequencer: %s", exc)
            return None
        if keccak256(seq_batch.batch_l2_data) != batch.hash:
            log.warning(
                "number %d: sequencer gave wrong data for key: %s",
                batch.number,
                hexutil.encode_bytes(batch.hash),
            )
            return None
        return OffChainData(key=batch.hash, value=bytes(seq_batch.batch_l2_data))

    def _resolve_with_member(self, key: bytes, member: DataCommitteeMember) -> OffChainData:
        client = self._rpc_client_factory.new(member.url)
        log.debug(
            "trying member %s at %s for key %s",
            hexutil.encode_bytes(member.addr),
            member.url,
            hexutil.encode_bytes(key),
        )
        value = bytes(client.get_off_chain_data(key))
        expect_key = keccak256(value)
        if key != expect_key:
            raise ValueError(
                f"unexpected key gotten from member: {hexutil.encode_bytes(member.addr)}. "
                f"Key: {hexutil.encode_bytes(expect_key)}"
            )
        return OffChainData(key=key, value=value)