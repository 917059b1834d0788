"""Errors, data records and the abstract collaborators of the node."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Iterable, List

DEFAULT_ERROR_CODE = -32000
NOT_FOUND_ERROR_CODE = -32601


class RpcError(Exception):
    """An error reported to RPC callers, carrying a JSON-RPC error code."""

    def __init__(self, message: str, code: int = DEFAULT_ERROR_CODE) -> None:
        super().__init__(message)
        self.message = message
        self.code = code


class NotFoundError(RpcError):
    """The requested data could not be found anywhere."""

    def __init__(self, message: str) -> None:
        super().__init__(message, NOT_FOUND_ERROR_CODE)


@dataclass(frozen=True)
class DataCommitteeMember:
    """A member of the data availability committee."""

    addr: bytes
    url: str


@dataclass
class DataCommittee:
    """The current data availability committee."""

    members: List[DataCommitteeMember] = field(default_factory=list)


@dataclass(frozen=True)
class SeqBatch:
    """A batch as reported by the trusted sequencer."""

    number: int
    batch_l2_data: bytes


class Tx(ABC):
    """A database transaction."""

    @abstractmethod
    def commit(self) -> None:
        """Make the transaction's changes permanent."""

    @abstractmethod
    def rollback(self) -> None:
        """Discard the transaction's changes."""


class DB(ABC):
    """Storage for off-chain data and synchronisation progress."""

    @abstractmethod
    def begin_state_transaction(self) -> Tx:
        """Open a new transaction."""

    @abstractmethod
    def store_last_processed_block(self, task: str, block: int, tx: Tx) -> None:
        """Record the last block processed by a sync task."""

    @abstractmethod
    def get_last_processed_block(self, task: str) -> int:
        """The last block processed by a sync task."""

    @abstractmethod
    def exists(self, key: bytes) -> bool:
        """Tell whether data is stored under the key."""

    @abstractmethod
    def store_off_chain_data(self, data: List[Any], tx: Tx) -> None:
        """Store off-chain data records within a transaction."""

    @abstractmethod
    def get_off_chain_data(self, key: bytes, tx: Tx) -> bytes:
        """The data stored under the key."""


class Etherman(ABC):
    """Access to the L1 contracts.

    Events returned by ``filter_sequence_batches`` carry ``tx_hash`` and
    ``num_batch`` attributes.
    """

    @abstractmethod
    def get_current_data_committee(self) -> DataCommittee:
        """The committee currently registered on chain."""

    @abstractmethod
    def latest_block_number(self) -> int:
        """The number of the latest L1 block."""

    @abstractmethod
    def filter_sequence_batches(self, start: int, end: int) -> Iterable[Any]:
        """SequenceBatches events emitted between the two blocks."""

    @abstractmethod
    def get_tx_data(self, tx_hash: bytes) -> bytes:
        """The input data of the transaction with the given hash."""


class SequencerTracker(ABC):
    """Knows the trusted sequencer and can ask it for batches."""

    @property
    @abstractmethod
    def addr(self) -> bytes:
        """The trusted sequencer's address."""

    @abstractmethod
    def get_sequence_batch(self, number: int) -> SeqBatch:
        """The batch with the given number from the sequencer."""


class EthClient(ABC):
    """A minimal Ethereum JSON-RPC client."""

    @abstractmethod
    def latest_block_number(self) -> int:
        """The number of the latest block."""

    @abstractmethod
    def code_at(self, account: bytes, block_number: int) -> bytes:
        """The contract code at the account as of the block."""


class EthClientFactory(ABC):
    """Creates Ethereum clients."""

    @abstractmethod
    def create_eth_client(self, url: str) -> EthClient:
        """A client connected to the given URL."""


class RpcClient(ABC):
    """A client of another committee member's node."""

    @abstractmethod
    def get_off_chain_data(self, key: bytes) -> bytes:
        """The data the member stores under the key."""


class RpcClientFactory(ABC):
    """Creates clients for committee members."""

    @abstractmethod
    def new(self, url: str) -> RpcClient:
        """A client for the member at the given URL."""


class EigenDA(ABC):
    """A blob store returning JSON-serialisable references."""

    @abstractmethod
    def put(self, data: bytes) -> Any:
        """Store the data and return a reference to it."""

    @abstractmethod
    def get(self, ref: Any) -> bytes:
        """The data behind a reference."""