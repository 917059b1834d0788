"""Detection of L1 block reorganisations."""

from __future__ import annotations

import json
import logging
import queue
import threading
import urllib.request
from dataclasses import dataclass
from typing import Callable, List, Optional, Tuple
from urllib.parse import urlparse

from . import hexutil

log = logging.getLogger(__name__)

_RPC_TIMEOUT = 10.0

BlockFetcher = Callable[[], Tuple[int, bytes]]


@dataclass(frozen=True)
class BlockReorg:
    """Sent to subscribers on a reorg; ``number`` is the block the chain rewound to."""

    number: int
    hash: bytes = bytes(hexutil.HASH_LENGTH)


class ReorgDetector:
    """Polls the latest L1 block and notifies subscribers of reorganisations.

    Each subscriber gets a queue; ``None`` is put on it when the detector stops.
    """

    def __init__(
        self, rpc_url: str, polling_period: float, fetch_latest: Optional[BlockFetcher] = None
    ) -> None:
        self.rpc_url = rpc_url
        self.polling_period = polling_period
        self._custom_fetcher = fetch_latest is not None
        self._fetch_latest: BlockFetcher = fetch_latest or self._fetch_latest_over_rpc
        self._subscribers: List["queue.Queue[Optional[BlockReorg]]"] = []
        self._last: Optional[Tuple[int, bytes]] = None
        self._stop_event: Optional[threading.Event] = None
        self._thread: Optional[threading.Thread] = None

    def subscribe(self) -> "queue.Queue[Optional[BlockReorg]]":
        """A queue on which reorg messages will arrive."""
        channel: "queue.Queue[Optional[BlockReorg]]" = queue.Queue()
        self._subscribers.append(channel)
        return channel

    def process_block(self, number: int, block_hash: bytes) -> None:
        """Handle a newly seen block, notifying subscribers when it signals a reorg."""
        if self._last is not None and self._last[0] + 1 >= number:
            reorg = BlockReorg(number=number, hash=bytes(block_hash))
            for channel in self._subscribers:
                channel.put(reorg)
        self._last = (number, bytes(block_hash))

    def start(self) -> None:
        """Start tracking blocks in a background thread."""
        log.info("starting block reorganization detector")
        if self._thread is not None and self._thread.is_alive():
            raise RuntimeError("reorg detector already started")
        if not self._custom_fetcher and urlparse(self.rpc_url).scheme not in ("http", "https"):
            raise ValueError(f"unsupported rpc url: {self.rpc_url!r}")
        stop_event = threading.Event()
        self._stop_event = stop_event
        self._thread = threading.Thread(target=self._track, args=(stop_event,), daemon=True)
        self._thread.start()

    def stop(self) -> None:
        """Stop tracking and close every subscription."""
        if self._stop_event is not None:
            self._stop_event.set()
        if self._thread is not None:
            self._thread.join()
            self._thread = None
        for channel in self._subscribers:
            channel.put(None)

    def _track(self, stop_event: threading.Event) -> None:
        seen: Optional[bytes] = None
        while not stop_event.is_set():
            try:
                number, block_hash = self._fetch_latest()
            except Exception as exc:
                log.warning("failed to fetch latest block: %s", exc)
            else:
                if block_hash != seen:
                    seen = block_hash
                    self.process_block(number, block_hash)
            stop_event.wait(self.polling_period)

    def _fetch_latest_over_rpc(self) -> Tuple[int, bytes]:
        payload = json.dumps(
            {
                "jsonrpc": "2.0",
                "id": 1,
                "method": "eth_getBlockByNumber",
                "params": ["latest", False],
            }
        ).encode()
        request = urllib.request.Request(
            self.rpc_url, data=payload, headers={"Content-Type": "application/json"}
        )
        with urllib.request.urlopen(request, timeout=_RPC_TIMEOUT) as response:
            body = json.load(response)
        if body.get("error"):
            raise RuntimeError(body["error"].get("message", "rpc error"))
        result = body.get("result")
        if not result:
            raise RuntimeError("latest block not available")
        return hexutil.decode_uint64(result["number"]), hexutil.decode_bytes(result["hash"])