"""Finding the block at which the validium contract was deployed."""

from __future__ import annotations

import logging

from . import hexutil
from .interfaces import DB, EthClient, EthClientFactory
from .store import get_start_block, set_start_block

log = logging.getLogger(__name__)

MIN_CODE_LEN = 2


def init_start_block(
    db: DB, eth_client_factory: EthClientFactory, rpc_url: str, contract_address: str
) -> None:
    """Set the start block to the contract's deployment block unless already set."""
    current = get_start_block(db)
    if current > 0:
        return
    log.info("starting search for start block of contract %s", contract_address)
    eth = eth_client_factory.create_eth_client(rpc_url)
    start_block = find_contract_deployment_block(eth, hexutil.hex_to_address(contract_address))
    set_start_block(db, start_block)


def find_contract_deployment_block(eth: EthClient, contract: bytes) -> int:
    """The first block at which the contract has code."""
    latest = eth.latest_block_number()
    return find_code(eth, contract, 0, latest)


def find_code(eth: EthClient, address: bytes, start_block: int, end_block: int) -> int:
    """Binary search for the first block in the range where code exists."""
    while start_block < end_block:
        mid_block = (start_block + end_block) // 2
        if _code_len(eth, address, mid_block) > MIN_CODE_LEN:
            end_block = mid_block
        else:
            start_block = mid_block + 1
    return start_block


def _code_len(eth: EthClient, address: bytes, block_number: int) -> int:
    try:
        return len(eth.code_at(address, block_number))
    except Exception:
        return 0