from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Dict, Optional

from eth_utils import is_address, is_checksum_address, to_checksum_address
from web3 import AsyncHTTPProvider, AsyncWeb3

from errors import InvalidArgument


@dataclass(frozen=True)
class ChainInfo:
    chain_id: int
    name: str
    safe_tx_service_url: str


CHAINS: Dict[int, ChainInfo] = {
    1: ChainInfo(1, "ethereum", "https://safe-transaction-mainnet.safe.global"),
    10: ChainInfo(10, "optimism", "https://safe-transaction-optimism.safe.global"),
    8453: ChainInfo(8453, "base", "https://safe-transaction-base.safe.global"),
    42161: ChainInfo(42161, "arbitrum", "https://safe-transaction-arbitrum.safe.global"),
    11155111: ChainInfo(11155111, "sepolia", "https://safe-transaction-sepolia.safe.global"),
}


def chain_info_for(chain_id: int) -> ChainInfo:
    info = CHAINS.get(int(chain_id))
    if info is None:
        raise InvalidArgument(f"Unsupported chain id: {chain_id}", {"supported": sorted(CHAINS)})
    return info


def _env(name: str) -> Optional[str]:
    v = os.getenv(name)
    if v is None:
        return None
    v = v.strip()
    return v or None


def safe_tx_service_url_for(chain_id: int, override: Optional[str] = None) -> str:
    """
    `override` (settings.SAFE_TX_SERVICE_URL) replaces the registry URL for self-hosted services.
    """
    return ((override or "").strip() or chain_info_for(chain_id).safe_tx_service_url).rstrip("/")


def rpc_url_for(chain_id: int) -> str:
    """
    Resolve RPC URL for a chain.

    Env precedence (chain 42161 -> ARBITRUM):
    - EVM_RPC_URL_<CHAIN>
    - RPC_URL_<CHAIN>
    """
    key = chain_info_for(chain_id).name.upper()
    url = _env(f"EVM_RPC_URL_{key}") or _env(f"RPC_URL_{key}")
    if not url:
        raise InvalidArgument(
            f"Missing RPC URL for chain {chain_id}. Set EVM_RPC_URL_{key} (or RPC_URL_{key}).",
            {"chain_id": int(chain_id)},
        )
    return url


def get_async_web3(chain_id: int, *, timeout: float = 10.0) -> AsyncWeb3:
    url = rpc_url_for(chain_id)
    return AsyncWeb3(AsyncHTTPProvider(url, request_kwargs={"timeout": timeout}))


def is_hex_address(s: str) -> bool:
    v = (s or "").strip()
    return v.startswith("0x") and len(v) == 42 and is_address(v)


def checksum(address: str, *, field: str = "address") -> str:
    if not isinstance(address, str) or not is_hex_address(address):
        raise InvalidArgument(f"Malformed {field}: {address!r}", {field: address})
    v = address.strip()
    body = v[2:]
    # Single-case input carries no checksum; mixed case must be valid EIP-55.
    if body != body.lower() and body != body.upper() and not is_checksum_address(v):
        raise InvalidArgument(f"Bad EIP-55 checksum for {field}: {address!r}", {field: address})
    return to_checksum_address(v)
