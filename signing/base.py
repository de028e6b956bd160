from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Dict, Optional, Protocol

from eth_account import Account
from eth_account.messages import encode_defunct

from .intents import EvmTxIntent

# Safe contracts tell eth_sign signatures apart from EIP-712 ones by v > 30.
SAFE_ETH_SIGN_V_OFFSET = 4


class SignedTx(Protocol):
    raw_transaction: bytes


class Signer(ABC):
    """
    A minimal signing interface for EVM transactions and Safe transaction hashes.

    `remote` signers do network I/O while signing; callers running in an event loop
    push them onto a worker thread.
    """

    remote: bool = False

    @abstractmethod
    def get_address(self) -> str:
        raise NotImplementedError

    @abstractmethod
    def sign_transaction(self, tx: Dict[str, Any], *, chain_id: int | None = None) -> SignedTx:
        raise NotImplementedError

    @abstractmethod
    def sign_safe_tx_hash(self, safe_tx_hash: bytes, *, intent: Optional[EvmTxIntent] = None) -> bytes:
        """
        Return a 65-byte r||s||v signature over a SafeTx hash, in the eth_sign flavour
        accepted by the Safe Transaction Service.
        """
        raise NotImplementedError


def eth_sign_safe_tx_hash(private_key: Any, safe_tx_hash: bytes) -> bytes:
    if len(safe_tx_hash) != 32:
        raise ValueError("safe_tx_hash must be 32 bytes")
    signed = Account.sign_message(encode_defunct(primitive=safe_tx_hash), private_key)
    sig = bytearray(signed.signature)
    sig[64] += SAFE_ETH_SIGN_V_OFFSET
    return bytes(sig)
