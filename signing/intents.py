from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional

EVM_TRANSACTION = "evm_transaction"
SAFE_TRANSACTION = "safe_transaction"


@dataclass(frozen=True)
class EvmTxIntent:
    """
    Explicit description of what is about to be signed.

    For a direct transaction this mirrors the tx dict. For a Safe proposal the signer
    only ever sees a 32-byte hash, so the intent carries the decoded SafeTx fields
    that the hash commits to; policy checks and remote signers rely on it.

    This is a *description* of what will be signed; it is not the signed payload.
    """

    intent_type: str  # EVM_TRANSACTION or SAFE_TRANSACTION
    chain_id: Optional[int]
    to: Optional[str]
    value_wei: Optional[int]
    data_hex: Optional[str]
    nonce: Optional[int]
    gas: Optional[int] = None
    gas_price_wei: Optional[int] = None
    safe_address: Optional[str] = None
    safe_tx_hash: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "intent_type": self.intent_type,
            "chain_id": self.chain_id,
            "to": self.to,
            "value_wei": self.value_wei,
            "data_hex": self.data_hex,
            "nonce": self.nonce,
            "gas": self.gas,
            "gas_price_wei": self.gas_price_wei,
            "safe_address": self.safe_address,
            "safe_tx_hash": self.safe_tx_hash,
        }


def _to_int(x: Any) -> Optional[int]:
    if x is None or isinstance(x, bool):
        return None
    if isinstance(x, int):
        return x
    try:
        if isinstance(x, str):
            s = x.strip()
            return int(s, 16) if s.startswith("0x") else int(s)
        return int(x)
    except (TypeError, ValueError):
        return None


def _to_hex(data: Any) -> Optional[str]:
    if data is None:
        return None
    if isinstance(data, (bytes, bytearray)):
        return "0x" + bytes(data).hex()
    return str(data)


def build_evm_tx_intent(tx: Dict[str, Any], *, chain_id: int | None) -> EvmTxIntent:
    """
    Best-effort extraction of intent fields from a web3-style tx dict.
    """
    to = tx.get("to")
    return EvmTxIntent(
        intent_type=EVM_TRANSACTION,
        chain_id=int(chain_id) if chain_id is not None else _to_int(tx.get("chainId")),
        to=str(to) if to is not None else None,
        value_wei=_to_int(tx.get("value")),
        data_hex=_to_hex(tx.get("data")),
        nonce=_to_int(tx.get("nonce")),
        gas=_to_int(tx.get("gas")),
        gas_price_wei=_to_int(tx.get("gasPrice")),
    )


def build_safe_tx_intent(
    *,
    safe_address: str,
    chain_id: int,
    to: str,
    value: int,
    data: bytes,
    nonce: int,
    safe_tx_hash: bytes,
) -> EvmTxIntent:
    return EvmTxIntent(
        intent_type=SAFE_TRANSACTION,
        chain_id=int(chain_id),
        to=to,
        value_wei=int(value),
        data_hex=_to_hex(data),
        nonce=int(nonce),
        safe_address=safe_address,
        safe_tx_hash="0x" + safe_tx_hash.hex(),
    )
