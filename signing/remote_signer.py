from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Any, Dict, Optional

import requests

from .base import SignedTx, Signer
from .intents import EvmTxIntent, build_evm_tx_intent


@dataclass(frozen=True)
class _RemoteSignedTx(SignedTx):
    """
    Wire-compatible SignedTx wrapper for remote signing responses.
    """

    raw_transaction: bytes


def _hex_to_bytes(raw_hex: Any, *, field: str) -> bytes:
    s = str(raw_hex or "").strip()
    if s.startswith("0x"):
        s = s[2:]
    if not s:
        raise ValueError(f"Remote signer did not return {field}")
    return bytes.fromhex(s)


class RemoteSigner(Signer):
    """
    Remote signer (KMS/HSM-backed signing proxy or a local sidecar).

    Protocol (HTTP JSON):
    GET  {SIGNER_REMOTE_URL}/address
         response: {"address": "0x..."}
    POST {SIGNER_REMOTE_URL}/sign_transaction
         body: {"tx": {...}, "chain_id": 1, "intent": {...}}
         response: {"rawTransactionHex": "0x..."}
    POST {SIGNER_REMOTE_URL}/sign_hash
         body: {"hash": "0x...", "scheme": "safe_eth_sign", "intent": {...}}
         response: {"signatureHex": "0x..."}  (65 bytes, Safe eth_sign v already applied)
    """

    remote = True

    def __init__(self, url_env: str = "SIGNER_REMOTE_URL") -> None:
        url = (os.getenv(url_env) or "").strip()
        if not url:
            raise ValueError(f"{url_env} environment variable not set")
        self._base_url = url.rstrip("/")
        self._cached_address: Optional[str] = None

    def _timeout(self) -> float:
        return float(os.getenv("HTTP_TIMEOUT_SEC", "10"))

    def get_address(self) -> str:
        if self._cached_address:
            return self._cached_address
        r = requests.get(f"{self._base_url}/address", timeout=self._timeout())
        r.raise_for_status()
        addr = str(r.json().get("address") or "").strip()
        if not addr:
            raise ValueError("Remote signer returned empty address")
        self._cached_address = addr
        return addr

    def sign_transaction(self, tx: Dict[str, Any], *, chain_id: int | None = None) -> SignedTx:
        intent = build_evm_tx_intent(tx, chain_id=chain_id)
        wire_tx = {k: ("0x" + v.hex() if isinstance(v, (bytes, bytearray)) else v) for k, v in tx.items()}
        payload = {"tx": wire_tx, "chain_id": chain_id, "intent": intent.to_dict()}
        r = requests.post(f"{self._base_url}/sign_transaction", json=payload, timeout=self._timeout())
        r.raise_for_status()
        data = r.json()
        raw_hex = data.get("rawTransactionHex") or data.get("raw_transaction_hex")
        return _RemoteSignedTx(raw_transaction=_hex_to_bytes(raw_hex, field="rawTransactionHex"))

    def sign_safe_tx_hash(self, safe_tx_hash: bytes, *, intent: Optional[EvmTxIntent] = None) -> bytes:
        payload = {
            "hash": "0x" + safe_tx_hash.hex(),
            "scheme": "safe_eth_sign",
            "intent": intent.to_dict() if intent else None,
        }
        r = requests.post(f"{self._base_url}/sign_hash", json=payload, timeout=self._timeout())
        r.raise_for_status()
        data = r.json()
        sig = _hex_to_bytes(data.get("signatureHex") or data.get("signature_hex"), field="signatureHex")
        if len(sig) != 65:
            raise ValueError(f"Remote signer returned a {len(sig)}-byte signature (expected 65)")
        return sig
