from __future__ import annotations

from typing import Any, Dict, Optional

import requests

from errors import classify_exception
from execution.evm import checksum

from .hashing import OPERATION_CALL, ZERO_ADDRESS
from .proposal import Proposal


class SafeServiceClient:
    """
    Minimal client for the Safe Transaction Service REST API (v1).

    All failures leave as AppError subclasses: connection problems and 5xx become
    ServiceUnavailable, 4xx validation failures become ServiceRejected with the
    response body attached verbatim.
    """

    def __init__(
        self,
        base_url: str,
        *,
        origin: str = "safe-admin-ops",
        timeout: float = 10.0,
        session: Optional[requests.Session] = None,
    ) -> None:
        if not base_url:
            raise ValueError("Safe transaction service URL is required")
        self._base_url = base_url.rstrip("/")
        self._origin = origin
        self._timeout_sec = float(timeout)
        self._session = session or requests.Session()

    def _url(self, path: str) -> str:
        return f"{self._base_url}/api/v1/{path.lstrip('/')}"

    def _get(self, path: str, params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        try:
            r = self._session.get(self._url(path), params=params, timeout=self._timeout_sec)
            r.raise_for_status()
            return r.json()
        except requests.RequestException as e:
            raise classify_exception(e) from e

    def get_safe_info(self, safe_address: str) -> Dict[str, Any]:
        return self._get(f"safes/{checksum(safe_address, field='safe_address')}/")

    def get_next_nonce(self, safe_address: str) -> int:
        """
        Lowest nonce not used by any executed or pending multisig transaction of the Safe.
        """
        safe = checksum(safe_address, field="safe_address")
        current = int(self.get_safe_info(safe)["nonce"])
        pending = self._get(
            f"safes/{safe}/multisig-transactions/",
            params={"executed": "false", "nonce__gte": current, "ordering": "-nonce", "limit": 1},
        )
        results = pending.get("results") or []
        if not results:
            return current
        return max(current, int(results[0]["nonce"]) + 1)

    def propose_transaction(
        self,
        *,
        safe_address: str,
        proposal: Proposal,
        safe_tx_hash: str,
        sender_address: str,
        sender_signature: str,
    ) -> Dict[str, Any]:
        safe = checksum(safe_address, field="safe_address")
        body = {
            "safe": safe,
            "to": proposal.destination,
            "value": str(proposal.value),
            "data": "0x" + proposal.data.hex() if proposal.data else None,
            "operation": OPERATION_CALL,
            "safeTxGas": "0",
            "baseGas": "0",
            "gasPrice": "0",
            "gasToken": ZERO_ADDRESS,
            "refundReceiver": ZERO_ADDRESS,
            "nonce": proposal.nonce,
            "contractTransactionHash": safe_tx_hash,
            "sender": checksum(sender_address, field="sender_address"),
            "signature": sender_signature,
            "origin": self._origin,
        }
        try:
            r = self._session.post(self._url(f"safes/{safe}/multisig-transactions/"), json=body, timeout=self._timeout_sec)
            r.raise_for_status()
        except requests.RequestException as e:
            raise classify_exception(e) from e
        # 201 Created carries no body
        return {"status_code": r.status_code, "safe_tx_hash": safe_tx_hash}
