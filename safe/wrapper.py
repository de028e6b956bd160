from __future__ import annotations

import asyncio
from typing import Any, Dict, List, Optional, Sequence

from errors import AppError, SigningFailed
from execution.evm import checksum
from observability import build_log_context, log_event
from signing import Signer, build_safe_tx_intent

from .hashing import safe_tx_hash
from .nonce import NonceCursor, NonceResolver
from .proposal import Call, CallData, Proposal, build_proposal
from .service_client import SafeServiceClient

SAFE_CTX = build_log_context(tool="safe_wrapper")


class SafeWrapper:
    """
    Turns calls into signed proposals on a Safe's transaction service.

    Nothing is executed on-chain here; proposals wait for co-signer quorum.
    """

    def __init__(
        self,
        *,
        chain_id: int,
        safe_address: str,
        signer: Signer,
        service: SafeServiceClient,
        safe_version: Optional[str] = None,
    ) -> None:
        self._chain_id = int(chain_id)
        self._safe_address = checksum(safe_address, field="safe_address")
        self._signer = signer
        self._service = service
        self._safe_version = safe_version
        self._nonces = NonceResolver(service, self._safe_address)

    def get_address(self) -> str:
        return self._safe_address

    async def resolve_nonce(self, explicit_nonce: Optional[int] = None) -> int:
        return await self._nonces.resolve(explicit_nonce)

    async def _get_safe_version(self) -> Optional[str]:
        if self._safe_version is None:
            info = await asyncio.to_thread(self._service.get_safe_info, self._safe_address)
            self._safe_version = str(info.get("version") or "") or None
        return self._safe_version

    async def _sign(self, digest: bytes, proposal: Proposal) -> bytes:
        intent = build_safe_tx_intent(
            safe_address=self._safe_address,
            chain_id=self._chain_id,
            to=proposal.destination,
            value=proposal.value,
            data=proposal.data,
            nonce=proposal.nonce,
            safe_tx_hash=digest,
        )
        try:
            if self._signer.remote:
                return await asyncio.to_thread(self._signer.sign_safe_tx_hash, digest, intent=intent)
            return self._signer.sign_safe_tx_hash(digest, intent=intent)
        except AppError:
            raise
        except Exception as e:
            raise SigningFailed(str(e) or type(e).__name__, {"nonce": proposal.nonce}) from e

    async def submit(self, proposal: Proposal) -> Dict[str, Any]:
        """Hash, sign and hand one already-built proposal to the service."""
        version = await self._get_safe_version()
        digest = safe_tx_hash(proposal, safe_address=self._safe_address, chain_id=self._chain_id, safe_version=version)
        tx_hash = "0x" + digest.hex()
        signature = await self._sign(digest, proposal)
        try:
            sender = await asyncio.to_thread(self._signer.get_address) if self._signer.remote else self._signer.get_address()
        except Exception as e:
            raise SigningFailed(f"Signer address unavailable: {e}", {"nonce": proposal.nonce}) from e

        ack = await asyncio.to_thread(
            self._service.propose_transaction,
            safe_address=self._safe_address,
            proposal=proposal,
            safe_tx_hash=tx_hash,
            sender_address=sender,
            sender_signature="0x" + signature.hex(),
        )
        log_event(
            "safe_tx_proposed",
            ctx=SAFE_CTX,
            data={"safe": self._safe_address, "chain_id": self._chain_id, "nonce": proposal.nonce, "safe_tx_hash": tx_hash},
        )
        return {"safe_tx_hash": tx_hash, "ack": ack}

    async def propose_transaction(self, to: str, value: int, data: CallData, *, nonce: Optional[int] = None) -> str:
        build_proposal(to, value, data, 0)  # reject malformed input before touching the network
        resolved = await self.resolve_nonce(nonce)
        result = await self.submit(build_proposal(to, value, data, resolved))
        return result["safe_tx_hash"]

    async def propose_batch(self, calls: Sequence[Call], *, start_nonce: Optional[int] = None) -> List[str]:
        """
        Propose every call in order with consecutive nonces, querying the service at most once.

        Stops at the first failure; the raised error lists the hashes already accepted.
        """
        staged = [build_proposal(c.destination, c.value, c.data, 0) for c in calls]
        if not staged:
            return []
        cursor = NonceCursor(await self.resolve_nonce(start_nonce))
        hashes: List[str] = []
        for index, call in enumerate(staged):
            proposal = build_proposal(call.destination, call.value, call.data, cursor.take())
            try:
                result = await self.submit(proposal)
            except AppError as e:
                e.data.update({"submitted_hashes": list(hashes), "nonce": proposal.nonce, "index": index})
                log_event("safe_batch_aborted", ctx=SAFE_CTX, data={"code": e.code, **e.data})
                raise
            hashes.append(result["safe_tx_hash"])
        return hashes
