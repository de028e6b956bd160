"""
Direct (EOA) batch submission.

Every call is signed with a consecutive account nonce and broadcast without waiting
for earlier ones to be mined; only the last transaction's receipt is awaited. Nonce
ordering makes the node include the earlier transactions first.
"""

from __future__ import annotations

import asyncio
from typing import Any, Dict, List, Optional, Sequence

from eth_utils import to_hex
from web3 import AsyncWeb3

from errors import AppError, ConfirmationTimeout, ServiceRejected, SigningFailed, classify_exception
from observability import build_log_context, log_event
from safe.nonce import NonceCursor
from safe.proposal import Call, Proposal, build_proposal
from signing import Signer

BATCH_CTX = build_log_context(tool="direct_batch")


class DirectBatchSubmitter:
    def __init__(
        self,
        *,
        w3: AsyncWeb3,
        signer: Signer,
        chain_id: int,
        confirmation_timeout: float = 120.0,
        poll_latency: float = 2.0,
        gas_limit: Optional[int] = None,
    ) -> None:
        self._w3 = w3
        self._signer = signer
        self._chain_id = int(chain_id)
        self._confirmation_timeout = float(confirmation_timeout)
        self._poll_latency = float(poll_latency)
        self._gas_limit = gas_limit

    async def _account_nonce(self, address: str) -> int:
        try:
            return int(await self._w3.eth.get_transaction_count(address, "pending"))
        except Exception as e:
            raise classify_exception(e) from e

    async def _gas_price(self) -> int:
        try:
            return int(await self._w3.eth.gas_price)
        except Exception as e:
            raise classify_exception(e) from e

    async def _build_tx(self, sender: str, proposal: Proposal, gas_price: int) -> Dict[str, Any]:
        tx: Dict[str, Any] = {
            "from": sender,
            "to": proposal.destination,
            "value": proposal.value,
            "data": "0x" + proposal.data.hex(),
            "nonce": proposal.nonce,
            "chainId": self._chain_id,
            "gasPrice": gas_price,
        }
        if self._gas_limit is not None:
            tx["gas"] = int(self._gas_limit)
        else:
            estimate_req = {k: tx[k] for k in ("from", "to", "value", "data")}
            try:
                tx["gas"] = int(await self._w3.eth.estimate_gas(estimate_req))
            except Exception as e:
                raise classify_exception(e) from e
        return tx

    def _sign(self, tx: Dict[str, Any]) -> bytes:
        unsigned = {k: v for k, v in tx.items() if k != "from"}
        try:
            return bytes(self._signer.sign_transaction(unsigned, chain_id=self._chain_id).raw_transaction)
        except AppError:
            raise
        except Exception as e:
            raise SigningFailed(str(e) or type(e).__name__, {"nonce": tx["nonce"]}) from e

    async def _send(self, raw: bytes) -> str:
        try:
            tx_hash = await self._w3.eth.send_raw_transaction(raw)
        except Exception as e:
            raise classify_exception(e) from e
        return to_hex(tx_hash)

    async def _dispatch(self, sender: str, proposal: Proposal, gas_price: int) -> str:
        tx = await self._build_tx(sender, proposal, gas_price)
        if self._signer.remote:
            raw = await asyncio.to_thread(self._sign, tx)
        else:
            raw = self._sign(tx)
        return await self._send(raw)

    async def _wait_last(self, tx_hash: str, hashes: List[str]) -> None:
        try:
            receipt = await self._w3.eth.wait_for_transaction_receipt(
                tx_hash, timeout=self._confirmation_timeout, poll_latency=self._poll_latency
            )
        except Exception as e:
            err = classify_exception(e)
            if not isinstance(err, ConfirmationTimeout):
                err = ConfirmationTimeout(f"Could not confirm {tx_hash}: {err.message}", err.data)
            err.data.update({"submitted_hashes": list(hashes), "tx_hash": tx_hash})
            log_event("direct_batch_unconfirmed", ctx=BATCH_CTX, data=err.data, level="error")
            raise err from e
        if int(receipt.get("status", 1)) != 1:
            raise ServiceRejected(
                f"Terminal transaction {tx_hash} reverted",
                {"submitted_hashes": list(hashes), "tx_hash": tx_hash},
                code="transaction_reverted",
            )

    async def submit_batch(self, calls: Sequence[Call]) -> List[str]:
        """
        Broadcast calls with nonces start, start+1, ... in input order, then wait for the last.

        The first failure aborts the batch; the error's data lists hashes already
        broadcast together with the failing nonce and index.
        """
        staged = [build_proposal(c.destination, c.value, c.data, 0) for c in calls]
        if not staged:
            return []
        try:
            sender = await asyncio.to_thread(self._signer.get_address) if self._signer.remote else self._signer.get_address()
        except Exception as e:
            raise SigningFailed(f"Signer address unavailable: {e}") from e

        cursor = NonceCursor(await self._account_nonce(sender))
        gas_price = await self._gas_price()
        log_event(
            "direct_batch_started",
            ctx=BATCH_CTX,
            data={"chain_id": self._chain_id, "sender": sender, "start_nonce": cursor.next_value, "size": len(staged)},
        )

        hashes: List[str] = []
        for index, call in enumerate(staged):
            proposal = build_proposal(call.destination, call.value, call.data, cursor.take())
            try:
                tx_hash = await self._dispatch(sender, proposal, gas_price)
            except AppError as e:
                e.data.update({"submitted_hashes": list(hashes), "nonce": proposal.nonce, "index": index})
                log_event("direct_batch_aborted", ctx=BATCH_CTX, data={"code": e.code, **e.data}, level="error")
                raise
            hashes.append(tx_hash)
            log_event("direct_tx_sent", ctx=BATCH_CTX, data={"nonce": proposal.nonce, "tx_hash": tx_hash})

        await self._wait_last(hashes[-1], hashes)
        log_event("direct_batch_confirmed", ctx=BATCH_CTX, data={"last_tx_hash": hashes[-1], "count": len(hashes)})
        return hashes
