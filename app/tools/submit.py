from __future__ import annotations

import secrets
from typing import Any, Dict, List, Optional, Sequence

from eth_abi import encode
from eth_utils import function_signature_to_4byte_selector

from app.core.container import Container
from errors import AppError
from execution.router import DIRECT, resolve_route
from observability import build_log_context, log_event, now_ms
from safe import Call

TOOLS_CTX = build_log_context(tool="admin_tools")


def encode_call(signature: str, arg_types: Sequence[str], args: Sequence[Any]) -> bytes:
    """ABI-encode a call: 4-byte selector of `signature` followed by the encoded args."""
    return function_signature_to_4byte_selector(signature) + encode(list(arg_types), list(args))


async def submit_calls(
    container: Container,
    *,
    action: str,
    calls: Sequence[Call],
    route: str = DIRECT,
    nonce: Optional[int] = None,
) -> Dict[str, Any]:
    """
    Send one administrative batch down the chosen route and audit every outcome.

    `nonce` only applies to the safe route (start nonce override); the direct route
    always starts from the account's pending transaction count.
    """
    r = resolve_route(route)
    batch_id = secrets.token_hex(8)
    log_event(
        "admin_batch_started",
        ctx=TOOLS_CTX,
        data={"batch_id": batch_id, "action": action, "route": r, "chain_id": container.chain_id, "size": len(calls)},
    )
    try:
        if r == DIRECT:
            hashes: List[str] = await container.direct.submit_batch(calls)
        else:
            hashes = await container.safe.propose_batch(calls, start_nonce=nonce)
    except AppError as e:
        submitted = list(e.data.get("submitted_hashes") or [])
        for h in submitted:
            container.audit_log.append(
                ts_ms=now_ms(), batch_id=batch_id, action=action, route=r, chain_id=container.chain_id, ok=True, tx_hash=h
            )
        container.audit_log.append(
            ts_ms=now_ms(),
            batch_id=batch_id,
            action=action,
            route=r,
            chain_id=container.chain_id,
            ok=False,
            nonce=e.data.get("nonce"),
            error_code=e.code,
            summary={"message": e.message, "index": e.data.get("index")},
        )
        raise

    for h in hashes:
        container.audit_log.append(
            ts_ms=now_ms(), batch_id=batch_id, action=action, route=r, chain_id=container.chain_id, ok=True, tx_hash=h
        )
    log_event("admin_batch_finished", ctx=TOOLS_CTX, data={"batch_id": batch_id, "action": action, "hashes": hashes})
    return {"batch_id": batch_id, "action": action, "route": r, "chain_id": container.chain_id, "hashes": hashes}
