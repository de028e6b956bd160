from __future__ import annotations

from typing import Any, Callable, Dict, List, Optional

from app.core.container import Container
from execution.evm import checksum
from execution.router import DIRECT
from observability import log_event
from safe import Call

from .submit import TOOLS_CTX, encode_call, submit_calls

Confirm = Callable[[str], bool]


def build_transfer_ownership_calls(contracts: List[str], new_owner: str) -> List[Call]:
    owner = checksum(new_owner, field="new_owner")
    data = encode_call("transferOwnership(address)", ["address"], [owner])
    return [Call(destination=c, value=0, data=data) for c in contracts]


async def transfer_ownership(
    container: Container,
    *,
    confirm: Confirm,
    new_owner: Optional[str] = None,
    route: str = DIRECT,
    nonce: Optional[int] = None,
) -> Dict[str, Any]:
    """
    Hand every ownable contract of the deployment to `new_owner` (default: the deployment's Safe).

    Nothing is sent unless `confirm` approves the new owner.
    """
    owner = checksum(new_owner, field="new_owner") if new_owner else container.deployment.safe
    if not confirm(f"Confirm new owner is {owner}?"):
        log_event("transfer_ownership_cancelled", ctx=TOOLS_CTX, data={"new_owner": owner})
        return {"cancelled": True, "new_owner": owner}

    contracts = container.deployment.ownable_contracts()
    log_event("transfer_ownership", ctx=TOOLS_CTX, data={"new_owner": owner, "contracts": len(contracts)})
    result = await submit_calls(
        container,
        action="transfer_ownership",
        calls=build_transfer_ownership_calls(contracts, owner),
        route=route,
        nonce=nonce,
    )
    result["new_owner"] = owner
    return result
