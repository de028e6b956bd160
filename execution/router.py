from __future__ import annotations

from errors import InvalidArgument

DIRECT = "direct"
SAFE = "safe"


def resolve_route(mode: str) -> str:
    """
    Pick how an administrative batch reaches the chain.

    - direct: the deployer EOA signs and broadcasts every call itself
    - safe: every call becomes a Safe proposal awaiting co-signer quorum
    """
    m = (mode or "").strip().lower()
    if m in {DIRECT, "eoa"}:
        return DIRECT
    if m in {SAFE, "multisig"}:
        return SAFE
    # Unknown route: refuse rather than guess who signs
    raise InvalidArgument(f"Unknown route: {mode!r}", {"allowed": [DIRECT, SAFE]})
