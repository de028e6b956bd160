"""Safe transaction proposals: building, hashing, nonce sequencing and submission."""

from .hashing import domain_separator, safe_tx_hash
from .nonce import NonceCursor, NonceResolver
from .proposal import Call, Proposal, build_proposal
from .service_client import SafeServiceClient
from .wrapper import SafeWrapper

__all__ = [
    "Call",
    "NonceCursor",
    "NonceResolver",
    "Proposal",
    "SafeServiceClient",
    "SafeWrapper",
    "build_proposal",
    "domain_separator",
    "safe_tx_hash",
]
