from __future__ import annotations

import os
from typing import Callable, Dict, Optional

from .base import Signer
from .encrypted_keystore import EncryptedKeystoreSigner
from .env_private_key import EnvPrivateKeySigner
from .policy import maybe_wrap_signer
from .remote_signer import RemoteSigner

_BACKENDS: Dict[str, Callable[[], Signer]] = {
    "env_private_key": EnvPrivateKeySigner,
    "keystore": EncryptedKeystoreSigner,
    "remote": RemoteSigner,
}


def get_signer(signer_type: Optional[str] = None) -> Signer:
    """
    Build the deployer signer named by `signer_type` (default: SIGNER_TYPE env var,
    then env_private_key) and wrap it with signer policy when any rule is configured.
    """
    name = (signer_type or os.getenv("SIGNER_TYPE") or "env_private_key").strip().lower()
    backend = _BACKENDS.get(name)
    if backend is None:
        raise ValueError(f"Unsupported SIGNER_TYPE: {name} (expected one of {', '.join(sorted(_BACKENDS))})")
    return maybe_wrap_signer(backend())
