from __future__ import annotations

import os

from eth_account import Account

from .local_account import LocalAccountSigner


class EnvPrivateKeySigner(LocalAccountSigner):
    """
    Development signer: the deployer's raw hex key (with or without 0x) from an env var.
    """

    def __init__(self, env_var: str = "PRIVATE_KEY") -> None:
        pk = (os.getenv(env_var) or "").strip()
        if not pk:
            raise ValueError(f"{env_var} environment variable not set")
        try:
            account = Account.from_key(pk if pk.startswith("0x") else "0x" + pk)
        except ValueError:
            raise ValueError(f"{env_var} is not a valid private key") from None
        super().__init__(account)
