from __future__ import annotations

import json
import os
from pathlib import Path

from eth_account import Account
from eth_utils import to_checksum_address

from .local_account import LocalAccountSigner


class EncryptedKeystoreSigner(LocalAccountSigner):
    """
    Operator signer for the deployer key kept as an encrypted keystore JSON (geth/foundry format).

    Env vars:
    - KEYSTORE_PATH: path to keystore json file
    - KEYSTORE_PASSWORD: passphrase
    """

    def __init__(self, keystore_path_env: str = "KEYSTORE_PATH", password_env: str = "KEYSTORE_PASSWORD") -> None:  # nosec B107
        path_raw = os.getenv(keystore_path_env)
        password = os.getenv(password_env)
        if not path_raw or not password:
            missing = keystore_path_env if not path_raw else password_env
            raise ValueError(f"{missing} environment variable not set")

        path = Path(path_raw).expanduser()
        if not path.is_file():
            raise ValueError(f"Keystore file not found: {path}")
        keystore = json.loads(path.read_text())
        try:
            key = Account.decrypt(keystore, password)
        except ValueError as e:
            raise ValueError(f"Could not decrypt keystore {path.name}: {e}") from e

        account = Account.from_key(key)
        # Keystores carry the address in clear; a mismatch means the wrong file was decrypted.
        declared = keystore.get("address")
        if declared and to_checksum_address("0x" + declared.removeprefix("0x")) != account.address:
            raise ValueError(f"Keystore {path.name} declares {declared}, decrypted key is {account.address}")
        super().__init__(account)
