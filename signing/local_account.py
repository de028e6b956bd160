from __future__ import annotations

from typing import Any, Dict, Optional

from eth_account import Account
from eth_account.signers.local import LocalAccount

from .base import SignedTx, Signer, eth_sign_safe_tx_hash
from .intents import EvmTxIntent


class LocalAccountSigner(Signer):
    """
    Signs in-process with a decrypted deployer key. Subclasses only decide where
    the key comes from.
    """

    def __init__(self, account: LocalAccount) -> None:
        self._account = account

    def get_address(self) -> str:
        return self._account.address

    def sign_transaction(self, tx: Dict[str, Any], *, chain_id: int | None = None) -> SignedTx:
        if chain_id is not None:
            tx = {**tx, "chainId": chain_id}
        return Account.sign_transaction(tx, self._account.key)

    def sign_safe_tx_hash(self, safe_tx_hash: bytes, *, intent: Optional[EvmTxIntent] = None) -> bytes:
        return eth_sign_safe_tx_hash(self._account.key, safe_tx_hash)
