from .base import SignedTx, Signer, eth_sign_safe_tx_hash
from .encrypted_keystore import EncryptedKeystoreSigner
from .env_private_key import EnvPrivateKeySigner
from .factory import get_signer
from .intents import EvmTxIntent, build_evm_tx_intent, build_safe_tx_intent
from .local_account import LocalAccountSigner
from .policy import PolicyEnforcedSigner, SignerPolicyViolation, maybe_wrap_signer
from .remote_signer import RemoteSigner

__all__ = [
    "SignedTx",
    "Signer",
    "eth_sign_safe_tx_hash",
    "LocalAccountSigner",
    "EnvPrivateKeySigner",
    "EncryptedKeystoreSigner",
    "RemoteSigner",
    "get_signer",
    "EvmTxIntent",
    "build_evm_tx_intent",
    "build_safe_tx_intent",
    "PolicyEnforcedSigner",
    "SignerPolicyViolation",
    "maybe_wrap_signer",
]
