import json

import pytest
from eth_account import Account
from eth_account.messages import encode_defunct
from eth_utils import keccak

from signing.base import SAFE_ETH_SIGN_V_OFFSET, eth_sign_safe_tx_hash
from signing.encrypted_keystore import EncryptedKeystoreSigner
from signing.env_private_key import EnvPrivateKeySigner
from signing.factory import get_signer
from signing.policy import PolicyEnforcedSigner
from signing.remote_signer import RemoteSigner
from tests.conftest import TEST_PRIVATE_KEY


def test_safe_signature_uses_eth_sign_v_offset(local_signer):
    digest = keccak(b"safe tx")
    sig = local_signer.sign_safe_tx_hash(digest)
    assert len(sig) == 65
    assert sig[64] in (27 + SAFE_ETH_SIGN_V_OFFSET, 28 + SAFE_ETH_SIGN_V_OFFSET)

    restored = bytearray(sig)
    restored[64] -= SAFE_ETH_SIGN_V_OFFSET
    signer = Account.recover_message(encode_defunct(primitive=digest), signature=bytes(restored))
    assert signer == local_signer.get_address()


def test_safe_signature_requires_32_byte_hash():
    with pytest.raises(ValueError):
        eth_sign_safe_tx_hash(TEST_PRIVATE_KEY, b"\x01" * 31)


def test_env_signer_requires_key(monkeypatch):
    monkeypatch.delenv("PRIVATE_KEY", raising=False)
    with pytest.raises(ValueError):
        EnvPrivateKeySigner()


def test_keystore_signer_matches_raw_key(monkeypatch, tmp_path):
    keystore = Account.encrypt(TEST_PRIVATE_KEY, "pw", kdf="pbkdf2", iterations=2)
    path = tmp_path / "deployer.json"
    path.write_text(json.dumps(keystore))
    monkeypatch.setenv("KEYSTORE_PATH", str(path))
    monkeypatch.setenv("KEYSTORE_PASSWORD", "pw")

    signer = EncryptedKeystoreSigner()

    assert signer.get_address() == Account.from_key(TEST_PRIVATE_KEY).address
    digest = keccak(b"x")
    assert signer.sign_safe_tx_hash(digest) == eth_sign_safe_tx_hash(TEST_PRIVATE_KEY, digest)


def test_factory_selects_backend(monkeypatch):
    monkeypatch.setenv("PRIVATE_KEY", TEST_PRIVATE_KEY)
    monkeypatch.delenv("SIGNER_TYPE", raising=False)
    assert isinstance(get_signer(), EnvPrivateKeySigner)

    monkeypatch.setenv("SIGNER_TYPE", "remote")
    monkeypatch.setenv("SIGNER_REMOTE_URL", "https://signer.internal")
    assert isinstance(get_signer(), RemoteSigner)

    monkeypatch.setenv("SIGNER_TYPE", "ledger")
    with pytest.raises(ValueError):
        get_signer()


def test_factory_wraps_with_policy_when_rules_set(monkeypatch):
    monkeypatch.setenv("PRIVATE_KEY", TEST_PRIVATE_KEY)
    monkeypatch.setenv("SIGNER_ALLOWED_CHAIN_IDS", "42161")
    signer = get_signer()
    assert isinstance(signer, PolicyEnforcedSigner)
    assert signer.remote is False
