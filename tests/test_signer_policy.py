from unittest.mock import MagicMock

import pytest
from eth_utils import keccak

from signing.intents import build_safe_tx_intent
from signing.policy import PolicyEnforcedSigner, SignerPolicyViolation, policy_config_from_env
from tests.conftest import CONTRACT_A, SAFE_ADDRESS


def _inner():
    inner = MagicMock()
    inner.remote = False
    inner.get_address.return_value = "0xme"
    inner.sign_transaction.return_value = MagicMock(raw_transaction=b"\x00")
    inner.sign_safe_tx_hash.return_value = b"\x01" * 65
    return inner


def _safe_intent(chain_id=42161, to=CONTRACT_A, value=0, data=b"\xf2\xfd\xe3\x8b"):
    return build_safe_tx_intent(
        safe_address=SAFE_ADDRESS,
        chain_id=chain_id,
        to=to,
        value=value,
        data=data,
        nonce=42,
        safe_tx_hash=keccak(b"h"),
    )


def test_signer_policy_blocks_to_address_allowlist(monkeypatch):
    monkeypatch.setenv("SIGNER_POLICY_ENABLED", "true")
    monkeypatch.setenv("SIGNER_ALLOWED_TO_ADDRESSES", "0xallowed")

    s = PolicyEnforcedSigner(_inner(), policy_config_from_env())

    with pytest.raises(SignerPolicyViolation) as e:
        s.sign_transaction({"to": "0xnotallowed", "value": 0}, chain_id=1)
    assert e.value.code == "to_not_allowed"


def test_signer_policy_allows_when_no_rules():
    s = PolicyEnforcedSigner(_inner(), policy_config_from_env())
    out = s.sign_transaction({"to": "0xany", "value": 0}, chain_id=1)
    assert out.raw_transaction == b"\x00"


def test_safe_hash_checked_against_decoded_intent(monkeypatch):
    monkeypatch.setenv("SIGNER_ALLOWED_CHAIN_IDS", "42161")
    monkeypatch.setenv("SIGNER_ALLOWED_SAFE_ADDRESSES", SAFE_ADDRESS)
    inner = _inner()
    s = PolicyEnforcedSigner(inner, policy_config_from_env())

    assert s.sign_safe_tx_hash(keccak(b"h"), intent=_safe_intent()) == b"\x01" * 65

    with pytest.raises(SignerPolicyViolation) as e:
        s.sign_safe_tx_hash(keccak(b"h"), intent=_safe_intent(chain_id=1))
    assert e.value.code == "chain_id_not_allowed"
    assert inner.sign_safe_tx_hash.call_count == 1


def test_safe_hash_without_intent_is_refused():
    s = PolicyEnforcedSigner(_inner(), policy_config_from_env())
    with pytest.raises(SignerPolicyViolation) as e:
        s.sign_safe_tx_hash(keccak(b"h"))
    assert e.value.code == "intent_required"


def test_value_and_calldata_limits(monkeypatch):
    monkeypatch.setenv("SIGNER_MAX_VALUE_WEI", "0")
    monkeypatch.setenv("SIGNER_MAX_DATA_BYTES", "36")
    s = PolicyEnforcedSigner(_inner(), policy_config_from_env())

    with pytest.raises(SignerPolicyViolation) as e:
        s.sign_safe_tx_hash(keccak(b"h"), intent=_safe_intent(value=1))
    assert e.value.code == "value_too_large"

    with pytest.raises(SignerPolicyViolation) as e:
        s.sign_safe_tx_hash(keccak(b"h"), intent=_safe_intent(data=b"\x00" * 37))
    assert e.value.code == "data_too_large"
