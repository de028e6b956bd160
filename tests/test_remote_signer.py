from unittest.mock import MagicMock, patch

import pytest
from eth_utils import keccak

from signing.intents import build_safe_tx_intent
from signing.remote_signer import RemoteSigner
from tests.conftest import CONTRACT_A, SAFE_ADDRESS


def _json_response(body):
    resp = MagicMock()
    resp.json.return_value = body
    resp.raise_for_status.return_value = None
    resp.headers = {"content-type": "application/json"}
    return resp


def test_remote_signer_requires_url():
    with patch.dict("os.environ", {}, clear=True):
        with pytest.raises(ValueError):
            RemoteSigner()


def test_remote_signer_get_address_and_sign():
    with patch.dict("os.environ", {"SIGNER_REMOTE_URL": "https://signer"}):
        addr_resp = _json_response({"address": "0xabc"})
        sign_resp = _json_response({"rawTransactionHex": "0xdeadbeef"})

        with patch("signing.remote_signer.requests.get", return_value=addr_resp) as get:
            with patch("signing.remote_signer.requests.post", return_value=sign_resp) as post:
                s = RemoteSigner()
                assert s.remote is True
                assert s.get_address() == "0xabc"
                assert s.get_address() == "0xabc"
                tx = {"to": "0x1", "value": 1, "data": b"\xab"}
                signed = s.sign_transaction(tx, chain_id=1)
                assert signed.raw_transaction == bytes.fromhex("deadbeef")

        assert get.call_count == 1
        payload = post.call_args.kwargs["json"]
        assert post.call_args.args[0] == "https://signer/sign_transaction"
        assert payload["tx"]["data"] == "0xab"
        assert payload["intent"]["intent_type"] == "evm_transaction"


def test_remote_signer_signs_safe_hash_with_intent():
    digest = keccak(b"safe tx")
    intent = build_safe_tx_intent(
        safe_address=SAFE_ADDRESS, chain_id=42161, to=CONTRACT_A, value=0, data=b"", nonce=5, safe_tx_hash=digest
    )
    with patch.dict("os.environ", {"SIGNER_REMOTE_URL": "https://signer/"}):
        resp = _json_response({"signatureHex": "0x" + "ab" * 64 + "1f"})
        with patch("signing.remote_signer.requests.post", return_value=resp) as post:
            sig = RemoteSigner().sign_safe_tx_hash(digest, intent=intent)

    assert sig == bytes.fromhex("ab" * 64 + "1f")
    payload = post.call_args.kwargs["json"]
    assert post.call_args.args[0] == "https://signer/sign_hash"
    assert payload["hash"] == "0x" + digest.hex()
    assert payload["scheme"] == "safe_eth_sign"
    assert payload["intent"]["nonce"] == 5
    assert payload["intent"]["safe_address"] == SAFE_ADDRESS


def test_remote_signer_rejects_short_signature():
    with patch.dict("os.environ", {"SIGNER_REMOTE_URL": "https://signer"}):
        resp = _json_response({"signatureHex": "0x" + "ab" * 10})
        with patch("signing.remote_signer.requests.post", return_value=resp):
            with pytest.raises(ValueError):
                RemoteSigner().sign_safe_tx_hash(keccak(b"x"))
