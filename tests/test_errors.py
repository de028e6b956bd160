import asyncio
import json

import requests
from web3.exceptions import TimeExhausted

from errors import (
    AppError,
    ConfirmationTimeout,
    InvalidArgument,
    ServiceRejected,
    ServiceUnavailable,
    classify_exception,
)


def _http_error(status: int, body) -> requests.HTTPError:
    resp = requests.Response()
    resp.status_code = status
    resp._content = json.dumps(body).encode()
    return requests.HTTPError(f"{status} error", response=resp)


def test_client_errors_are_rejections_with_body():
    err = classify_exception(_http_error(422, {"nonce": ["too low"]}))
    assert isinstance(err, ServiceRejected)
    assert err.data == {"status_code": 422, "response": {"nonce": ["too low"]}}


def test_server_and_transport_errors_are_unavailable():
    assert isinstance(classify_exception(_http_error(502, {})), ServiceUnavailable)
    assert isinstance(classify_exception(requests.ConnectionError("refused")), ServiceUnavailable)
    assert isinstance(classify_exception(requests.Timeout("slow")), ServiceUnavailable)
    assert isinstance(classify_exception(asyncio.TimeoutError()), ServiceUnavailable)


def test_rpc_errors():
    assert isinstance(classify_exception(TimeExhausted("late")), ConfirmationTimeout)
    assert isinstance(classify_exception(ValueError("nonce too low")), ServiceRejected)


def test_app_errors_pass_through_and_unknowns_are_wrapped():
    e = InvalidArgument("bad", {"field": "to"})
    assert classify_exception(e) is e
    unknown = classify_exception(KeyError("x"))
    assert type(unknown) is AppError
    assert unknown.code == "unknown_error"


def test_error_codes_and_dict_form():
    assert ServiceRejected("dup").code == "service_rejected"
    assert ServiceRejected("reverted", code="transaction_reverted").code == "transaction_reverted"
    assert InvalidArgument("bad", {"a": 1}).to_dict() == {"code": "invalid_argument", "message": "bad", "data": {"a": 1}}
    assert str(ConfirmationTimeout("late")) == "confirmation_timeout: late"
