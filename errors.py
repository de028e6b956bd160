from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

import requests
from web3.exceptions import TimeExhausted, Web3Exception


@dataclass
class AppError(Exception):
    code: str
    message: str
    data: Dict[str, Any] = field(default_factory=dict)

    def __str__(self) -> str:
        return f"{self.code}: {self.message}"

    def to_dict(self) -> Dict[str, Any]:
        return {"code": self.code, "message": self.message, "data": dict(self.data)}


class InvalidArgument(AppError):
    """Malformed input, detected before any network call."""

    def __init__(self, message: str, data: Optional[Dict[str, Any]] = None) -> None:
        super().__init__("invalid_argument", message, data or {})


class ServiceUnavailable(AppError):
    """Coordination service or RPC node could not be reached."""

    def __init__(self, message: str, data: Optional[Dict[str, Any]] = None) -> None:
        super().__init__("service_unavailable", message, data or {})


class ServiceRejected(AppError):
    """
    The remote side refused the request (stale or duplicate nonce, hash mismatch,
    bad signature, reverted transaction). Never retried automatically.
    """

    def __init__(self, message: str, data: Optional[Dict[str, Any]] = None, *, code: str = "service_rejected") -> None:
        super().__init__(code, message, data or {})


class SigningFailed(AppError):
    def __init__(self, message: str, data: Optional[Dict[str, Any]] = None) -> None:
        super().__init__("signing_failed", message, data or {})


class ConfirmationTimeout(AppError):
    """The terminal transaction of a batch was not mined in time."""

    def __init__(self, message: str, data: Optional[Dict[str, Any]] = None) -> None:
        super().__init__("confirmation_timeout", message, data or {})


def _http_error_data(e: requests.HTTPError) -> Dict[str, Any]:
    resp = e.response
    if resp is None:
        return {}
    try:
        body: Any = resp.json()
    except ValueError:
        body = resp.text
    return {"status_code": resp.status_code, "response": body}


def classify_exception(e: Exception) -> AppError:
    """
    Map common requests / web3 / asyncio failures into stable error codes.
    """
    if isinstance(e, AppError):
        return e

    # requests
    if isinstance(e, requests.HTTPError):
        data = _http_error_data(e)
        status = int(data.get("status_code") or 0)
        if 400 <= status < 500:
            return ServiceRejected(str(e), data)
        return ServiceUnavailable(str(e), data)
    if isinstance(e, (requests.ConnectionError, requests.Timeout)):
        return ServiceUnavailable(str(e), {})

    # web3 / RPC
    if isinstance(e, TimeExhausted):
        return ConfirmationTimeout(str(e), {})
    if isinstance(e, (asyncio.TimeoutError, OSError)):
        return ServiceUnavailable(str(e) or type(e).__name__, {})
    if isinstance(e, (Web3Exception, ValueError)):
        return ServiceRejected(str(e), {})

    return AppError("unknown_error", str(e), {})
