from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Union

from errors import InvalidArgument
from execution.evm import checksum

CallData = Union[bytes, bytearray, str]


@dataclass(frozen=True)
class Call:
    """One administrative call: what to invoke, with how much native value."""

    destination: str
    value: int
    data: CallData


@dataclass(frozen=True)
class Proposal:
    destination: str
    value: int
    data: bytes
    nonce: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "to": self.destination,
            "value": str(self.value),
            "data": "0x" + self.data.hex(),
            "nonce": self.nonce,
        }


def _as_bytes(data: CallData) -> bytes:
    if isinstance(data, (bytes, bytearray)):
        return bytes(data)
    if isinstance(data, str):
        s = data.strip()
        if s.startswith("0x"):
            s = s[2:]
        try:
            return bytes.fromhex(s)
        except ValueError:
            raise InvalidArgument("Call data is not valid hex", {"data": data}) from None
    raise InvalidArgument(f"Unsupported call data type: {type(data).__name__}", {})


def _non_negative_int(v: Any, *, field: str) -> int:
    if isinstance(v, bool) or not isinstance(v, int):
        raise InvalidArgument(f"{field} must be an integer", {field: repr(v)})
    if v < 0:
        raise InvalidArgument(f"{field} must be non-negative", {field: v})
    return v


def build_proposal(destination: str, value: int, data: CallData, nonce: int) -> Proposal:
    """Validate and freeze one call at an already-resolved nonce. No I/O."""
    return Proposal(
        destination=checksum(destination, field="destination"),
        value=_non_negative_int(value, field="value"),
        data=_as_bytes(data),
        nonce=_non_negative_int(nonce, field="nonce"),
    )
