"""
Canonical SafeTx hash (EIP-712), computed locally.

The transaction service only accepts a proposal whose `contractTransactionHash` and
signature match this exact encoding, so nothing here is taken from a remote default.
"""

from __future__ import annotations

from typing import Optional

from eth_abi import encode
from eth_utils import keccak, to_checksum_address

from .proposal import Proposal

ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"
OPERATION_CALL = 0

SAFE_TX_TYPEHASH = keccak(
    text=(
        "SafeTx(address to,uint256 value,bytes data,uint8 operation,uint256 safeTxGas,"
        "uint256 baseGas,uint256 gasPrice,address gasToken,address refundReceiver,uint256 nonce)"
    )
)
DOMAIN_TYPEHASH = keccak(text="EIP712Domain(uint256 chainId,address verifyingContract)")
# Safe 1.0.0 named the refund gas field dataGas.
LEGACY_SAFE_TX_TYPEHASH = keccak(
    text=(
        "SafeTx(address to,uint256 value,bytes data,uint8 operation,uint256 safeTxGas,"
        "uint256 dataGas,uint256 gasPrice,address gasToken,address refundReceiver,uint256 nonce)"
    )
)
# Safes older than 1.3.0 left chainId out of the domain.
LEGACY_DOMAIN_TYPEHASH = keccak(text="EIP712Domain(address verifyingContract)")


def _version_tuple(version: str) -> tuple:
    core = version.split("+", 1)[0].split("-", 1)[0]
    parts = []
    for p in core.split("."):
        parts.append(int(p) if p.isdigit() else 0)
    return tuple(parts)


def uses_legacy_domain(safe_version: Optional[str]) -> bool:
    if not safe_version:
        return False
    return _version_tuple(safe_version) < (1, 3, 0)


def safe_tx_typehash(safe_version: Optional[str] = None) -> bytes:
    if safe_version and _version_tuple(safe_version) < (1, 1, 0):
        return LEGACY_SAFE_TX_TYPEHASH
    return SAFE_TX_TYPEHASH


def domain_separator(safe_address: str, chain_id: int, *, safe_version: Optional[str] = None) -> bytes:
    safe = to_checksum_address(safe_address)
    if uses_legacy_domain(safe_version):
        return keccak(encode(["bytes32", "address"], [LEGACY_DOMAIN_TYPEHASH, safe]))
    return keccak(encode(["bytes32", "uint256", "address"], [DOMAIN_TYPEHASH, int(chain_id), safe]))


def safe_tx_struct_hash(proposal: Proposal, *, safe_version: Optional[str] = None) -> bytes:
    # safeTxGas, baseGas and gasPrice stay zero: no refund, executor pays gas.
    return keccak(
        encode(
            [
                "bytes32",
                "address",
                "uint256",
                "bytes32",
                "uint8",
                "uint256",
                "uint256",
                "uint256",
                "address",
                "address",
                "uint256",
            ],
            [
                safe_tx_typehash(safe_version),
                proposal.destination,
                proposal.value,
                keccak(proposal.data),
                OPERATION_CALL,
                0,
                0,
                0,
                ZERO_ADDRESS,
                ZERO_ADDRESS,
                proposal.nonce,
            ],
        )
    )


def safe_tx_hash(
    proposal: Proposal,
    *,
    safe_address: str,
    chain_id: int,
    safe_version: Optional[str] = None,
) -> bytes:
    return keccak(
        b"\x19\x01"
        + domain_separator(safe_address, chain_id, safe_version=safe_version)
        + safe_tx_struct_hash(proposal, safe_version=safe_version)
    )
