from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Any, Callable, Dict, FrozenSet, List, Optional

from errors import AppError

from .base import SignedTx, Signer
from .intents import EvmTxIntent, build_evm_tx_intent


class SignerPolicyViolation(AppError):
    def __init__(self, code: str, message: str, data: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(code, message, data or {})


def _env_lower_set(name: str) -> FrozenSet[str]:
    raw = os.getenv(name) or ""
    return frozenset(v.strip().lower() for v in raw.split(",") if v.strip())


def _env_int_set(name: str) -> FrozenSet[int]:
    out = set()
    for part in (os.getenv(name) or "").split(","):
        try:
            out.add(int(part.strip(), 0))
        except ValueError:
            continue
    return frozenset(out)


def _env_int(name: str) -> Optional[int]:
    raw = (os.getenv(name) or "").strip()
    if not raw:
        return None
    try:
        return int(raw, 0)
    except ValueError:
        return None


@dataclass(frozen=True)
class SignerPolicyConfig:
    allowed_chain_ids: FrozenSet[int] = frozenset()
    allowed_to_addresses: FrozenSet[str] = frozenset()
    allowed_safe_addresses: FrozenSet[str] = frozenset()
    max_value_wei: Optional[int] = None
    max_data_bytes: Optional[int] = None

    @property
    def has_rules(self) -> bool:
        return bool(
            self.allowed_chain_ids
            or self.allowed_to_addresses
            or self.allowed_safe_addresses
            or self.max_value_wei is not None
            or self.max_data_bytes is not None
        )


def policy_config_from_env() -> SignerPolicyConfig:
    """
    Signer-side guardrails for administrative calls.

    All rules are opt-in; defaults are permissive unless env vars are set.
    """
    return SignerPolicyConfig(
        allowed_chain_ids=_env_int_set("SIGNER_ALLOWED_CHAIN_IDS"),
        allowed_to_addresses=_env_lower_set("SIGNER_ALLOWED_TO_ADDRESSES"),
        allowed_safe_addresses=_env_lower_set("SIGNER_ALLOWED_SAFE_ADDRESSES"),
        max_value_wei=_env_int("SIGNER_MAX_VALUE_WEI"),
        max_data_bytes=_env_int("SIGNER_MAX_DATA_BYTES"),
    )


Rule = Callable[[EvmTxIntent, SignerPolicyConfig], Optional[SignerPolicyViolation]]


def _chain_rule(intent: EvmTxIntent, cfg: SignerPolicyConfig) -> Optional[SignerPolicyViolation]:
    if not cfg.allowed_chain_ids or intent.chain_id is None or intent.chain_id in cfg.allowed_chain_ids:
        return None
    return SignerPolicyViolation(
        "chain_id_not_allowed",
        "Chain id is not allowlisted by signer policy.",
        {"chain_id": intent.chain_id, "allowed_chain_ids": sorted(cfg.allowed_chain_ids)},
    )


def _destination_rule(intent: EvmTxIntent, cfg: SignerPolicyConfig) -> Optional[SignerPolicyViolation]:
    if not cfg.allowed_to_addresses or intent.to is None or intent.to.strip().lower() in cfg.allowed_to_addresses:
        return None
    return SignerPolicyViolation(
        "to_not_allowed",
        "Destination contract is not allowlisted by signer policy.",
        {"to": intent.to, "allowed_to_addresses": sorted(cfg.allowed_to_addresses)},
    )


def _safe_rule(intent: EvmTxIntent, cfg: SignerPolicyConfig) -> Optional[SignerPolicyViolation]:
    safe = intent.safe_address
    if not cfg.allowed_safe_addresses or safe is None or safe.strip().lower() in cfg.allowed_safe_addresses:
        return None
    return SignerPolicyViolation("safe_not_allowed", "Safe address is not allowlisted by signer policy.", {"safe_address": safe})


def _value_rule(intent: EvmTxIntent, cfg: SignerPolicyConfig) -> Optional[SignerPolicyViolation]:
    value = intent.value_wei or 0
    if cfg.max_value_wei is None or value <= cfg.max_value_wei:
        return None
    return SignerPolicyViolation(
        "value_too_large",
        "Value exceeds signer policy limit.",
        {"value_wei": value, "max_value_wei": cfg.max_value_wei},
    )


def _data_rule(intent: EvmTxIntent, cfg: SignerPolicyConfig) -> Optional[SignerPolicyViolation]:
    if cfg.max_data_bytes is None or intent.data_hex is None:
        return None
    size = len(intent.data_hex.strip().removeprefix("0x")) // 2
    if size <= cfg.max_data_bytes:
        return None
    return SignerPolicyViolation(
        "data_too_large",
        "Calldata exceeds signer policy limit.",
        {"data_bytes": size, "max_data_bytes": cfg.max_data_bytes},
    )


RULES: List[Rule] = [_chain_rule, _destination_rule, _safe_rule, _value_rule, _data_rule]


def validate_intent_against_policy(intent: EvmTxIntent, *, cfg: SignerPolicyConfig) -> None:
    """Raise the first violated rule, in RULES order."""
    for rule in RULES:
        violation = rule(intent, cfg)
        if violation is not None:
            raise violation


class PolicyEnforcedSigner(Signer):
    """
    Wrap a signer with local policy enforcement.

    Safe hashes are opaque, so a hash without an intent is refused.
    """

    def __init__(self, inner: Signer, cfg: SignerPolicyConfig) -> None:
        self._inner = inner
        self._cfg = cfg

    @property
    def remote(self) -> bool:  # type: ignore[override]
        return bool(getattr(self._inner, "remote", False))

    def get_address(self) -> str:
        return self._inner.get_address()

    def sign_transaction(self, tx: Dict[str, Any], *, chain_id: int | None = None) -> SignedTx:
        validate_intent_against_policy(build_evm_tx_intent(tx, chain_id=chain_id), cfg=self._cfg)
        return self._inner.sign_transaction(tx, chain_id=chain_id)

    def sign_safe_tx_hash(self, safe_tx_hash: bytes, *, intent: Optional[EvmTxIntent] = None) -> bytes:
        if intent is None:
            raise SignerPolicyViolation(
                "intent_required",
                "Signer policy requires a decoded intent for Safe transaction hashes.",
                {"safe_tx_hash": "0x" + safe_tx_hash.hex()},
            )
        validate_intent_against_policy(intent, cfg=self._cfg)
        return self._inner.sign_safe_tx_hash(safe_tx_hash, intent=intent)


def maybe_wrap_signer(signer: Signer) -> Signer:
    """
    Wrap signer with policy if SIGNER_POLICY_ENABLED is truthy or any rule is configured.
    """
    cfg = policy_config_from_env()
    enabled = (os.getenv("SIGNER_POLICY_ENABLED") or "").strip().lower() in {"1", "true", "yes", "on"}
    return PolicyEnforcedSigner(signer, cfg) if (enabled or cfg.has_rules) else signer
