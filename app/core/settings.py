"""
safe-admin-ops settings.

Environment variables (and a local `.env`) are read once at import into a typed
`Settings` object. Misconfiguration is reported before any transaction is signed.

Usage:
    from app.core.settings import settings

    timeout = settings.CONFIRMATION_TIMEOUT_SEC
"""

from __future__ import annotations

import os
import tomllib
import warnings
from dataclasses import dataclass, field, fields
from enum import Enum
from pathlib import Path
from typing import Any, FrozenSet, List

from dotenv import load_dotenv

load_dotenv()

_SECRET_FIELDS = {"PRIVATE_KEY", "KEYSTORE_PASSWORD"}


class SignerType(Enum):
    """Where the deployer key lives."""

    ENV_PRIVATE_KEY = "env_private_key"
    KEYSTORE = "keystore"
    REMOTE = "remote"


class SettingsValidationError(Exception):
    """Raised when settings validation fails."""

    def __init__(self, field: str, value: Any, message: str):
        self.field = field
        self.value = value
        super().__init__(f"Invalid configuration for {field}={value!r}: {message}")


def _env(name: str) -> str | None:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return None
    return raw.strip()


def _env_bool(name: str, default: bool = False) -> bool:
    raw = _env(name)
    return default if raw is None else raw.lower() in ("true", "1", "yes", "on")


def _env_int(name: str) -> int | None:
    """Decimal or 0x-prefixed hex; unparsable values count as unset."""
    raw = _env(name)
    try:
        return int(raw, 0) if raw is not None else None
    except ValueError:
        return None


def _env_float(name: str, default: float) -> float:
    raw = _env(name)
    try:
        return float(raw) if raw is not None else default
    except ValueError:
        return default


def _env_csv(name: str) -> FrozenSet[str]:
    return frozenset(v.strip().lower() for v in (_env(name) or "").split(",") if v.strip())


def _env_csv_ints(name: str) -> FrozenSet[int]:
    out = set()
    for part in _env_csv(name):
        try:
            out.add(int(part, 0))
        except ValueError:
            continue
    return frozenset(out)


def _parse_signer_type(raw: Any) -> SignerType:
    if isinstance(raw, SignerType):
        return raw
    value = str(raw or "").strip().lower()
    try:
        return SignerType(value)
    except ValueError:
        allowed = ", ".join(t.value for t in SignerType)
        raise SettingsValidationError("SIGNER_TYPE", raw, f"expected one of {allowed}") from None


def _env_signer_type() -> SignerType:
    return _parse_signer_type(_env("SIGNER_TYPE") or SignerType.ENV_PRIVATE_KEY.value)


def _project_version() -> str:
    try:
        with open(Path(__file__).resolve().parents[2] / "pyproject.toml", "rb") as f:
            return str(tomllib.load(f).get("project", {}).get("version", "0.0.0"))
    except (OSError, tomllib.TOMLDecodeError):
        return "0.0.0"


@dataclass
class Settings:
    PROJECT_NAME: str = "safe-admin-ops"
    VERSION: str = field(default_factory=_project_version)
    DEV_MODE: bool = field(default_factory=lambda: _env_bool("DEV_MODE"))

    # Deployer signer
    SIGNER_TYPE: SignerType = field(default_factory=_env_signer_type)
    PRIVATE_KEY: str | None = field(default_factory=lambda: _env("PRIVATE_KEY"))
    KEYSTORE_PATH: str | None = field(default_factory=lambda: _env("KEYSTORE_PATH"))
    KEYSTORE_PASSWORD: str | None = field(default_factory=lambda: _env("KEYSTORE_PASSWORD"))
    SIGNER_REMOTE_URL: str | None = field(default_factory=lambda: _env("SIGNER_REMOTE_URL"))

    # Signer policy (enforced in signing.policy; mirrored here for validation and display)
    SIGNER_POLICY_ENABLED: bool = field(default_factory=lambda: _env_bool("SIGNER_POLICY_ENABLED"))
    SIGNER_ALLOWED_CHAIN_IDS: FrozenSet[int] = field(default_factory=lambda: _env_csv_ints("SIGNER_ALLOWED_CHAIN_IDS"))
    SIGNER_ALLOWED_TO_ADDRESSES: FrozenSet[str] = field(default_factory=lambda: _env_csv("SIGNER_ALLOWED_TO_ADDRESSES"))
    SIGNER_ALLOWED_SAFE_ADDRESSES: FrozenSet[str] = field(default_factory=lambda: _env_csv("SIGNER_ALLOWED_SAFE_ADDRESSES"))
    SIGNER_MAX_VALUE_WEI: int | None = field(default_factory=lambda: _env_int("SIGNER_MAX_VALUE_WEI"))
    SIGNER_MAX_DATA_BYTES: int | None = field(default_factory=lambda: _env_int("SIGNER_MAX_DATA_BYTES"))

    # Network
    HTTP_TIMEOUT_SEC: float = field(default_factory=lambda: _env_float("HTTP_TIMEOUT_SEC", 10.0))
    SAFE_TX_SERVICE_URL: str | None = field(default_factory=lambda: _env("SAFE_TX_SERVICE_URL"))

    # Direct batches
    CONFIRMATION_TIMEOUT_SEC: float = field(default_factory=lambda: _env_float("CONFIRMATION_TIMEOUT_SEC", 120.0))
    CONFIRMATION_POLL_SEC: float = field(default_factory=lambda: _env_float("CONFIRMATION_POLL_SEC", 2.0))
    DIRECT_GAS_LIMIT: int | None = field(default_factory=lambda: _env_int("DIRECT_GAS_LIMIT"))

    # Deployments and persistence
    DEPLOYMENTS_DIR: str = field(default_factory=lambda: _env("DEPLOYMENTS_DIR") or "configs")
    AUDIT_DB_PATH: str | None = field(default_factory=lambda: _env("AUDIT_DB_PATH"))

    # Observability
    ADMINOPS_LOG_LEVEL: str = field(default_factory=lambda: (_env("ADMINOPS_LOG_LEVEL") or "info").lower())

    def __post_init__(self) -> None:
        self.SIGNER_TYPE = _parse_signer_type(self.SIGNER_TYPE)
        problems = self._problems()
        if problems:
            raise SettingsValidationError("MULTIPLE", None, "; ".join(problems))
        if self.SIGNER_TYPE == SignerType.ENV_PRIVATE_KEY and self.PRIVATE_KEY and not self.DEV_MODE:
            warnings.warn(
                "SIGNER_TYPE=env_private_key: the deployer key is read from the environment. Prefer a keystore or remote signer.",
                UserWarning,
                stacklevel=3,
            )

    def _problems(self) -> List[str]:
        problems: List[str] = []
        if self.SIGNER_TYPE == SignerType.KEYSTORE and bool(self.KEYSTORE_PATH) != bool(self.KEYSTORE_PASSWORD):
            problems.append("KEYSTORE_PATH and KEYSTORE_PASSWORD must be set together when SIGNER_TYPE=keystore")
        remote_url = (self.SIGNER_REMOTE_URL or "").lower()
        if self.SIGNER_TYPE == SignerType.REMOTE and remote_url and not remote_url.startswith("https://") and not self.DEV_MODE:
            problems.append("SIGNER_REMOTE_URL must use https:// outside DEV_MODE")
        for name in ("HTTP_TIMEOUT_SEC", "CONFIRMATION_TIMEOUT_SEC", "CONFIRMATION_POLL_SEC"):
            value = getattr(self, name)
            if value <= 0:
                problems.append(f"{name} must be positive, got {value}")
        if self.DIRECT_GAS_LIMIT is not None and self.DIRECT_GAS_LIMIT < 21000:
            problems.append(f"DIRECT_GAS_LIMIT must be at least 21000, got {self.DIRECT_GAS_LIMIT}")
        return problems

    def to_dict(self) -> dict[str, Any]:
        """Settings as plain JSON-able values, secrets redacted."""
        result: dict[str, Any] = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if f.name in _SECRET_FIELDS:
                result[f.name] = "***REDACTED***" if value else None
            elif isinstance(value, frozenset):
                result[f.name] = sorted(value)
            elif isinstance(value, Enum):
                result[f.name] = value.value
            else:
                result[f.name] = value
        return result


# Global settings instance
settings = Settings()
