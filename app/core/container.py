from __future__ import annotations

from functools import cached_property

from app.core.deployments import DeploymentConfig, load_config
from app.core.settings import Settings, settings
from errors import SigningFailed
from execution.batch import DirectBatchSubmitter
from execution.evm import get_async_web3, safe_tx_service_url_for
from observability import AuditLog, set_log_level
from safe import SafeServiceClient, SafeWrapper
from signing import Signer, get_signer


class Container:
    """
    Wires one network's collaborators. Everything is built lazily so commands that
    never touch the RPC (e.g. Safe proposals) do not need an RPC URL.
    """

    def __init__(self, chain_id: int, cfg: Settings = settings) -> None:
        self.chain_id = int(chain_id)
        self.settings = cfg
        self.audit_log = AuditLog(cfg.AUDIT_DB_PATH or None)
        set_log_level(cfg.ADMINOPS_LOG_LEVEL)

    @cached_property
    def deployment(self) -> DeploymentConfig:
        return load_config(self.chain_id, self.settings.DEPLOYMENTS_DIR)

    @cached_property
    def signer(self) -> Signer:
        try:
            return get_signer(self.settings.SIGNER_TYPE.value)
        except ValueError as e:
            raise SigningFailed(f"Signer unavailable: {e}") from e

    @cached_property
    def safe_service(self) -> SafeServiceClient:
        return SafeServiceClient(
            safe_tx_service_url_for(self.chain_id, override=self.settings.SAFE_TX_SERVICE_URL),
            timeout=self.settings.HTTP_TIMEOUT_SEC,
        )

    @cached_property
    def safe(self) -> SafeWrapper:
        return SafeWrapper(
            chain_id=self.chain_id,
            safe_address=self.deployment.safe,
            signer=self.signer,
            service=self.safe_service,
        )

    @cached_property
    def direct(self) -> DirectBatchSubmitter:
        return DirectBatchSubmitter(
            w3=get_async_web3(self.chain_id, timeout=self.settings.HTTP_TIMEOUT_SEC),
            signer=self.signer,
            chain_id=self.chain_id,
            confirmation_timeout=self.settings.CONFIRMATION_TIMEOUT_SEC,
            poll_latency=self.settings.CONFIRMATION_POLL_SEC,
            gas_limit=self.settings.DIRECT_GAS_LIMIT,
        )
