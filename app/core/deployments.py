from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List, Optional

from errors import InvalidArgument
from execution.evm import checksum

# Contracts whose ownership is handed to the Safe, in submission order.
OWNABLE_PATHS = [
    "storages.config",
    "storages.perp",
    "storages.vault",
    "handlers.bot",
    "handlers.crossMargin",
    "handlers.limitTrade",
    "handlers.liquidity",
    "oracles.ecoPyth",
    "oracles.ecoPyth2",
    "oracles.middleware",
    "oracles.pythAdapter",
    "oracles.sglpStakedAdapter",
    "tokens.hlp",
    "strategies.stakedGlpStrategy",
    "strategies.convertedGlpStrategy",
    "calculator",
    "rewardDistributor",
]


class DeploymentConfig:
    """
    Contract addresses of one network's deployment, read from `<dir>/<chain_id>.json`.
    """

    def __init__(self, chain_id: int, raw: Dict[str, Any]) -> None:
        self.chain_id = int(chain_id)
        self._raw = raw

    @property
    def safe(self) -> str:
        return self.require("safe")

    def get(self, path: str) -> Optional[str]:
        node: Any = self._raw
        for part in path.split("."):
            if not isinstance(node, dict) or part not in node:
                return None
            node = node[part]
        if node is None or isinstance(node, dict):
            return None
        return str(node)

    def require(self, path: str) -> str:
        value = self.get(path)
        if not value:
            raise InvalidArgument(f"Deployment config for chain {self.chain_id} has no '{path}'", {"path": path})
        return checksum(value, field=path)

    def ownable_contracts(self) -> List[str]:
        return [self.require(p) for p in OWNABLE_PATHS if self.get(p)]


def load_config(chain_id: int, deployments_dir: str | Path = "configs") -> DeploymentConfig:
    path = Path(deployments_dir).expanduser() / f"{int(chain_id)}.json"
    if not path.exists():
        raise InvalidArgument(f"Deployment config not found: {path}", {"chain_id": int(chain_id)})
    try:
        raw = json.loads(path.read_text())
    except json.JSONDecodeError as e:
        raise InvalidArgument(f"Deployment config is not valid JSON: {path}: {e}", {"chain_id": int(chain_id)}) from e
    return DeploymentConfig(chain_id, raw)
