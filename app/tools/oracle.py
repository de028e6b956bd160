from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence

from app.core.container import Container
from errors import InvalidArgument
from execution.evm import checksum
from execution.router import DIRECT
from safe import Call

from .submit import encode_call, submit_calls

SET_ASSET_PRICE_CONFIGS = "setAssetPriceConfigs(bytes32[],uint32[],uint32[],address[])"


@dataclass(frozen=True)
class AssetPriceConfig:
    asset: str  # short symbol, stored on-chain as a bytes32 string
    confidence_threshold_e6: int
    trust_price_age: int  # seconds
    adapter: str


def asset_id(symbol: str) -> bytes:
    raw = symbol.encode("utf-8")
    if not raw or len(raw) > 31:
        raise InvalidArgument("Asset symbol must be 1-31 bytes", {"asset": symbol})
    return raw.ljust(32, b"\x00")


def default_asset_price_configs(pyth_adapter: str) -> List[AssetPriceConfig]:
    return [
        AssetPriceConfig("QQQ", 0, 60 * 60 * 24 * 3, pyth_adapter),  # 3 days
        AssetPriceConfig("XRP", 0, 60 * 5, pyth_adapter),  # 5 minutes
    ]


def build_set_asset_price_configs_call(middleware: str, configs: Sequence[AssetPriceConfig]) -> Call:
    if not configs:
        raise InvalidArgument("At least one asset price config is required", {})
    data = encode_call(
        SET_ASSET_PRICE_CONFIGS,
        ["bytes32[]", "uint32[]", "uint32[]", "address[]"],
        [
            [asset_id(c.asset) for c in configs],
            [int(c.confidence_threshold_e6) for c in configs],
            [int(c.trust_price_age) for c in configs],
            [checksum(c.adapter, field="adapter") for c in configs],
        ],
    )
    return Call(destination=checksum(middleware, field="middleware"), value=0, data=data)


async def set_asset_price_configs(
    container: Container,
    *,
    configs: Optional[Sequence[AssetPriceConfig]] = None,
    route: str = DIRECT,
    nonce: Optional[int] = None,
) -> Dict[str, Any]:
    deployment = container.deployment
    chosen = list(configs) if configs is not None else default_asset_price_configs(deployment.require("oracles.pythAdapter"))
    call = build_set_asset_price_configs_call(deployment.require("oracles.middleware"), chosen)
    result = await submit_calls(container, action="set_asset_price_configs", calls=[call], route=route, nonce=nonce)
    result["assets"] = [c.asset for c in chosen]
    return result
