"""
safe-admin-ops canonical entrypoint.

Usage:
    adminops --chain-id 42161 transfer-ownership --route direct
    adminops --chain-id 42161 set-asset-price-configs --route safe --nonce 12
    adminops --chain-id 42161 next-nonce
    adminops --chain-id 42161 show-config
"""

from __future__ import annotations

import asyncio
import json
import sys
from typing import Any, Dict, Optional

import click

from app.core.container import Container
from app.core.settings import settings
from app.tools.oracle import set_asset_price_configs
from app.tools.ownership import transfer_ownership
from errors import AppError
from execution.evm import chain_info_for, safe_tx_service_url_for
from execution.router import DIRECT, SAFE


def _json_ok(data: Dict[str, Any] | None = None) -> str:
    payload = {"ok": True, "data": data or {}}
    return json.dumps(payload, indent=2, sort_keys=True)


def _json_err(code: str, message: str, data: Dict[str, Any] | None = None) -> str:
    payload = {"ok": False, "error": {"code": code, "message": message, "data": data or {}}}
    return json.dumps(payload, indent=2, sort_keys=True, default=str)


def _run(coro) -> None:
    try:
        result = asyncio.run(coro)
    except AppError as e:
        click.echo(_json_err(e.code, e.message, e.data), err=True)
        sys.exit(1)
    click.echo(_json_ok(result))


route_option = click.option(
    "--route",
    type=click.Choice([DIRECT, SAFE]),
    default=DIRECT,
    show_default=True,
    help="Broadcast from the deployer EOA or propose through the Safe.",
)
nonce_option = click.option(
    "--nonce",
    type=click.IntRange(min=0),
    default=None,
    help="Start nonce for Safe proposals (default: next nonce from the transaction service).",
)


@click.group()
@click.option("--chain-id", required=True, type=int, help="Target chain id.")
@click.pass_context
def cli(ctx: click.Context, chain_id: int) -> None:
    """Administrative transactions for a deployed contract system."""
    try:
        chain_info_for(chain_id)
    except AppError as e:
        raise click.BadParameter(e.message, param_hint="--chain-id") from e
    ctx.ensure_object(dict)
    ctx.obj["container"] = Container(chain_id, cfg=settings)


@cli.command("transfer-ownership")
@route_option
@nonce_option
@click.option("--new-owner", default=None, help="New owner address (default: the deployment's Safe).")
@click.option("--yes", is_flag=True, help="Skip the interactive confirmation.")
@click.pass_context
def transfer_ownership_cmd(ctx: click.Context, route: str, nonce: Optional[int], new_owner: Optional[str], yes: bool) -> None:
    """Transfer ownership of every ownable contract."""
    container: Container = ctx.obj["container"]

    def confirm(prompt: str) -> bool:
        return yes or click.confirm(prompt, default=False)

    _run(transfer_ownership(container, confirm=confirm, new_owner=new_owner, route=route, nonce=nonce))


@cli.command("set-asset-price-configs")
@route_option
@nonce_option
@click.pass_context
def set_asset_price_configs_cmd(ctx: click.Context, route: str, nonce: Optional[int]) -> None:
    """Set the oracle middleware's asset price configs."""
    _run(set_asset_price_configs(ctx.obj["container"], route=route, nonce=nonce))


@cli.command("show-config")
@click.pass_context
def show_config_cmd(ctx: click.Context) -> None:
    """Print the effective settings (secrets redacted) and chain endpoints."""
    container: Container = ctx.obj["container"]
    info = chain_info_for(container.chain_id)
    service_url = safe_tx_service_url_for(info.chain_id, override=container.settings.SAFE_TX_SERVICE_URL)
    click.echo(
        _json_ok(
            {
                "chain": {"chain_id": info.chain_id, "name": info.name},
                "safe_tx_service_url": service_url,
                "settings": container.settings.to_dict(),
            }
        )
    )


@cli.command("next-nonce")
@click.pass_context
def next_nonce_cmd(ctx: click.Context) -> None:
    """Show the Safe's next free nonce according to the transaction service."""
    container: Container = ctx.obj["container"]

    async def _next() -> Dict[str, Any]:
        safe = container.safe
        return {"safe": safe.get_address(), "nonce": await safe.resolve_nonce()}

    _run(_next())


def main() -> None:
    cli(obj={})


if __name__ == "__main__":
    main()
