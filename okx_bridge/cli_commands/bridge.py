"""Bridge commands: run the webhook listener and exercise the pipeline by hand."""

from __future__ import annotations

import asyncio
import json
from pathlib import Path

import typer
import uvicorn
from loguru import logger
from rich.console import Console
from rich.table import Table

from okx_bridge.cli_commands.utils import load_config_or_exit, setup_logging
from okx_bridge.core.config import BridgeConfig
from okx_bridge.errors import BridgeError
from okx_bridge.exchange import OKXClient, infer_instrument_type
from okx_bridge.executor import SignalExecutor
from okx_bridge.instruments import InstrumentCache
from okx_bridge.models import ExecutionResult, InstrumentConstraints
from okx_bridge.server import create_app

bridge_app = typer.Typer()
console = Console()


@bridge_app.command()
def serve(
    host: str | None = typer.Option(None, help="Bind address (defaults to HOST or 0.0.0.0)"),
    port: int | None = typer.Option(None, help="Listen port (defaults to PORT or 3000)"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    """Run the webhook listener."""
    config = load_config_or_exit()
    setup_logging(config.log_dir, verbose)

    bind_host = host or config.host
    bind_port = port or config.port
    logger.info(f"Starting webhook listener on {bind_host}:{bind_port}")
    uvicorn.run(
        create_app(config),
        host=bind_host,
        port=bind_port,
        log_level="debug" if verbose else "info",
    )


async def _fetch_constraints(config: BridgeConfig, inst_id: str) -> InstrumentConstraints:
    async with OKXClient(config) as client:
        cache = InstrumentCache(client.fetch_instrument, ttl_seconds=config.instrument_cache_ttl)
        return await cache.get_constraints(inst_id)


@bridge_app.command()
def instrument(
    inst_id: str = typer.Argument(..., help="Instrument id, e.g. BTC-USDT-SWAP"),
) -> None:
    """Show lot size and minimum size for an instrument."""
    config = load_config_or_exit()
    inst_id = inst_id.strip().upper()

    try:
        constraints = asyncio.run(_fetch_constraints(config, inst_id))
    except BridgeError as exc:
        typer.echo(f"Lookup failed: {exc.message}", err=True)
        raise typer.Exit(code=1) from exc

    table = Table(title=f"{constraints.inst_id} ({infer_instrument_type(inst_id)})")
    table.add_column("Field")
    table.add_column("Value", justify="right")
    table.add_row("Lot size", format(constraints.lot_size, "f"))
    table.add_row("Minimum size", format(constraints.min_size, "f"))
    console.print(table)


async def _execute_once(config: BridgeConfig, payload: object) -> ExecutionResult:
    async with OKXClient(config) as client:
        executor = SignalExecutor.from_config(config, client)
        return await executor.execute(payload)


@bridge_app.command()
def execute(
    signal_file: Path = typer.Argument(..., exists=True, dir_okay=False, help="Signal JSON file"),
    use_config_secret: bool = typer.Option(
        False,
        "--use-config-secret",
        help="Fill in TV_SECRET when the signal file carries no secret",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    """Run one signal file through the full pipeline and print the result.

    This places real orders on OKX (or demo orders when OKX_SIMULATED_TRADING is set).
    """
    config = load_config_or_exit()
    setup_logging(config.log_dir, verbose)

    try:
        payload = json.loads(signal_file.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        typer.echo(f"Signal file is not valid JSON: {exc}", err=True)
        raise typer.Exit(code=1) from exc

    if use_config_secret and isinstance(payload, dict) and not payload.get("secret"):
        payload["secret"] = config.tv_secret.get_secret_value()

    result = asyncio.run(_execute_once(config, payload))
    typer.echo(result.model_dump_json(indent=2))
    if not result.ok:
        raise typer.Exit(code=1)
