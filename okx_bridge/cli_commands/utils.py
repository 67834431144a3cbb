"""Shared utility functions for CLI commands."""

import sys
from pathlib import Path

import typer
from loguru import logger
from pydantic import ValidationError

from okx_bridge.core.config import BridgeConfig, load_config


def setup_logging(log_dir: Path, verbose: bool = False) -> None:
    """Configure loguru logging.

    Args:
        log_dir: Directory for log files
        verbose: Enable verbose debug logging
    """
    # Remove default handler
    logger.remove()

    # Console handler
    log_level = "DEBUG" if verbose else "INFO"
    logger.add(
        sys.stderr,
        format="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
        "<level>{level: <8}</level> | "
        "<cyan>{name}</cyan>:<cyan>{function}</cyan> - "
        "<level>{message}</level>",
        level=log_level,
    )

    # File handler
    log_dir.mkdir(parents=True, exist_ok=True)
    logger.add(
        log_dir / "bridge_{time}.log",
        rotation="1 day",
        retention="7 days",
        level="DEBUG",
    )


def load_config_or_exit() -> BridgeConfig:
    """Load configuration, turning validation errors into a clean CLI exit."""
    try:
        return load_config()
    except ValidationError as exc:
        problems = ", ".join(
            f"{'.'.join(str(part) for part in err['loc']).upper() or 'config'}: {err['msg']}"
            for err in exc.errors()
        )
        typer.echo(f"Configuration error: {problems}", err=True)
        typer.echo(
            "Set TV_SECRET, OKX_API_KEY, OKX_API_SECRET and OKX_API_PASSPHRASE "
            "in the environment or .env file.",
            err=True,
        )
        raise typer.Exit(code=1) from exc
