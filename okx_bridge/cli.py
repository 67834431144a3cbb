"""CLI entry point for the OKX webhook bridge."""

import typer

from okx_bridge.cli_commands.bridge import bridge_app

app = typer.Typer(
    name="okx-bridge",
    help="OKX webhook bridge - turns TradingView signals into OKX orders",
)

app.add_typer(bridge_app, name="bridge")


def _register_root_aliases(source_app: typer.Typer) -> None:
    """Expose commands from source_app at the root level (okx-bridge serve)."""

    for cmd in source_app.registered_commands:
        callback = cmd.callback
        if callback is None:
            continue
        command_name = cmd.name or callback.__name__.replace("_", "-")
        decorator = app.command(  # type: ignore[misc]
            name=command_name,
            help=cmd.help,
            short_help=cmd.short_help,
            hidden=cmd.hidden,
        )
        decorator(callback)


_register_root_aliases(bridge_app)


if __name__ == "__main__":
    app()
