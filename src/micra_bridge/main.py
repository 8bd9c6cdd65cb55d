"""CLI startup entrypoint for the Micra bridge."""

from __future__ import annotations

import asyncio
from typing import Callable

import typer
from rich import print

from micra_bridge.bridge import MicraBridge
from micra_bridge.catalog import load_bundle
from micra_bridge.config import settings
from micra_bridge.models import BridgeMode
from micra_bridge.telemetry import configure_logging

app = typer.Typer(help="Micra bridge: drive a Minecraft world from the command line")


@app.callback()
def main() -> None:
    configure_logging(settings.log_level)


def _build_bridge(helper: bool | None, host: str | None) -> MicraBridge:
    mode = None if helper is None else (BridgeMode.HELPER if helper else BridgeMode.DIRECT)
    return MicraBridge(mode=mode, host=host)


def _run_once(action: Callable[[MicraBridge], None], helper: bool | None, host: str | None) -> dict:
    async def _run() -> dict:
        bridge = _build_bridge(helper, host)
        await bridge.start()
        try:
            action(bridge)
            await bridge.drain()
        finally:
            await bridge.stop()
        snapshot = bridge.session.snapshot()
        snapshot["status_text"] = bridge.status()
        return snapshot

    return asyncio.run(_run())


@app.command()
def start() -> None:
    """Show the effective bridge configuration."""
    print(
        {
            "app_name": settings.app_name,
            "mode": BridgeMode.HELPER.value if settings.helper_mode else BridgeMode.DIRECT.value,
            "locale": settings.locale,
            "host": settings.host,
            "session_port": settings.session_port,
            "helper": f"{settings.helper_host}:{settings.helper_port}",
            "world_port": settings.world_port,
        }
    )


@app.command()
def lookup(name: str, locale: str = typer.Option(None, help="Locale to search first (en, ja, ja-Hira)")) -> None:
    """Resolve a block name to its id and data value."""
    block_id, block_data = load_bundle().resolve(name, locale or settings.locale)
    print({"name": name, "block_id": block_id, "block_data": block_data})
    if block_id is None:
        raise typer.Exit(code=1)


@app.command("player-pos")
def player_pos(
    helper: bool = typer.Option(None, "--helper/--direct", help="Use the helper server instead of the mod socket"),
    host: str = typer.Option(None, help="Minecraft server host"),
) -> None:
    print(_run_once(lambda bridge: bridge.get_player_pos(), helper, host))


@app.command("block-info")
def block_info(
    x: int,
    y: int,
    z: int,
    helper: bool = typer.Option(None, "--helper/--direct", help="Use the helper server instead of the mod socket"),
    host: str = typer.Option(None, help="Minecraft server host"),
) -> None:
    print(_run_once(lambda bridge: bridge.get_block_info(x, y, z), helper, host))


@app.command("set-block")
def set_block(
    name: str,
    x: int,
    y: int,
    z: int,
    helper: bool = typer.Option(None, "--helper/--direct", help="Use the helper server instead of the mod socket"),
    host: str = typer.Option(None, help="Minecraft server host"),
) -> None:
    """Place the named block at (x, y, z)."""
    print(_run_once(lambda bridge: bridge.set_block_by_name(name, x, y, z), helper, host))


@app.command()
def chat(
    message: str,
    helper: bool = typer.Option(None, "--helper/--direct", help="Use the helper server instead of the mod socket"),
    host: str = typer.Option(None, help="Minecraft server host"),
) -> None:
    print(_run_once(lambda bridge: bridge.chat(message), helper, host))


@app.command("reset-here")
def reset_here(
    helper: bool = typer.Option(None, "--helper/--direct", help="Use the helper server instead of the mod socket"),
    host: str = typer.Option(None, help="Minecraft server host"),
) -> None:
    """Flatten the terrain around the player."""
    print(_run_once(lambda bridge: bridge.reset_here(), helper, host))


if __name__ == "__main__":
    app()
