from __future__ import annotations

import asyncio

import pytest

from fakes import FakeHelper, FakeMod

from micra_bridge.adapters.backends import socket_line
from micra_bridge.bridge import MicraBridge
from micra_bridge.config import Settings
from micra_bridge.models import BridgeMode, StatusCode


def _bridge(mod: FakeMod) -> MicraBridge:
    config = Settings(reconnect_grace_seconds=0.2, position_settle_seconds=0.01)
    return MicraBridge(
        BridgeMode.DIRECT,
        "en",
        host="mc.local",
        config=config,
        connect=mod,
        http_client=FakeHelper().client(),
    )


def _tile_responder(tile: str):
    def respond(line: str) -> str | None:
        if line == "player.getTile()":
            return tile
        return None

    return respond


def test_socket_line_formats_arguments() -> None:
    assert socket_line("player.getTile") == "player.getTile()"
    assert socket_line("world.setBlock", 1, 2, 3, 4, 0) == "world.setBlock(1,2,3,4,0)"
    assert socket_line("world.setBlock", 1, 2, 3, None, None) == "world.setBlock(1,2,3,,)"


def test_primitive_commands_use_mod_wire_format() -> None:
    async def _run():
        mod = FakeMod()
        bridge = _bridge(mod)
        await bridge.start()
        bridge.chat("hello")
        await bridge.drain()
        bridge.teleport(1, 2, 3)
        await bridge.drain()
        bridge.set_block(4, 1, 5, 6, 7)
        await bridge.drain()
        bridge.set_blocks(1, 0, 0, 0, 0, 2, 2, 2)
        await bridge.drain()
        bridge.set_player_rot_pit(90, -30)
        await bridge.drain()
        status = bridge.session.status
        await bridge.stop()
        return mod.sent, status

    sent, status = asyncio.run(_run())
    assert sent == [
        "chat.post(hello)",
        "player.setPos(1,2,3)",
        "world.setBlock(5,6,7,4,1)",
        "world.setBlocks(0,0,0,2,2,2,1,0)",
        "player.setRotation(90)",
        "player.setPitch(-30)",
    ]
    assert status == StatusCode.OK


def test_queries_parse_positional_replies() -> None:
    replies = {
        "player.getTile()": "3.5,-0.5,-2.6",
        "player.getRotation()": "-90.6",
        "player.getPitch()": "30.5",
        "world.getBlockWithData(1,2,3)": "5,2",
    }

    async def _run():
        mod = FakeMod(responder=replies.get)
        bridge = _bridge(mod)
        await bridge.start()
        bridge.get_player_pos()
        bridge.get_player_rot_pit()
        bridge.get_block_info(1, 2, 3)
        await bridge.drain()
        await asyncio.sleep(0.05)
        result = (
            (bridge.pos_x(), bridge.pos_y(), bridge.pos_z()),
            (bridge.rotation(), bridge.pitch()),
            (bridge.block_id(), bridge.block_data()),
            bridge.session.status,
        )
        await bridge.stop()
        return result

    position, pose, block, status = asyncio.run(_run())
    assert position == (4, 0, -3)
    assert pose == (-91, 31)
    assert block == (5, 2)
    assert status == StatusCode.OK


def test_malformed_reply_sets_invalid_value() -> None:
    async def _run():
        mod = FakeMod(responder=_tile_responder("nowhere"))
        bridge = _bridge(mod)
        await bridge.start()
        bridge.get_player_pos()
        await bridge.drain()
        await asyncio.sleep(0.05)
        status = bridge.session.status
        await bridge.stop()
        return status

    assert asyncio.run(_run()) == StatusCode.INVALID_VALUE


@pytest.mark.parametrize(
    ("tile", "expected"),
    [
        (
            "0,60,0",
            ["world.setBlocks(-50,10,-50,50,110,50,0,0)"],
        ),
        (
            "3.4,0,-2.6",
            [
                "world.setBlocks(-47,0,-53,53,50,47,0,0)",
                "world.setBlocks(-47,-1,-53,53,-1,47,2,0)",
                "world.setBlocks(-47,-50,-53,53,-2,47,1,0)",
            ],
        ),
        (
            "0,-60,0",
            ["world.setBlocks(-50,-110,-50,50,-10,50,1,0)"],
        ),
        (
            "0,-51,0",
            ["chat.post(cannot reset!)"],
        ),
    ],
)
def test_reset_here_fills_around_player(tile: str, expected: list[str]) -> None:
    async def _run():
        mod = FakeMod(responder=_tile_responder(tile))
        bridge = _bridge(mod)
        await bridge.start()
        bridge.reset_here()
        await bridge.drain()
        await bridge.stop()
        return mod.sent

    assert asyncio.run(_run()) == ["player.getTile()", *expected, "chat.post(reset here done!)"]


def test_reset_rebuilds_origin_and_teleports() -> None:
    async def _run():
        mod = FakeMod()
        bridge = _bridge(mod)
        await bridge.start()
        bridge.reset()
        await bridge.drain()
        await bridge.stop()
        return mod.sent

    assert asyncio.run(_run()) == [
        "world.setBlocks(-100,0,-100,100,63,100,0,0)",
        "world.setBlocks(-100,-63,-100,100,-2,100,1,0)",
        "world.setBlocks(-100,-1,-100,100,-1,100,2,0)",
        "player.setPos(0,0,0)",
        "chat.post(reset done!)",
    ]


def test_unresolved_block_name_still_reaches_the_mod() -> None:
    async def _run():
        mod = FakeMod()
        bridge = _bridge(mod)
        await bridge.start()
        bridge.set_block_by_name("No Such Block", 1, 2, 3)
        await bridge.drain()
        await bridge.stop()
        return mod.sent

    assert asyncio.run(_run()) == ["world.setBlock(1,2,3,,)"]
