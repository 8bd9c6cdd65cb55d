"""Per-mode backend strategies behind the command router.

Both backends accept the same ``WorldCommand`` vocabulary (the helper's command
names). ``DirectBackend`` translates the primitive subset into Raspberry Jam socket
lines; ``HelperBackend`` forwards everything to the helper over HTTP.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from micra_bridge.adapters.game_command import WorldCommand, format_param
from micra_bridge.adapters.request_transport import RequestTransport
from micra_bridge.adapters.session_transport import SessionTransport
from micra_bridge.models import BridgeMode, Cuboid, StatusCode
from micra_bridge.pen import round_half_up
from micra_bridge.session import WorldSession
from micra_bridge.terrain import reset_around_player_plan, reset_origin_plan

DIRECT_COMMANDS = frozenset(
    {
        "Chat",
        "Teleport",
        "setBlockData",
        "setBlocks",
        "setPlayerRotPit",
        "Reset",
        "ResetHere",
        "getPlayerPos",
        "getPlayerRotPit",
        "getBlockInfo",
    }
)

HELPER_COMMANDS = DIRECT_COMMANDS | frozenset(
    {
        "Disconnect",
        "ConnectServer",
        "drawLine",
        "drawCircle",
        "drawArc",
        "drawArcRadis",
        "drawEllipse",
        "drawEgg",
        "drawEggBall",
        "drawBall",
        "drawBallPart",
        "drawEllipseBall",
        "drawEllipseBallPart",
        "drawText",
        "setPen",
        "downPen",
        "strokePen",
        "turnPen",
        "upPen",
        "doSomething",
    }
)


def socket_line(function: str, *args: Any) -> str:
    """Render ``function(arg1,arg2,...)`` as the mod expects it."""
    return f"{function}({','.join(format_param(arg) for arg in args)})"


def _fields(payload: str) -> list[str]:
    return payload.strip().split(",")


def _apply_tile(session: WorldSession, payload: str) -> None:
    x, y, z = (round_half_up(float(value)) for value in _fields(payload)[:3])
    session.position.x, session.position.y, session.position.z = x, y, z


def _apply_rotation(session: WorldSession, payload: str) -> None:
    session.rotation = round_half_up(float(_fields(payload)[0]))


def _apply_pitch(session: WorldSession, payload: str) -> None:
    session.pitch = round_half_up(float(_fields(payload)[0]))


def _apply_block(session: WorldSession, payload: str) -> None:
    fields = _fields(payload)
    block_id, block_data = int(fields[0]), int(fields[1])
    session.block_id, session.block_data = block_id, block_data


class DirectBackend:
    """Primitive command set over the persistent session to the in-game mod."""

    mode = BridgeMode.DIRECT

    def __init__(
        self,
        transport: SessionTransport,
        session: WorldSession,
        *,
        settle_seconds: float = 0.5,
        logger: logging.Logger | None = None,
    ) -> None:
        self._transport = transport
        self._session = session
        self._settle_seconds = settle_seconds
        self._logger = logger or logging.getLogger("micra_bridge.backends.direct")

    def supports(self, name: str) -> bool:
        return name in DIRECT_COMMANDS

    async def connect(self, host: str) -> None:
        self._transport.reset_retries()
        self._transport.open(host)

    async def disconnect(self) -> None:
        await self._transport.close()

    async def send_command(self, cmd: WorldCommand) -> None:
        params = cmd.params
        if cmd.name == "Chat":
            await self._post(*params[:1])
        elif cmd.name == "Teleport":
            await self._transport.send(socket_line("player.setPos", *params[:3]))
        elif cmd.name == "setBlockData":
            block_id, block_data, x, y, z = params
            await self._transport.send(socket_line("world.setBlock", x, y, z, block_id, block_data))
        elif cmd.name == "setBlocks":
            block_id, block_data, x, y, z, x1, y1, z1 = params
            await self._transport.send(socket_line("world.setBlocks", x, y, z, x1, y1, z1, block_id, block_data))
        elif cmd.name == "setPlayerRotPit":
            rotation, pitch = params
            await self._transport.send(socket_line("player.setRotation", rotation))
            await self._transport.send(socket_line("player.setPitch", pitch))
        elif cmd.name == "Reset":
            await self._fill(reset_origin_plan())
            await self._transport.send(socket_line("player.setPos", 0, 0, 0))
            await self._post("reset done!")
        elif cmd.name == "ResetHere":
            await self._reset_here()
        else:
            raise ValueError(f"Direct backend cannot send {cmd.name!r}")

    async def query_state(self, cmd: WorldCommand) -> None:
        if cmd.name == "getPlayerPos":
            await self._query(socket_line("player.getTile"), _apply_tile)
        elif cmd.name == "getPlayerRotPit":
            await self._query(socket_line("player.getRotation"), _apply_rotation)
            await self._query(socket_line("player.getPitch"), _apply_pitch)
        elif cmd.name == "getBlockInfo":
            await self._query(socket_line("world.getBlockWithData", *cmd.params[:3]), _apply_block)
        else:
            raise ValueError(f"Direct backend cannot query {cmd.name!r}")

    async def _query(self, line: str, apply) -> None:
        def on_reply(session: WorldSession, payload: str) -> None:
            try:
                apply(session, payload)
            except (ValueError, IndexError, OverflowError):
                session.set_status(StatusCode.INVALID_VALUE)
                self._logger.warning("direct_bad_reply", extra={"command": line, "payload": payload})
                return
            session.set_status(StatusCode.OK)

        await self._transport.request(line, on_reply)

    async def _post(self, message: Any = "") -> None:
        await self._transport.send(socket_line("chat.post", message))

    async def _fill(self, plan: list[Cuboid]) -> None:
        for cuboid in plan:
            await self._transport.send(
                socket_line(
                    "world.setBlocks",
                    cuboid.x0,
                    cuboid.y0,
                    cuboid.z0,
                    cuboid.x1,
                    cuboid.y1,
                    cuboid.z1,
                    cuboid.block_id,
                    cuboid.block_data,
                )
            )

    async def _reset_here(self) -> None:
        await self._query(socket_line("player.getTile"), _apply_tile)
        # The position reply is not awaited; whatever has arrived after the delay is used.
        await asyncio.sleep(self._settle_seconds)

        position = self._session.position
        plan = reset_around_player_plan(position.x, position.y, position.z)
        self._logger.info(
            "reset_here_planned",
            extra={"x": position.x, "y": position.y, "z": position.z, "cuboids": len(plan)},
        )
        if plan:
            await self._fill(plan)
        else:
            await self._post("cannot reset!")
        await self._post("reset here done!")


class HelperBackend:
    """Full command set forwarded one request at a time to the helper process."""

    mode = BridgeMode.HELPER

    def __init__(self, transport: RequestTransport, *, world_port: int = 4711) -> None:
        self._transport = transport
        self._world_port = world_port

    def supports(self, name: str) -> bool:
        return name in HELPER_COMMANDS

    async def connect(self, host: str) -> None:
        await self._transport.send("ConnectServer", host, self._world_port)

    async def disconnect(self) -> None:
        """Ask the helper to drop its game connection; the helper itself stays up."""
        await self._transport.send("Disconnect")

    async def send_command(self, cmd: WorldCommand) -> None:
        await self._transport.send(cmd.name, *cmd.params)

    async def query_state(self, cmd: WorldCommand) -> None:
        await self._transport.send(cmd.name, *cmd.params)

    async def aclose(self) -> None:
        await self._transport.aclose()
