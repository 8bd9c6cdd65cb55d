"""Caller-facing facade of the bridge.

Command methods are synchronous and return nothing: each schedules a router coroutine
on the running event loop and the outcome shows up later in :meth:`MicraBridge.status`
and the other query methods. Queries never touch the network.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Coroutine
from typing import Any

import httpx

from micra_bridge.adapters.backends import DirectBackend, HelperBackend
from micra_bridge.adapters.request_transport import RequestTransport
from micra_bridge.adapters.session_transport import ConnectFactory, SessionTransport
from micra_bridge.catalog import LocaleBundle, load_bundle
from micra_bridge.config import Settings, settings as default_settings
from micra_bridge.models import BridgeMode, StatusCode
from micra_bridge.router import CommandRouter
from micra_bridge.session import WorldSession


class MicraBridge:
    """One bridge per editor session; mode and locale are fixed at construction.

    Commands must be issued from inside a running event loop. Outside one they are
    dropped and the status reports the backend as unreachable.
    """

    def __init__(
        self,
        mode: BridgeMode | None = None,
        locale: str | None = None,
        *,
        host: str | None = None,
        config: Settings | None = None,
        connect: ConnectFactory | None = None,
        http_client: httpx.AsyncClient | None = None,
        bundle: LocaleBundle | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        config = config or default_settings
        if mode is None:
            mode = BridgeMode.HELPER if config.helper_mode else BridgeMode.DIRECT

        self._bundle = bundle or load_bundle()
        self._logger = logger or logging.getLogger("micra_bridge.bridge")
        self.session = WorldSession(
            mode=mode,
            locale=self._bundle.normalize_locale(locale or config.locale),
            host=host or config.host,
        )

        self._session_transport = SessionTransport(
            self.session,
            port=config.session_port,
            retry_max=config.retry_max,
            reconnect_grace_seconds=config.reconnect_grace_seconds,
            connect=connect,
        )
        request_transport = RequestTransport(
            self.session,
            host=config.helper_host,
            port=config.helper_port,
            timeout_seconds=config.request_timeout_seconds,
            client=http_client,
            bundle=self._bundle,
        )
        self.router = CommandRouter(
            self.session,
            direct=DirectBackend(
                self._session_transport,
                self.session,
                settle_seconds=config.position_settle_seconds,
            ),
            helper=HelperBackend(request_transport, world_port=config.world_port),
            bundle=self._bundle,
        )
        self._tasks: set[asyncio.Task[None]] = set()

    @property
    def session_transport(self) -> SessionTransport:
        return self._session_transport

    async def start(self) -> None:
        await self.router.start()

    async def drain(self) -> None:
        """Wait until every scheduled command, including ones scheduled meanwhile, has run."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    async def stop(self) -> None:
        await self.drain()
        await self.router.stop()

    def _submit(self, coro: Coroutine[Any, Any, None]) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            coro.close()
            down = StatusCode.TRANSPORT_DOWN if self.session.mode is BridgeMode.DIRECT else StatusCode.NO_BACKEND
            self.session.set_status(down)
            self._logger.warning("bridge_no_event_loop", extra={"mode": self.session.mode.value})
            return
        task = loop.create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._task_done)

    def _task_done(self, task: asyncio.Task[None]) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            self._logger.error("bridge_command_crashed", extra={"error": f"{type(exc).__name__}: {exc}"})

    def _resolve(self, name: str | None) -> tuple[int | None, int | None]:
        return self._bundle.resolve(name, self.session.locale)

    def _send(self, name: str, *params: Any) -> None:
        self._submit(self.router.send(name, *params))

    # Mode and connection

    def set_mode(self, helper_running: bool) -> None:
        self._submit(self.router.set_helper_mode(bool(helper_running)))

    def connect_server(self, host: str) -> None:
        self._submit(self.router.connect_server(host))

    # Primitive commands

    def chat(self, message: str) -> None:
        self._send("Chat", message)

    def teleport(self, x, y, z) -> None:
        self._send("Teleport", x, y, z)

    def set_block(self, block_id, block_data, x, y, z) -> None:
        self._send("setBlockData", block_id, block_data, x, y, z)

    def set_block_by_name(self, name: str, x, y, z) -> None:
        self.set_block(*self._resolve(name), x, y, z)

    def set_blocks(self, block_id, block_data, x, y, z, x1, y1, z1) -> None:
        self._send("setBlocks", block_id, block_data, x, y, z, x1, y1, z1)

    def set_blocks_by_name(self, name: str, x, y, z, x1, y1, z1) -> None:
        self.set_blocks(*self._resolve(name), x, y, z, x1, y1, z1)

    def set_player_rot_pit(self, rotation, pitch) -> None:
        self._send("setPlayerRotPit", rotation, pitch)

    def reset_here(self) -> None:
        self._send("ResetHere")

    def reset(self) -> None:
        self._send("Reset")

    def get_player_pos(self) -> None:
        self._send("getPlayerPos")

    def get_player_rot_pit(self) -> None:
        self._send("getPlayerRotPit")

    def get_block_info(self, x, y, z) -> None:
        self._send("getBlockInfo", x, y, z)

    # Procedural geometry (helper only)

    def draw_line(self, block_id, block_data, x, y, z, x1, y1, z1) -> None:
        self._send("drawLine", block_id, block_data, x, y, z, x1, y1, z1)

    def draw_line_by_name(self, name: str, x, y, z, x1, y1, z1) -> None:
        self.draw_line(*self._resolve(name), x, y, z, x1, y1, z1)

    def draw_circle(self, block_id, block_data, radius, x, y, z, pitch, rotation, filled: bool = False) -> None:
        self._submit(self.router.draw_circle(block_id, block_data, radius, x, y, z, pitch, rotation, filled))

    def draw_circle_by_name(self, name: str, radius, x, y, z, pitch, rotation, filled: bool = False) -> None:
        self.draw_circle(*self._resolve(name), radius, x, y, z, pitch, rotation, filled)

    def draw_arc(self, block_id, block_data, radius, x, y, z, start, end, pitch, rotation) -> None:
        self._send("drawArc", block_id, block_data, radius, x, y, z, start, end, pitch, rotation)

    def draw_fan(self, block_id, block_data, radius, x, y, z, start, end, pitch, rotation) -> None:
        self._send("drawArcRadis", block_id, block_data, radius, x, y, z, start, end, pitch, rotation)

    def draw_ellipse(self, block_id, block_data, radius, ratio_z, x, y, z, start, end, pitch, rotation) -> None:
        self._send("drawEllipse", block_id, block_data, radius, ratio_z, x, y, z, start, end, pitch, rotation)

    def draw_egg(self, block_id, block_data, radius, x, y, z, pitch, rotation) -> None:
        self._send("drawEgg", block_id, block_data, radius, x, y, z, pitch, rotation)

    def draw_egg_ball(self, block_id, block_data, radius, x, y, z, pitch, rotation) -> None:
        self._send("drawEggBall", block_id, block_data, radius, x, y, z, pitch, rotation)

    def draw_ball(self, block_id, block_data, radius, x, y, z) -> None:
        self._send("drawBall", block_id, block_data, radius, x, y, z)

    def draw_ball_part(
        self, block_id, block_data, radius, x, y, z, start_xr, end_xr, start_zr, end_zr, pitch, rotation
    ) -> None:
        self._send(
            "drawBallPart",
            block_id,
            block_data,
            radius,
            x,
            y,
            z,
            start_xr,
            end_xr,
            start_zr,
            end_zr,
            pitch,
            rotation,
        )

    def draw_ellipse_ball(self, block_id, block_data, radius, ratio_y, ratio_z, x, y, z, pitch, rotation) -> None:
        self._send("drawEllipseBall", block_id, block_data, radius, ratio_y, ratio_z, x, y, z, pitch, rotation)

    def draw_ellipse_ball_part(
        self,
        block_id,
        block_data,
        radius,
        ratio_y,
        ratio_z,
        x,
        y,
        z,
        start_xr,
        end_xr,
        start_zr,
        end_zr,
        pitch,
        rotation,
    ) -> None:
        self._send(
            "drawEllipseBallPart",
            block_id,
            block_data,
            radius,
            ratio_y,
            ratio_z,
            x,
            y,
            z,
            start_xr,
            end_xr,
            start_zr,
            end_zr,
            pitch,
            rotation,
        )

    def draw_text(self, text: str, font: str, block_id, block_data, block_id1, block_data1, rotation, x, y, z) -> None:
        self._send("drawText", text, font, block_id, block_data, block_id1, block_data1, rotation, x, y, z)

    def draw_text_by_name(self, text: str, font: str, name: str, background_name: str, x, y, z) -> None:
        """Render ``text`` with foreground ``name`` on ``background_name``, unrotated."""
        self.draw_text(text, font, *self._resolve(name), *self._resolve(background_name), 0, x, y, z)

    def do_something(self, args: str) -> None:
        self._send("doSomething", args)

    # Pen

    def set_pen(self, x, y, z, pitch, rotation) -> None:
        self._submit(self.router.set_pen(x, y, z, rotation, pitch))

    def down_pen(self, name: str) -> None:
        self._submit(self.router.down_pen(*self._resolve(name)))

    def stroke_pen(self, length) -> None:
        self._submit(self.router.stroke_pen(length))

    def turn_pen(self, pitch, rotation) -> None:
        self._submit(self.router.turn_pen(pitch, rotation))

    def up_pen(self) -> None:
        self._submit(self.router.up_pen())

    # Cached state

    def status(self) -> str:
        return self._bundle.status_text(self.session.status, self.session.locale)

    def block_id(self) -> int:
        return self.session.block_id

    def block_data(self) -> int:
        return self.session.block_data

    def pos_x(self) -> int:
        return self.session.position.x

    def pos_y(self) -> int:
        return self.session.position.y

    def pos_z(self) -> int:
        return self.session.position.z

    def rotation(self) -> int:
        return self.session.rotation

    def pitch(self) -> int:
        return self.session.pitch

    # Menus

    def menu(self, category: str) -> list[str]:
        return self._bundle.menu(category, self.session.locale)

    def fonts(self) -> list[str]:
        return list(self._bundle.fonts)

    def direction_menu(self) -> dict[str, str]:
        return self._bundle.direction_labels(self.session.locale)

    def pitch_menu(self) -> dict[str, str]:
        return self._bundle.pitch_labels(self.session.locale)

    @staticmethod
    def block_menu_value(name: str) -> str:
        return name

    red_menu_value = block_menu_value
    deco_menu_value = block_menu_value
    wool_menu_value = block_menu_value
    sglass_menu_value = block_menu_value
    carpet_menu_value = block_menu_value
