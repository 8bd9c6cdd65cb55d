"""Command router: picks the backend for the current mode and owns mode switches."""

from __future__ import annotations

import logging
from typing import Any

from micra_bridge.adapters.game_command import Backend, WorldCommand
from micra_bridge.catalog import LocaleBundle, load_bundle
from micra_bridge.models import BridgeMode, StatusCode
from micra_bridge.pen import DIRECTION_DEGREES, PITCH_DEGREES, down_pen, set_pen, stroke_pen, turn_pen, up_pen
from micra_bridge.session import WorldSession

# The helper understands the Japanese menu labels for pen directions and pitches.
HELPER_LABEL_LOCALE = "ja"


class CommandRouter:
    """Routes domain commands to the active backend and keeps the pen model current."""

    def __init__(
        self,
        session: WorldSession,
        *,
        direct: Backend,
        helper: Backend,
        bundle: LocaleBundle | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self._session = session
        self._backends = {BridgeMode.DIRECT: direct, BridgeMode.HELPER: helper}
        self._bundle = bundle or load_bundle()
        self._logger = logger or logging.getLogger("micra_bridge.router")

    @property
    def active(self) -> Backend:
        return self._backends[self._session.mode]

    async def start(self) -> None:
        if self._session.mode is BridgeMode.DIRECT:
            await self._backends[BridgeMode.DIRECT].connect(self._session.host)
        self._logger.info("router_started", extra={"mode": self._session.mode.value, "host": self._session.host})

    async def stop(self) -> None:
        await self._backends[BridgeMode.DIRECT].disconnect()
        helper = self._backends[BridgeMode.HELPER]
        aclose = getattr(helper, "aclose", None)
        if aclose is not None:
            await aclose()
        self._logger.info("router_stopped")

    async def dispatch(self, command: WorldCommand) -> None:
        """Send ``command`` through the active backend, or mark it unsupported."""
        backend = self.active
        if not backend.supports(command.name):
            self._session.set_status(StatusCode.UNSUPPORTED)
            self._logger.info("command_unsupported", extra={"command": command.name, "mode": backend.mode.value})
            return

        try:
            if command.is_query:
                await backend.query_state(command)
            else:
                await backend.send_command(command)
        except (ValueError, TypeError, OverflowError) as exc:
            self._session.set_status(StatusCode.INVALID_VALUE)
            self._logger.warning("command_rejected", extra={"command": command.name, "error": str(exc)})

    async def send(self, name: str, *params: Any) -> None:
        await self.dispatch(WorldCommand(name, params))

    async def set_helper_mode(self, enabled: bool) -> None:
        self._session.mode = BridgeMode.HELPER if enabled else BridgeMode.DIRECT
        self._logger.info("mode_switched", extra={"mode": self._session.mode.value})
        await self._connect_current()

    async def connect_server(self, host: str) -> None:
        self._session.host = host
        await self._connect_current()

    async def _connect_current(self) -> None:
        direct = self._backends[BridgeMode.DIRECT]
        helper = self._backends[BridgeMode.HELPER]
        if self._session.mode is BridgeMode.HELPER:
            await helper.disconnect()
            await direct.disconnect()
            self._session.connected = False
            await helper.connect(self._session.host)
        else:
            await direct.connect(self._session.host)

    async def draw_circle(self, block_id, block_data, radius, x, y, z, pitch, rotation, filled: bool = False) -> None:
        if filled:
            await self.send("drawEllipse", block_id, block_data, radius, 1.0, x, y, z, 0, 360, pitch, rotation)
        else:
            await self.send("drawCircle", block_id, block_data, radius, x, y, z, pitch, rotation)

    async def set_pen(self, x, y, z, rotation, pitch) -> None:
        if not self._update_pen(set_pen, x, y, z, rotation, pitch):
            return
        await self.send(
            "setPen",
            x,
            y,
            z,
            self._helper_label(rotation, DIRECTION_DEGREES, self._bundle.direction_labels(HELPER_LABEL_LOCALE)),
            self._helper_label(pitch, PITCH_DEGREES, self._bundle.pitch_labels(HELPER_LABEL_LOCALE)),
        )

    async def down_pen(self, block_id: int | None, block_data: int | None) -> None:
        down_pen(self._session.pen, block_id, block_data)
        await self.send("downPen", block_id, block_data)

    async def stroke_pen(self, length) -> None:
        if self._update_pen(stroke_pen, length):
            await self.send("strokePen", length)

    async def turn_pen(self, pitch, rotation) -> None:
        if self._update_pen(turn_pen, pitch, rotation):
            await self.send("turnPen", rotation, pitch)

    async def up_pen(self) -> None:
        up_pen(self._session.pen)
        await self.send("upPen")

    def _update_pen(self, operation, *args: Any) -> bool:
        try:
            operation(self._session.pen, *args)
        except (ValueError, TypeError, OverflowError) as exc:
            self._session.set_status(StatusCode.INVALID_VALUE)
            self._logger.warning("pen_rejected", extra={"operation": operation.__name__, "error": str(exc)})
            return False
        return True

    @staticmethod
    def _helper_label(value: Any, table: dict[str, int], labels: dict[str, str]) -> Any:
        if isinstance(value, str):
            key = value.strip()
            for candidate in (key, key.upper(), key.lower()):
                if candidate in table:
                    return labels.get(candidate, value)
        return value
