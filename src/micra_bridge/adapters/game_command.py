"""Boundary between the router and the mode-specific backends."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Protocol

from micra_bridge.models import BridgeMode

QUERY_COMMANDS = frozenset({"getPlayerPos", "getPlayerRotPit", "getBlockInfo"})


@dataclass(slots=True, frozen=True)
class WorldCommand:
    """Canonical domain command, named after the helper vocabulary."""

    name: str
    params: tuple[Any, ...] = ()

    @property
    def is_query(self) -> bool:
        return self.name in QUERY_COMMANDS


class Backend(Protocol):
    """Capability set shared by the direct socket and the helper backends."""

    mode: BridgeMode

    def supports(self, name: str) -> bool:
        """Whether this backend can service the named command."""

    async def send_command(self, command: WorldCommand) -> None:
        """Dispatch a command whose outcome is reported through the session status."""

    async def query_state(self, command: WorldCommand) -> None:
        """Issue a query whose reply is written into the session state."""

    async def connect(self, host: str) -> None:
        """Bring the backend up against the given game server host."""

    async def disconnect(self) -> None:
        """Release whatever the backend holds open."""


def format_param(value: Any) -> str:
    """Stringify one positional parameter for either wire format.

    ``None`` becomes an empty field, booleans are lower-case and integral floats lose
    their fraction, so ``1.0`` and ``1`` encode the same.
    """
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)
