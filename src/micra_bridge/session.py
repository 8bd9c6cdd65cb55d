"""World session state shared by the router, the transports and the facade."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from micra_bridge.models import BridgeMode, PenState, Position, StatusCode

logger = logging.getLogger("micra_bridge.session")


@dataclass(slots=True)
class WorldSession:
    """Single source of truth for connection status, player pose, block info and the pen.

    Only the router and the transport callbacks mutate it; the facade reads it.
    """

    mode: BridgeMode
    locale: str = "en"
    host: str = "localhost"
    status: StatusCode | None = None
    connected: bool = False
    position: Position = field(default_factory=Position)
    rotation: int = 0
    pitch: int = 0
    block_id: int = 0
    block_data: int = 0
    pen: PenState = field(default_factory=PenState)

    def set_status(self, status: StatusCode | None) -> None:
        if status != self.status:
            logger.debug("status_changed", extra={"previous": self.status, "status": status})
        self.status = status

    def snapshot(self) -> dict:
        return {
            "mode": self.mode.value,
            "host": self.host,
            "status": self.status.value if self.status else None,
            "connected": self.connected,
            "position": {"x": self.position.x, "y": self.position.y, "z": self.position.z},
            "rotation": self.rotation,
            "pitch": self.pitch,
            "block": {"id": self.block_id, "data": self.block_data},
            "pen": {
                "x": self.pen.x,
                "y": self.pen.y,
                "z": self.pen.z,
                "heading": self.pen.heading,
                "pitch": self.pen.pitch,
                "block_id": self.pen.block_id,
                "block_data": self.pen.block_data,
                "down": self.pen.down,
            },
        }
