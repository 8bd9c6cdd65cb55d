"""Bridge between a block-based editor and a live Minecraft world."""

from .bridge import MicraBridge
from .models import BridgeMode, StatusCode

__all__ = ["BridgeMode", "MicraBridge", "StatusCode"]
