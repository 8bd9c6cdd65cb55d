"""Backend adapters: the persistent socket session, the helper requests and the per-mode strategies."""

from .backends import DIRECT_COMMANDS, HELPER_COMMANDS, DirectBackend, HelperBackend
from .game_command import Backend, WorldCommand
from .request_transport import RequestTransport
from .session_transport import ReplyQueue, SessionTransport

__all__ = [
    "Backend",
    "DIRECT_COMMANDS",
    "DirectBackend",
    "HELPER_COMMANDS",
    "HelperBackend",
    "ReplyQueue",
    "RequestTransport",
    "SessionTransport",
    "WorldCommand",
]
