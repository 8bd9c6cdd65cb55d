"""Persistent WebSocket session to the Raspberry Jam mod.

Commands are text lines such as ``world.setBlock(0,0,0,1,0)``. The mod answers query
commands with exactly one message each, in the order the queries were sent, so replies
are matched to their callbacks through a FIFO queue rather than by id.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections import deque
from typing import Any, AsyncContextManager, Callable

import websockets
from websockets.exceptions import WebSocketException

from micra_bridge.models import ConnectionState, StatusCode
from micra_bridge.session import WorldSession

FAIL_SENTINEL = "Fail"

ReplyCallback = Callable[[WorldSession, str], None]
ConnectFactory = Callable[[str], AsyncContextManager[Any]]


class ReplyQueue:
    """Callbacks waiting for their single-line reply, oldest first."""

    def __init__(self) -> None:
        self._callbacks: deque[ReplyCallback] = deque()

    def push(self, callback: ReplyCallback) -> None:
        self._callbacks.append(callback)

    def pop(self) -> ReplyCallback | None:
        if not self._callbacks:
            return None
        return self._callbacks.popleft()

    def flush(self) -> int:
        """Drop every pending callback; their replies are considered lost."""
        dropped = len(self._callbacks)
        self._callbacks.clear()
        return dropped

    def __len__(self) -> int:
        return len(self._callbacks)


class SessionTransport:
    """Owns at most one connection to ``ws://<host>:<port>`` and retries up to a ceiling."""

    def __init__(
        self,
        session: WorldSession,
        *,
        port: int = 14711,
        retry_max: int = 10,
        reconnect_grace_seconds: float = 0.5,
        connect: ConnectFactory | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self._session = session
        self._port = port
        self._retry_max = retry_max
        self._reconnect_grace_seconds = reconnect_grace_seconds
        self._connect = connect or websockets.connect
        self._logger = logger or logging.getLogger("micra_bridge.session_transport")

        self._connection: Any | None = None
        self._task: asyncio.Task[None] | None = None
        self._settled = asyncio.Event()
        self.state = ConnectionState.ABSENT
        self.retry_count = 0
        self.queue = ReplyQueue()

    @property
    def connected(self) -> bool:
        return self.state is ConnectionState.OPEN and self._connection is not None

    @property
    def retries_exhausted(self) -> bool:
        return self.retry_count > self._retry_max

    def uri(self, host: str) -> str:
        return f"ws://{host}:{self._port}"

    def reset_retries(self) -> None:
        self.retry_count = 0

    def open(self, host: str) -> None:
        """Start connecting unless a connection is already opening or open."""
        if self._task is not None and not self._task.done():
            return

        self.retry_count += 1
        if self.retries_exhausted:
            dropped = self.queue.flush()
            self._session.set_status(StatusCode.TRANSPORT_DOWN)
            self._settled.set()
            self._logger.error(
                "session_retry_exhausted",
                extra={"host": host, "retry_count": self.retry_count, "dropped_replies": dropped},
            )
            return

        uri = self.uri(host)
        self.state = ConnectionState.OPENING
        self._session.connected = False
        self._settled.clear()
        self._task = asyncio.get_running_loop().create_task(self._run(uri), name="session-transport")
        self._logger.info("session_opening", extra={"uri": uri, "retry_count": self.retry_count})

    async def close(self) -> None:
        """Close the connection (or abandon the attempt) and wait for teardown."""
        task = self._task
        if task is None:
            return

        if self._connection is not None:
            with contextlib.suppress(WebSocketException, OSError):
                await self._connection.close()
        if not task.done():
            task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task
        self._task = None
        self._logger.info("session_closed_by_bridge")

    async def send(self, line: str) -> None:
        """Fire-and-forget command; the outcome lands in the session status."""
        if self.retries_exhausted:
            self._logger.warning("session_send_dropped", extra={"command": line, "reason": "retry_exhausted"})
            return
        if not self.connected and not await self._await_connection():
            return
        if await self._transmit(line):
            self._session.set_status(StatusCode.OK)

    async def request(self, line: str, on_reply: ReplyCallback) -> None:
        """Send a query and route the next inbound message to ``on_reply``."""
        if self.retries_exhausted:
            self._logger.warning("session_send_dropped", extra={"command": line, "reason": "retry_exhausted"})
            return
        if not self.connected and not await self._await_connection():
            return
        await self._transmit(line, on_reply)

    async def _await_connection(self) -> bool:
        self.open(self._session.host)
        if self.retries_exhausted:
            return False

        with contextlib.suppress(asyncio.TimeoutError):
            await asyncio.wait_for(self._settled.wait(), timeout=self._reconnect_grace_seconds)

        if not self.connected:
            self._session.set_status(StatusCode.TRANSPORT_DOWN)
            self._logger.warning("session_not_open", extra={"host": self._session.host})
            return False
        return True

    async def _transmit(self, line: str, on_reply: ReplyCallback | None = None) -> bool:
        if not line:
            self._session.set_status(StatusCode.INVALID_VALUE)
            self._logger.warning("session_empty_command")
            return False

        if on_reply is not None:
            self.queue.push(on_reply)
        try:
            await self._connection.send(line)
        except (WebSocketException, OSError) as exc:
            self._session.set_status(StatusCode.TRANSPORT_DOWN)
            self._logger.warning("session_send_failed", extra={"command": line, "error": str(exc)})
            return False

        self._logger.debug("session_sent", extra={"command": line, "pending_replies": len(self.queue)})
        return True

    async def _run(self, uri: str) -> None:
        try:
            async with self._connect(uri) as connection:
                self._on_open(connection)
                async for message in connection:
                    self._on_message(message)
        except asyncio.CancelledError:
            self._on_close()
            raise
        except (WebSocketException, OSError, asyncio.TimeoutError) as exc:
            self._on_error(exc)
        else:
            self._on_close()

    def _on_open(self, connection: Any) -> None:
        self._connection = connection
        self.state = ConnectionState.OPEN
        self.queue.flush()
        self.retry_count = 0
        self._session.connected = True
        self._session.set_status(StatusCode.OK)
        self._settled.set()
        self._logger.info("session_open", extra={"host": self._session.host})

    def _on_message(self, payload: str | bytes) -> None:
        if isinstance(payload, bytes):
            payload = payload.decode("utf-8", errors="replace")

        if payload.strip() == FAIL_SENTINEL:
            # The failed command still owns its queue slot.
            dropped = self.queue.pop()
            self._session.set_status(StatusCode.INVALID_VALUE)
            self._logger.warning("session_command_failed", extra={"had_pending_reply": dropped is not None})
            return

        callback = self.queue.pop()
        if callback is None:
            self._logger.debug("session_unsolicited_message", extra={"payload": payload})
            return
        callback(self._session, payload)

    def _on_close(self) -> None:
        self._discard()
        self._logger.info("session_closed", extra={"host": self._session.host})

    def _on_error(self, exc: BaseException) -> None:
        self._discard()
        self._session.set_status(StatusCode.TRANSPORT_DOWN)
        event = "session_retry_exhausted" if self.retries_exhausted else "session_error"
        self._logger.warning(event, extra={"host": self._session.host, "retry_count": self.retry_count, "error": str(exc)})

    def _discard(self) -> None:
        self._connection = None
        self.state = ConnectionState.CLOSED
        self._session.connected = False
        self.queue.flush()
        self._settled.set()
