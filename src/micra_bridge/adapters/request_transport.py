"""Request/response transport to the helper HTTP server.

Each command is one ``GET /<command>/<param1>/.../<paramN>``. Query commands answer
with ``key value`` lines; every other command answers with a status line whose second
token is a message from a small fixed vocabulary.
"""

from __future__ import annotations

import logging
from typing import Any
from urllib.parse import quote

import httpx

from micra_bridge.adapters.game_command import format_param
from micra_bridge.catalog import LocaleBundle, load_bundle
from micra_bridge.models import StatusCode
from micra_bridge.pen import round_half_up
from micra_bridge.session import WorldSession

PROBLEM_KEY = "_problem"

_INT_FIELDS = {
    "getPlayerPos": {"pos_x", "pos_y", "pos_z"},
    "getBlockInfo": {"blockId", "blockData"},
}
_ROUNDED_FIELDS = {
    "getPlayerRotPit": {"rotation", "pitch"},
}


def build_path(command: str, params: tuple[Any, ...] | list[Any] = ()) -> str:
    segments = [command, *(format_param(param) for param in params)]
    return "/" + "/".join(quote(segment, safe="") for segment in segments)


class RequestTransport:
    """Issues one stateless request per command against ``http://<host>:<port>/``."""

    def __init__(
        self,
        session: WorldSession,
        *,
        host: str = "localhost",
        port: int = 12345,
        timeout_seconds: float = 10.0,
        client: httpx.AsyncClient | None = None,
        bundle: LocaleBundle | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self._session = session
        self._bundle = bundle or load_bundle()
        self._logger = logger or logging.getLogger("micra_bridge.request_transport")
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            base_url=f"http://{host}:{port}",
            timeout=httpx.Timeout(timeout_seconds),
            headers={"Content-Type": "text/plain"},
        )

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def send(self, command: str, *params: Any) -> str | None:
        """Issue ``command`` and fold the reply into the session state.

        Returns the raw reply body, or ``None`` when the helper could not be reached.
        """
        path = build_path(command, params)
        try:
            response = await self._client.get(path)
        except httpx.HTTPError as exc:
            self._session.set_status(StatusCode.NO_BACKEND)
            self._session.connected = False
            self._logger.warning("helper_unreachable", extra={"path": path, "error": f"{type(exc).__name__}: {exc}"})
            return None

        if response.is_error:
            self._logger.warning("helper_error_response", extra={"path": path, "status_code": response.status_code})

        body = response.text
        self._session.connected = True
        self._session.set_status(StatusCode.OK)
        self._logger.debug("helper_replied", extra={"path": path, "body": body})

        if command in _INT_FIELDS or command in _ROUNDED_FIELDS:
            self._apply_query_reply(command, body)
        else:
            tokens = body.split(" ")
            message = tokens[1] if len(tokens) > 1 else None
            self._session.set_status(self._bundle.translate_helper_message(message))
        return body

    def _apply_query_reply(self, command: str, body: str) -> None:
        int_fields = _INT_FIELDS.get(command, set())
        rounded_fields = _ROUNDED_FIELDS.get(command, set())
        for line in body.split("\n"):
            key, _, value = line.strip().partition(" ")
            if key == PROBLEM_KEY:
                self._session.set_status(self._bundle.translate_helper_message(value))
                continue
            if key not in int_fields and key not in rounded_fields:
                continue
            try:
                number = int(float(value)) if key in int_fields else round_half_up(float(value))
            except (ValueError, OverflowError):
                self._session.set_status(StatusCode.INVALID_VALUE)
                self._logger.warning("helper_bad_field", extra={"command": command, "key": key, "value": value})
                continue
            self._assign(key, number)

    def _assign(self, key: str, number: int) -> None:
        session = self._session
        if key == "pos_x":
            session.position.x = number
        elif key == "pos_y":
            session.position.y = number
        elif key == "pos_z":
            session.position.z = number
        elif key == "blockId":
            session.block_id = number
        elif key == "blockData":
            session.block_data = number
        elif key == "rotation":
            session.rotation = number
        elif key == "pitch":
            session.pitch = number
