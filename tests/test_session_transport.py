from __future__ import annotations

import asyncio

from fakes import FakeMod, wait_until

from micra_bridge.adapters.session_transport import ReplyQueue, SessionTransport
from micra_bridge.models import BridgeMode, ConnectionState, StatusCode
from micra_bridge.session import WorldSession


def _transport(mod: FakeMod, **kwargs) -> tuple[WorldSession, SessionTransport]:
    session = WorldSession(mode=BridgeMode.DIRECT, host="mc.local")
    kwargs.setdefault("reconnect_grace_seconds", 0.2)
    return session, SessionTransport(session, connect=mod, **kwargs)


def test_reply_queue_is_fifo_and_flushes() -> None:
    queue = ReplyQueue()
    first = lambda session, payload: None  # noqa: E731
    second = lambda session, payload: None  # noqa: E731
    queue.push(first)
    queue.push(second)

    assert queue.pop() is first
    assert len(queue) == 1
    assert queue.flush() == 1
    assert queue.pop() is None


def test_send_opens_lazily_and_transmits() -> None:
    async def _run():
        mod = FakeMod()
        session, transport = _transport(mod, port=14711)
        await transport.send("chat.post(hello)")
        result = (mod.uris, mod.sent, session.status, session.connected, transport.state, transport.retry_count)
        await transport.close()
        return result

    uris, sent, status, connected, state, retry_count = asyncio.run(_run())
    assert uris == ["ws://mc.local:14711"]
    assert sent == ["chat.post(hello)"]
    assert status == StatusCode.OK
    assert connected is True
    assert state == ConnectionState.OPEN
    assert retry_count == 0


def test_empty_line_is_rejected_when_connected() -> None:
    async def _run():
        mod = FakeMod()
        session, transport = _transport(mod)
        await transport.send("chat.post(a)")
        await transport.send("")
        result = (mod.sent, session.status)
        await transport.close()
        return result

    sent, status = asyncio.run(_run())
    assert sent == ["chat.post(a)"]
    assert status == StatusCode.INVALID_VALUE


def test_replies_resolve_callbacks_in_issue_order() -> None:
    async def _run():
        mod = FakeMod()
        session, transport = _transport(mod)
        seen: list[tuple[str, str]] = []
        await transport.request("player.getTile()", lambda s, payload: seen.append(("A", payload)))
        await transport.request("player.getRotation()", lambda s, payload: seen.append(("B", payload)))

        connection = mod.connections[0]
        connection.push("90.0")
        connection.push("1,2,3")
        await wait_until(lambda: len(seen) == 2)
        await transport.close()
        return seen

    assert asyncio.run(_run()) == [("A", "90.0"), ("B", "1,2,3")]


def test_fail_sentinel_consumes_its_reply_slot() -> None:
    async def _run():
        mod = FakeMod()
        session, transport = _transport(mod)
        seen: list[tuple[str, str]] = []
        await transport.request("world.getBlockWithData(a,b,c)", lambda s, payload: seen.append(("A", payload)))
        await transport.request("world.getBlockWithData(1,2,3)", lambda s, payload: seen.append(("B", payload)))

        connection = mod.connections[0]
        connection.push("Fail")
        await wait_until(lambda: len(transport.queue) == 1)
        status_after_fail = session.status
        connection.push("4,0")
        await wait_until(lambda: len(seen) == 1)
        await transport.close()
        return seen, status_after_fail

    seen, status_after_fail = asyncio.run(_run())
    assert status_after_fail == StatusCode.INVALID_VALUE
    assert seen == [("B", "4,0")]


def test_server_close_discards_pending_replies() -> None:
    async def _run():
        mod = FakeMod()
        session, transport = _transport(mod)
        await transport.request("player.getTile()", lambda s, payload: None)
        mod.connections[0].hang_up()
        await wait_until(lambda: transport.state == ConnectionState.CLOSED)
        return len(transport.queue), session.connected

    pending, connected = asyncio.run(_run())
    assert pending == 0
    assert connected is False


def test_retry_ceiling_stops_further_attempts() -> None:
    async def _run():
        mod = FakeMod(refuse=True)
        session, transport = _transport(mod, retry_max=10)
        for _ in range(11):
            await transport.send("chat.post(hi)")
        exhausted = (len(mod.uris), transport.retry_count, transport.retries_exhausted, session.status)

        await transport.send("chat.post(again)")
        attempts_after = len(mod.uris)

        mod.refuse = False
        transport.reset_retries()
        await transport.send("chat.post(back)")
        recovered = (mod.sent, session.status, transport.retry_count)
        await transport.close()
        return exhausted, attempts_after, recovered

    exhausted, attempts_after, recovered = asyncio.run(_run())
    assert exhausted == (10, 11, True, StatusCode.TRANSPORT_DOWN)
    assert attempts_after == 10
    assert recovered == (["chat.post(back)"], StatusCode.OK, 0)


def test_refused_connection_reports_transport_down() -> None:
    async def _run():
        mod = FakeMod(refuse=True)
        session, transport = _transport(mod)
        await transport.request("player.getTile()", lambda s, payload: None)
        return session.status, session.connected, len(transport.queue)

    assert asyncio.run(_run()) == (StatusCode.TRANSPORT_DOWN, False, 0)
