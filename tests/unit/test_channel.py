from __future__ import annotations

import asyncio

import orjson
import pytest

from src.relay.channel import Channel


class _FakeWebSocket:
    def __init__(self, *, fail_after: int | None = None, block: bool = False) -> None:
        self.sent: list[str] = []
        self.fail_after = fail_after
        self.block = block
        self.close_code: int | None = None
        self.closed = asyncio.Event()

    async def send_text(self, text: str) -> None:
        if self.block:
            await asyncio.Event().wait()
        if self.fail_after is not None and len(self.sent) >= self.fail_after:
            raise RuntimeError("peer went away")
        self.sent.append(text)

    async def close(self, *, code: int = 1000, reason: str | None = None) -> None:
        self.close_code = code
        self.closed.set()


@pytest.mark.asyncio
async def test_channel_sends_frames_in_order() -> None:
    ws = _FakeWebSocket()
    channel = Channel(ws, max_queue=8)
    channel.start()

    for n in range(3):
        assert channel.deliver({"type": "notice", "body": str(n)}) is True
    await asyncio.wait_for(channel.drain(), timeout=1.0)

    assert [orjson.loads(t)["body"] for t in ws.sent] == ["0", "1", "2"]
    await channel.stop()


@pytest.mark.asyncio
async def test_send_failure_fails_channel_once_and_closes_socket() -> None:
    ws = _FakeWebSocket(fail_after=1)
    failures: list[Exception] = []
    channel = Channel(ws, max_queue=8)
    channel.start(on_failure=failures.append)

    channel.deliver({"type": "ping"})
    channel.deliver({"type": "ping"})
    channel.deliver({"type": "ping"})
    await asyncio.wait_for(ws.closed.wait(), timeout=1.0)

    assert len(failures) == 1
    assert channel.failed is True
    assert channel.is_open is False
    assert ws.close_code == 1011
    assert channel.deliver({"type": "ping"}) is False
    await asyncio.wait_for(channel.drain(), timeout=1.0)
    await channel.stop()


@pytest.mark.asyncio
async def test_full_queue_fails_channel_without_blocking_caller() -> None:
    ws = _FakeWebSocket(block=True)
    failures: list[Exception] = []
    channel = Channel(ws, max_queue=2)
    channel.start(on_failure=failures.append)
    await asyncio.sleep(0)

    results = [channel.deliver({"type": "ping"}) for _ in range(5)]
    await asyncio.wait_for(ws.closed.wait(), timeout=1.0)

    assert results[-1] is False
    assert False in results
    assert len(failures) == 1
    assert ws.close_code == 1011
    await channel.stop()


@pytest.mark.asyncio
async def test_stop_refuses_further_frames() -> None:
    ws = _FakeWebSocket()
    channel = Channel(ws, max_queue=4)
    channel.start()
    await channel.stop()
    assert channel.deliver({"type": "ping"}) is False
    assert channel.failed is False
