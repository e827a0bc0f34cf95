"""Unit tests for the callback-to-await script bridge."""

from __future__ import annotations

import asyncio
import threading
from typing import Any

import pytest

from contracts.errors import ScriptExecutionError, ToolError
from mcpwebkit.bridge import PendingCall, ScriptBridge


class DeferredPage:
    """Script runner that keeps callbacks so the test decides when to finish."""

    def __init__(self) -> None:
        self.calls: list[tuple[str, Any]] = []

    def __call__(self, script: str, on_done) -> None:
        self.calls.append((script, on_done))


async def _wait_for(predicate, timeout: float = 2.0) -> None:
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while not predicate():
        if loop.time() > deadline:
            raise AssertionError("condition not met in time")
        await asyncio.sleep(0.01)


class TestPendingCall:
    @pytest.mark.asyncio
    async def test_resolves_once(self) -> None:
        call = PendingCall("c1", asyncio.get_running_loop())
        call.resolve(1)
        call.resolve(2)
        assert await call == 1

    @pytest.mark.asyncio
    async def test_error_string_wrapped(self) -> None:
        call = PendingCall("c2", asyncio.get_running_loop())
        call.resolve(error="boom")
        with pytest.raises(ScriptExecutionError, match="boom"):
            await call


class TestScriptBridge:
    @pytest.mark.asyncio
    async def test_no_runner(self) -> None:
        bridge = ScriptBridge()
        with pytest.raises(ToolError, match="Capability not available: JavaScript execution"):
            await bridge.run(None, "return 1")

    @pytest.mark.asyncio
    async def test_synchronous_completion(self) -> None:
        bridge = ScriptBridge()
        result = await bridge.run(lambda script, done: done(f"ran {script}", None), "x")
        assert result == "ran x"
        assert bridge.pending_count == 0

    @pytest.mark.asyncio
    async def test_completion_from_other_thread(self) -> None:
        bridge = ScriptBridge()
        loop_thread = threading.get_ident()
        seen: dict[str, int] = {}

        def runner(script: str, on_done) -> None:
            def work() -> None:
                seen["worker"] = threading.get_ident()
                on_done({"title": "Example"}, None)

            threading.Timer(0.05, work).start()

        result = await bridge.run(runner, "return document.title")
        assert result == {"title": "Example"}
        assert seen["worker"] != loop_thread
        assert threading.get_ident() == loop_thread

    @pytest.mark.asyncio
    async def test_error_from_other_thread(self) -> None:
        bridge = ScriptBridge()

        def runner(script: str, on_done) -> None:
            threading.Thread(target=on_done, args=(None, ValueError("bad script"))).start()

        with pytest.raises(ValueError, match="bad script"):
            await bridge.run(runner, "syntax error(")
        assert bridge.pending_count == 0

    @pytest.mark.asyncio
    async def test_duplicate_signal_ignored(self) -> None:
        messages: list[str] = []
        bridge = ScriptBridge(log=messages.append)
        page = DeferredPage()

        task = asyncio.create_task(bridge.run(page, "return 1"))
        await _wait_for(lambda: page.calls)
        assert bridge.pending_count == 1

        _, on_done = page.calls[0]
        on_done(1, None)
        on_done(2, None)

        assert await task == 1
        await _wait_for(lambda: messages)
        assert "Ignoring completion" in messages[0]
        assert bridge.pending_count == 0

    @pytest.mark.asyncio
    async def test_concurrent_calls_keep_their_pairing(self) -> None:
        bridge = ScriptBridge()
        page = DeferredPage()

        first = asyncio.create_task(bridge.run(page, "a"))
        second = asyncio.create_task(bridge.run(page, "b"))
        await _wait_for(lambda: len(page.calls) == 2)

        calls = dict(page.calls)
        calls["b"]("result-b", None)
        calls["a"]("result-a", None)

        assert await first == "result-a"
        assert await second == "result-b"

    @pytest.mark.asyncio
    async def test_runner_raising_synchronously(self) -> None:
        bridge = ScriptBridge()

        def runner(script: str, on_done) -> None:
            raise RuntimeError("page not loaded")

        with pytest.raises(RuntimeError, match="page not loaded"):
            await bridge.run(runner, "return 1")
        assert bridge.pending_count == 0

    @pytest.mark.asyncio
    async def test_cancelled_waiter_then_late_completion(self) -> None:
        messages: list[str] = []
        bridge = ScriptBridge(log=messages.append)
        page = DeferredPage()

        task = asyncio.create_task(bridge.run(page, "return 1"))
        await _wait_for(lambda: page.calls)
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

        page.calls[0][1]("late", None)
        await _wait_for(lambda: messages)
        assert bridge.pending_count == 0
