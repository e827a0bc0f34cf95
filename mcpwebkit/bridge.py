"""Bridge from the host's callback-style script primitive to ``await``.

The host supplies ``runner(script, on_done)`` and promises to call
``on_done(result, error)`` exactly once, from any thread.  ``ScriptBridge``
turns that into ``await bridge.run(runner, script)`` on the server's event
loop.  Each call gets a ``PendingCall`` keyed by a call id; the first
completion consumes the slot, so a second signal can never resume the
caller again.
"""

from __future__ import annotations

import asyncio
import uuid
from typing import Any, Callable

from contracts.errors import ScriptExecutionError, ToolError
from mcpwebkit.logging import get_logger

logger = get_logger(__name__)

ScriptCallback = Callable[..., None]
ScriptRunner = Callable[[str, ScriptCallback], None]

JAVASCRIPT_CAPABILITY = "JavaScript execution"


def _as_exception(error: Any) -> BaseException:
    if isinstance(error, BaseException):
        return error
    return ScriptExecutionError(str(error))


class PendingCall:
    """Single-fire completion slot for one in-flight script execution."""

    def __init__(self, call_id: str, loop: asyncio.AbstractEventLoop) -> None:
        self.call_id = call_id
        self._future: asyncio.Future[Any] = loop.create_future()

    @property
    def done(self) -> bool:
        return self._future.done()

    def resolve(self, result: Any = None, error: Any = None) -> None:
        # The waiter may already have been cancelled by a server shutdown.
        if self._future.done():
            return
        if error is not None:
            self._future.set_exception(_as_exception(error))
        else:
            self._future.set_result(result)

    def __await__(self):
        return self._future.__await__()


class ScriptBridge:
    """Registry of in-flight script calls for one execution context."""

    def __init__(self, log: Callable[[str], None] | None = None) -> None:
        self._pending: dict[str, PendingCall] = {}
        self._log = log or logger.info

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    async def run(self, runner: ScriptRunner | None, script: str) -> Any:
        """Invoke *runner* with *script* and wait for its single completion.

        Raises ``ToolError`` when no runner is configured, re-raises whatever
        the runner raises synchronously, and raises the error the runner
        reports through its callback.  No timeout is applied.
        """
        if runner is None:
            raise ToolError.not_available(JAVASCRIPT_CAPABILITY)

        loop = asyncio.get_running_loop()
        call = PendingCall(uuid.uuid4().hex, loop)
        self._pending[call.call_id] = call

        def on_done(result: Any = None, error: Any = None) -> None:
            try:
                loop.call_soon_threadsafe(self._complete, call.call_id, result, error)
            except RuntimeError:
                logger.warning("script call %s completed after the event loop closed", call.call_id)

        try:
            runner(script, on_done)
        except Exception:
            self._pending.pop(call.call_id, None)
            raise

        try:
            return await call
        finally:
            self._pending.pop(call.call_id, None)

    def _complete(self, call_id: str, result: Any, error: Any) -> None:
        call = self._pending.pop(call_id, None)
        if call is None:
            self._log(f"Ignoring completion for unknown or finished script call {call_id}")
            return
        call.resolve(result, error)
