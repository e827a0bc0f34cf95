"""Execution context shared by the server, the dispatcher and every tool."""

from __future__ import annotations

from typing import Any, Callable

from mcpwebkit.bridge import ScriptBridge, ScriptRunner
from mcpwebkit.logbuffer import DEFAULT_CAPACITY, LogBuffer
from mcpwebkit.logging import get_logger

logger = get_logger(__name__)

DEFAULT_PORT = 8765


class ExecutionContext:
    """Process-wide state for one server instance.

    Holds the bound port, the host's script runner, the log buffer and the
    optional host overrides.  An override, when set, fully replaces the
    buffer's behaviour for that operation.  Must only be touched from the
    server's event loop.
    """

    def __init__(
        self,
        *,
        port: int = DEFAULT_PORT,
        log_capacity: int = DEFAULT_CAPACITY,
    ) -> None:
        self.server_port = port
        self.script_runner: ScriptRunner | None = None
        self.custom_status_provider: Callable[[], dict[str, Any]] | None = None

        self.get_logs_override: Callable[[], list[str]] | None = None
        self.clear_logs_override: Callable[[], None] | None = None
        self.log_override: Callable[[str], None] | None = None
        self.log_observer: Callable[[str], None] | None = None

        self._buffer = LogBuffer(log_capacity)
        self._bridge = ScriptBridge(log=self.log)

    # ── Script execution ────────────────────────────────────────────

    async def execute_script(self, script: str) -> Any:
        """Run *script* through the host's runner and return its result."""
        return await self._bridge.run(self.script_runner, script)

    @property
    def pending_scripts(self) -> int:
        return self._bridge.pending_count

    # ── Logs ────────────────────────────────────────────────────────

    def log(self, message: str) -> None:
        if self.log_override is not None:
            self.log_override(message)
        else:
            self._buffer.append(message)
            logger.info(message)
        if self.log_observer is not None:
            self.log_observer(message)

    def get_logs(self) -> list[str]:
        if self.get_logs_override is not None:
            return list(self.get_logs_override())
        return self._buffer.lines()

    def clear_logs(self) -> None:
        if self.clear_logs_override is not None:
            self.clear_logs_override()
        else:
            self._buffer.clear()

    # ── Status ──────────────────────────────────────────────────────

    def custom_status(self) -> dict[str, Any] | None:
        if self.custom_status_provider is None:
            return None
        return self.custom_status_provider()
