"""Built-in execute_js tool — run arbitrary JavaScript in the page."""

from __future__ import annotations

from typing import Any

from contracts.tool_sdk import BaseTool, InputSchema, PropertySchema
from mcpwebkit.tools.base import require_string


class ExecuteJSTool(BaseTool):
    """Pass a function-body script to the host and return its value."""

    name = "execute_js"
    description = (
        "Execute JavaScript code in the WebView.\n"
        "IMPORTANT: use a return statement to get a value back, "
        "e.g. 'return 1+1' returns 2, 'return document.title' returns the title.\n"
        "Use JSON.stringify() when returning an object."
    )
    input_schema = InputSchema(
        properties={
            "code": PropertySchema.string(
                "JavaScript to execute (function body; needs a return statement to yield a value)"
            ),
        },
        required=["code"],
    )

    async def execute(self, arguments: dict[str, Any]) -> Any:
        code = require_string(arguments, "code")
        result = await self.context.execute_script(code)
        return {"result": result}
