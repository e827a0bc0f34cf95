"""Built-in page tools — element query, click and page info.

Each tool builds a small DOM script, runs it through the execution
context and decodes the JSON text the script returns.
"""

from __future__ import annotations

from typing import Any

from contracts.tool_sdk import BaseTool, InputSchema, PropertySchema
from mcpwebkit.tools.base import js_string, optional_bool, parse_json_text, require_string

_ELEMENT_FIELDS = """
    tagName: el.tagName,
    id: el.id,
    className: el.className,
    innerText: el.innerText?.substring(0, 100),
    href: el.href,
    src: el.src,
    value: el.value"""


class QuerySelectorTool(BaseTool):
    name = "query_selector"
    description = (
        "Query page elements with a CSS selector and return element info "
        "(tagName, id, className, innerText, ...)."
    )
    input_schema = InputSchema(
        properties={
            "selector": PropertySchema.string("CSS selector, e.g. '#myId', '.myClass', 'div.container'"),
            "all": PropertySchema.boolean("Return every match instead of only the first (default false)"),
        },
        required=["selector"],
    )

    async def execute(self, arguments: dict[str, Any]) -> Any:
        selector = require_string(arguments, "selector", allow_empty=True)
        if optional_bool(arguments, "all"):
            script = self._all_script(selector)
        else:
            script = self._first_script(selector)

        result = await self.context.execute_script(script)
        parsed = parse_json_text(result)
        if parsed is not None or result == "null":
            return {"elements": parsed}
        return {"elements": result}

    @staticmethod
    def _all_script(selector: str) -> str:
        return (
            f"return JSON.stringify(Array.from(document.querySelectorAll({js_string(selector)}))"
            f".map(el => ({{{_ELEMENT_FIELDS}\n}})))"
        )

    @staticmethod
    def _first_script(selector: str) -> str:
        return (
            f"const el = document.querySelector({js_string(selector)});\n"
            "if (!el) return JSON.stringify(null);\n"
            f"return JSON.stringify({{{_ELEMENT_FIELDS},\n    rect: el.getBoundingClientRect()\n}})"
        )


class ClickElementTool(BaseTool):
    name = "click_element"
    description = "Click a page element identified by a CSS selector."
    input_schema = InputSchema(
        properties={
            "selector": PropertySchema.string("CSS selector, e.g. '#submitBtn', '.btn-primary'"),
        },
        required=["selector"],
    )

    async def execute(self, arguments: dict[str, Any]) -> Any:
        selector = require_string(arguments, "selector", allow_empty=True)
        script = (
            f"const el = document.querySelector({js_string(selector)});\n"
            "if (!el) return JSON.stringify({ success: false, error: 'Element not found' });\n"
            "el.click();\n"
            "return JSON.stringify({ success: true, tagName: el.tagName, id: el.id })"
        )

        parsed = parse_json_text(await self.context.execute_script(script))
        if isinstance(parsed, dict):
            return parsed
        return {"success": False, "error": "Unknown error"}


class GetPageInfoTool(BaseTool):
    name = "get_page_info"
    description = "Get basic information about the current page (URL, title, size, ...)."
    input_schema = InputSchema.empty()

    _SCRIPT = """return JSON.stringify({
    url: window.location.href,
    title: document.title,
    domain: window.location.hostname,
    pathname: window.location.pathname,
    width: window.innerWidth,
    height: window.innerHeight,
    scrollX: window.scrollX,
    scrollY: window.scrollY,
    readyState: document.readyState
})"""

    async def execute(self, arguments: dict[str, Any]) -> Any:
        parsed = parse_json_text(await self.context.execute_script(self._SCRIPT))
        if isinstance(parsed, dict):
            return parsed
        return {"error": "Failed to get page info"}
