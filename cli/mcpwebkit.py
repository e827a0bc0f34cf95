"""MCPWebKit CLI — validate configs, run the server, and query a running one."""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from typing import Any

import httpx

from mcpwebkit.version import DESCRIPTION, DISPLAY_NAME

DEFAULT_URL = "http://127.0.0.1:8765"


def cmd_validate(args: argparse.Namespace) -> None:
    """Validate a mcpwebkit.yaml config."""
    from mcpwebkit.config_loader import load_config

    path = args.config
    try:
        config = load_config(path)
    except FileNotFoundError:
        print(f"Error: config not found: {path}", file=sys.stderr)
        sys.exit(1)
    except Exception as exc:
        print(f"Error: invalid config: {exc}", file=sys.stderr)
        sys.exit(1)

    print(f"Config OK: {path}")
    print(f"  Host:          {config.server.host}")
    print(f"  Port:          {config.server.port}")
    print(f"  Port retries:  {config.server.max_port_retries}")
    print(f"  Log level:     {config.logging.level.value}")
    print(f"  Log capacity:  {config.logging.buffer_capacity}")


def cmd_run(args: argparse.Namespace) -> None:
    """Start the MCPWebKit server (no script runner attached)."""
    from mcpwebkit.config_loader import resolve_config
    from mcpwebkit.logging import configure_logging
    from mcpwebkit.server import MCPWebServer

    try:
        config = resolve_config(args.config)
    except Exception as exc:
        print(f"Error loading config: {exc}", file=sys.stderr)
        sys.exit(1)

    if args.host:
        config.server.host = args.host
    if args.port is not None:
        config.server.port = args.port

    configure_logging(config.logging.level.value)
    server = MCPWebServer(config)

    print("Starting MCPWebKit server...")
    print(f"  Host:  {config.server.host}")
    print(f"  Port:  {config.server.port} (+{config.server.max_port_retries} fallbacks)")
    print(f"  Tools: {', '.join(server.registry.names())}")
    print()

    try:
        asyncio.run(server.serve_forever())
    except RuntimeError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        sys.exit(1)
    except KeyboardInterrupt:
        print("Stopped.")


# ── Remote commands ──────────────────────────────────────────────────


def _get(url: str, path: str) -> Any:
    try:
        resp = httpx.get(f"{url}{path}", timeout=10.0)
        resp.raise_for_status()
    except httpx.ConnectError:
        print(f"Error: cannot connect to MCPWebKit server at {url}", file=sys.stderr)
        sys.exit(1)
    except httpx.HTTPStatusError as exc:
        print(f"Error: HTTP {exc.response.status_code}", file=sys.stderr)
        print(exc.response.text, file=sys.stderr)
        sys.exit(1)
    return resp.json()


def _rpc(url: str, method: str, params: dict[str, Any] | None = None, timeout: float = 60.0) -> Any:
    payload: dict[str, Any] = {"jsonrpc": "2.0", "id": 1, "method": method}
    if params is not None:
        payload["params"] = params
    try:
        resp = httpx.post(f"{url}/mcp", json=payload, timeout=timeout)
        resp.raise_for_status()
    except httpx.ConnectError:
        print(f"Error: cannot connect to MCPWebKit server at {url}", file=sys.stderr)
        sys.exit(1)
    except httpx.HTTPStatusError as exc:
        print(f"Error: HTTP {exc.response.status_code}", file=sys.stderr)
        print(exc.response.text, file=sys.stderr)
        sys.exit(1)

    data = resp.json()
    if "error" in data:
        err = data["error"]
        print(f"Error {err.get('code')}: {err.get('message')}", file=sys.stderr)
        sys.exit(1)
    return data.get("result")


def cmd_status(args: argparse.Namespace) -> None:
    print(json.dumps(_get(args.url, "/status"), indent=2))


def cmd_health(args: argparse.Namespace) -> None:
    data = _get(args.url, "/health")
    print(f"{data.get('status')} (port {data.get('port')})")


def cmd_tools(args: argparse.Namespace) -> None:
    result = _rpc(args.url, "tools/list")
    for tool in result.get("tools", []):
        schema = tool.get("inputSchema", {})
        required = set(schema.get("required", []))
        params = ", ".join(
            f"{name}{'' if name in required else '?'}" for name in schema.get("properties", {})
        )
        print(f"{tool['name']}({params})")
        if args.verbose:
            print(f"    {tool.get('description', '')}")


def cmd_call(args: argparse.Namespace) -> None:
    try:
        arguments = json.loads(args.args) if args.args else {}
    except ValueError as exc:
        print(f"Error: --args is not valid JSON: {exc}", file=sys.stderr)
        sys.exit(1)

    result = _rpc(
        args.url,
        "tools/call",
        {"name": args.name, "arguments": arguments},
        timeout=args.timeout,
    )
    for item in result.get("content", []):
        print(item.get("text", ""))
    if result.get("isError"):
        sys.exit(2)


def main() -> None:
    parser = argparse.ArgumentParser(
        prog="mcpwebkit",
        description=f"{DISPLAY_NAME}: {DESCRIPTION}",
    )
    sub = parser.add_subparsers(dest="command")

    # validate
    p_val = sub.add_parser("validate", help="Validate a mcpwebkit.yaml config")
    p_val.add_argument("config", nargs="?", default="mcpwebkit.yaml", help="Path to config")
    p_val.set_defaults(func=cmd_validate)

    # run
    p_run = sub.add_parser("run", help="Start the MCPWebKit server")
    p_run.add_argument("config", nargs="?", default=None, help="Path to config")
    p_run.add_argument("--host", default=None, help="Bind address")
    p_run.add_argument("--port", type=int, default=None, help="Preferred port")
    p_run.set_defaults(func=cmd_run)

    # remote
    p_status = sub.add_parser("status", help="Show a running server's status")
    p_status.add_argument("--url", default=DEFAULT_URL, help="Server base URL")
    p_status.set_defaults(func=cmd_status)

    p_health = sub.add_parser("health", help="Health-check a running server")
    p_health.add_argument("--url", default=DEFAULT_URL, help="Server base URL")
    p_health.set_defaults(func=cmd_health)

    p_tools = sub.add_parser("tools", help="List a running server's tools")
    p_tools.add_argument("--url", default=DEFAULT_URL, help="Server base URL")
    p_tools.add_argument("--verbose", "-v", action="store_true", help="Show descriptions")
    p_tools.set_defaults(func=cmd_tools)

    p_call = sub.add_parser("call", help="Call a tool on a running server")
    p_call.add_argument("name", help="Tool name")
    p_call.add_argument("--args", "-a", default=None, help="Tool arguments as a JSON object")
    p_call.add_argument("--url", default=DEFAULT_URL, help="Server base URL")
    p_call.add_argument("--timeout", type=float, default=60.0, help="Request timeout in seconds")
    p_call.set_defaults(func=cmd_call)

    args = parser.parse_args()
    if not args.command:
        parser.print_help()
        sys.exit(1)

    args.func(args)


if __name__ == "__main__":
    main()
