"""Minimal HTTP/1.1 request parsing and response building.

One request per connection: no keep-alive, no chunked transfer encoding.
"""

from __future__ import annotations

from dataclasses import dataclass, field

CRLF = "\r\n"
HEADER_END = b"\r\n\r\n"

_STATUS_TEXT = {200: "OK", 404: "Not Found"}


class HttpParseError(Exception):
    """A request that cannot be routed; answered with a plain-text 4xx."""

    def __init__(self, status: int, message: str) -> None:
        super().__init__(message)
        self.status = status
        self.message = message


@dataclass
class HttpRequest:
    method: str
    path: str
    headers: list[str] = field(default_factory=list)
    body: str = ""

    @property
    def route_path(self) -> str:
        """Path without query string or fragment."""
        return self.path.split("?", 1)[0].split("#", 1)[0]


def parse_request(data: bytes) -> HttpRequest:
    """Split raw bytes into request line, header lines and body.

    ``headers`` holds every line of the request text, starting with the
    request line, exactly as the raw split produced them.
    """
    try:
        text = data.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise HttpParseError(400, "Invalid request") from exc

    lines = text.split(CRLF)
    first_line = lines[0]
    if not first_line:
        raise HttpParseError(400, "Empty request")

    parts = first_line.split(" ")
    if len(parts) < 2:
        raise HttpParseError(400, "Invalid HTTP request")

    _, sep, body = text.partition(CRLF + CRLF)
    return HttpRequest(method=parts[0], path=parts[1], headers=lines, body=body if sep else "")


def expected_length(data: bytes) -> int | None:
    """Total byte length of the request once its headers are complete.

    Returns ``None`` while the header block is still incomplete.  Without a
    ``Content-Length`` header the request ends with the headers.
    """
    end = data.find(HEADER_END)
    if end < 0:
        return None
    head = data[:end].decode("latin-1")
    content_length = 0
    for line in head.split(CRLF)[1:]:
        name, _, value = line.partition(":")
        if name.strip().lower() == "content-length":
            try:
                content_length = max(int(value.strip()), 0)
            except ValueError:
                content_length = 0
            break
    return end + len(HEADER_END) + content_length


def status_text(status: int) -> str:
    return _STATUS_TEXT.get(status, "Error")


def build_response(status: int, body: str, content_type: str) -> bytes:
    payload = body.encode("utf-8")
    head = CRLF.join([
        f"HTTP/1.1 {status} {status_text(status)}",
        f"Content-Type: {content_type}",
        f"Content-Length: {len(payload)}",
        "Access-Control-Allow-Origin: *",
        "Connection: close",
        "",
        "",
    ])
    return head.encode("utf-8") + payload
