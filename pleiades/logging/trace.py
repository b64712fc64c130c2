"""Raw HTTP tracing of API requests.

A trace hook is any callable taking the sent request and the received
response (None when the transport failed before a response arrived).
"""

from typing import Protocol

import httpx


class TraceHook(Protocol):
    def __call__(self, request: httpx.Request, response: httpx.Response | None) -> None:
        ...


class DebugFileTrace:
    """Dumps the last request/response exchange to a file.

    The file is truncated on every request, so it always holds the most
    recent exchange only.
    """

    def __init__(self, path: str):
        self.path = path

    def __call__(self, request: httpx.Request, response: httpx.Response | None) -> None:
        with open(self.path, "w", encoding="utf-8") as f:
            f.write(format_request(request))
            f.write("\n")
            if response is None:
                f.write("* No response received\n")
            else:
                f.write(format_response(response))


def _format_headers(headers: httpx.Headers) -> str:
    return "".join(f"{name}: {value}\n" for name, value in headers.items())


def format_request(request: httpx.Request) -> str:
    body = request.content.decode("utf-8", errors="replace")
    return (
        f"> {request.method} {request.url}\n"
        f"{_format_headers(request.headers)}\n"
        f"{body}\n"
    )


def format_response(response: httpx.Response) -> str:
    return (
        f"< {response.http_version} {response.status_code} {response.reason_phrase}\n"
        f"{_format_headers(response.headers)}\n"
        f"{response.text}\n"
    )
