"""Error type raised for every failed call to the PLEIADES API.

The exception message is a JSON object so callers can branch on
``statusCode`` without depending on the HTTP library:

    {"statusCode": 404, "reason": "Not Found", "responseBody": {...}}
"""

import json

import httpx

GENERAL_ERROR_REASON = "General RequestException error."
CONNECTION_FAILED_REASON = "Connection to PLEIADES API server failed."


class RequestException(Exception):
    """A request failed. ``str(exc)`` is the JSON-encoded payload."""

    def __init__(self, message: str, response: httpx.Response | None = None):
        super().__init__(message)
        self.message = message
        self.response = response  # the error response, if one was received

    @classmethod
    def general_error(cls) -> "RequestException":
        return cls(json.dumps({"statusCode": 500, "reason": GENERAL_ERROR_REASON}))

    @classmethod
    def connection_failed(cls) -> "RequestException":
        return cls(json.dumps({"statusCode": 503, "reason": CONNECTION_FAILED_REASON}))

    @classmethod
    def from_response(cls, response: httpx.Response) -> "RequestException":
        """Build from a non-success response, keeping its body if it is JSON."""
        try:
            body = response.json()
        except ValueError:
            body = None
        return cls(json.dumps({
            "statusCode": response.status_code,
            "reason": response.reason_phrase,
            "responseBody": body,
        }), response=response)

    @property
    def payload(self) -> dict:
        return json.loads(self.message)

    @property
    def status_code(self) -> int:
        return self.payload["statusCode"]

    @property
    def reason(self) -> str:
        return self.payload["reason"]

    @property
    def response_body(self):
        return self.payload.get("responseBody")
