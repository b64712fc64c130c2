"""PLEIADES API client.

Fetches a bearer token from the IAM (Keycloak) with the OAuth2 password
grant, then sends JSON requests to the PLEIADES connector (API server).

Flow: get_access_token() -> set_database() -> record shortcuts.
Every transport or HTTP failure surfaces as a RequestException whose
message is a JSON payload with a statusCode.
"""

import time
from collections.abc import Mapping
from typing import Any

import httpx

from pleiades.client.models import ClientConfig, Session
from pleiades.config.settings import get_settings
from pleiades.exceptions import RequestException
from pleiades.logging.structured import call_scope, get_logger
from pleiades.logging.trace import DebugFileTrace, TraceHook
from pleiades.storage.s3 import create_s3_client


class Client:
    """Thin binding over the PLEIADES record API.

    Holds credentials, the session (token, selected database, last
    response) and the HTTP and S3 collaborators. Not safe for concurrent
    use; create one instance per logical session.

    The default HTTP client follows redirects. Pass ``transport`` to route
    it through a custom httpx transport, or ``http_client`` to supply a
    fully configured client that this instance will not close.
    """

    def __init__(
        self,
        config: ClientConfig | Mapping[str, Any] | None = None,
        *,
        http_client: httpx.Client | None = None,
        transport: httpx.BaseTransport | None = None,
        s3_client=None,
        trace_hook: TraceHook | None = None,
    ):
        if config is None:
            config = ClientConfig.from_settings(get_settings())
        elif not isinstance(config, ClientConfig):
            config = ClientConfig.from_dict(config)
        self.config = config
        self.session = Session()

        self._owns_http_client = http_client is None
        if http_client is None:
            http_client = httpx.Client(
                verify=config.verify_tls, follow_redirects=True, transport=transport
            )
        self._http = http_client
        self.s3_client = s3_client if s3_client is not None else create_s3_client(config)

        if trace_hook is None and config.debug_file:
            trace_hook = DebugFileTrace(config.debug_file)
        self._trace_hook = trace_hook

    def __enter__(self) -> "Client":
        return self

    def __exit__(self, *args) -> None:
        self.close()

    def close(self) -> None:
        """Close the HTTP transport if this client created it."""
        if self._owns_http_client:
            self._http.close()

    @property
    def access_token(self) -> str:
        return self.session.access_token

    @property
    def database(self) -> str:
        return self.session.database

    @property
    def last_response(self) -> httpx.Response | None:
        return self.session.last_response

    # --- Transport ---

    def _dispatch(self, method: str, url: str, trace: bool = False, **kwargs) -> httpx.Response:
        """Send one request, translating every failure into a RequestException."""
        with call_scope():
            return self._send(method, url, trace, **kwargs)

    def _send(self, method: str, url: str, trace: bool, **kwargs) -> httpx.Response:
        logger = get_logger()
        call = {"method": method, "url": url}

        try:
            # Encodes the body too, so unserializable content fails here
            request = self._http.build_request(method, url, **kwargs)
        except (httpx.InvalidURL, TypeError, ValueError) as e:
            logger.warning(
                "Request could not be built",
                extra={"call": {**call, "error": type(e).__name__}},
            )
            raise RequestException.general_error() from e

        started = time.perf_counter()
        try:
            response = self._http.send(request)
        except httpx.RequestError as e:
            if trace:
                self._trace(request, None)
            logger.warning(
                "Request failed",
                extra={"call": {**call, "error": type(e).__name__, "latency_ms": _since(started)}},
            )
            if isinstance(e, httpx.ConnectError):
                raise RequestException.connection_failed() from e
            raise RequestException.general_error() from e

        if trace:
            self._trace(request, response)
        call["status_code"] = response.status_code
        call["latency_ms"] = _since(started)

        if response.is_error:
            logger.warning("Request rejected", extra={"call": call})
            raise RequestException.from_response(response)

        logger.info("Request completed", extra={"call": call})
        return response

    def _trace(self, request: httpx.Request, response: httpx.Response | None) -> None:
        if self._trace_hook is not None:
            self._trace_hook(request, response)

    # --- IAM ---

    def get_access_token(self) -> str:
        """Fetch an access token from the IAM using the password grant.

        The token is stored on the session and attached to every later
        request. A response without a parseable ``access_token`` yields "".
        """
        response = self._dispatch(
            "POST",
            f"{self.config.iam_token_endpoint}/token",
            headers={"content-type": "application/x-www-form-urlencoded"},
            data={
                "grant_type": "password",
                "client_id": self.config.client_id,
                "client_secret": self.config.client_secret,
                "username": self.config.user_name,
                "password": self.config.user_password,
            },
        )

        try:
            data = response.json()
        except ValueError:
            data = None
        token = data.get("access_token") if isinstance(data, dict) else None

        self.session.access_token = token if isinstance(token, str) else ""
        return self.session.access_token

    # --- API server ---

    def send_request(self, method: str, command: str, body: Any = None) -> httpx.Response:
        """Send an authenticated JSON request to the API server.

        Args:
            method: HTTP method (GET/POST/PUT/DELETE).
            command: API path, e.g. "/database/DB_NAME/record/RECORD_ID".
            body: JSON-serializable request body. Defaults to {}.

        Returns:
            The raw httpx.Response, also kept as ``last_response``.

        Raises:
            RequestException: On connection failure (503), any other
                transport failure or a body that is not JSON-serializable
                (500), or an error status from the server.
        """
        try:
            response = self._dispatch(
                method,
                f"{self.config.api_endpoint}{command}",
                trace=True,
                headers={
                    "content-type": "application/json",
                    "authorization": f"Bearer {self.session.access_token}",
                },
                json={} if body is None else body,
            )
        except RequestException as e:
            # Error responses are kept too; transport failures leave it untouched
            if e.response is not None:
                self.session.last_response = e.response
            raise
        self.session.last_response = response
        return response

    def create_database(self, database: str) -> str:
        res = self.send_request("PUT", f"/database/{database}")
        return res.text

    def set_database(self, database: str) -> None:
        """Select the database used by the record shortcuts."""
        self.session.database = database

    def create_record(self, content: dict) -> str:
        """Create a record. Returns the raw response body (the record ID)."""
        res = self.send_request("POST", f"/database/{self.session.database}/record", content)
        return res.text

    def update_record(self, record_id: str, content: dict) -> str:
        res = self.send_request(
            "PUT", f"/database/{self.session.database}/record/{record_id}", content
        )
        return res.text

    def get_record(self, record_id: str) -> dict | None:
        """Get a record. Returns None when the body is not a JSON object."""
        res = self.send_request("GET", f"/database/{self.session.database}/record/{record_id}")
        data = _decode_json(res)
        return data if isinstance(data, dict) else None

    def delete_record(self, record_id: str) -> str:
        res = self.send_request("DELETE", f"/database/{self.session.database}/record/{record_id}")
        return res.text

    def get_records(self, query: dict | None = None) -> list[dict] | None:
        """Get the records matching a MongoDB-like query (None matches all)."""
        res = self.send_request(
            "POST", f"/database/{self.session.database}/records", {"query": query}
        )
        data = _decode_json(res)
        return data if isinstance(data, list) else None


def _decode_json(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return None


def _since(started: float) -> float:
    return round((time.perf_counter() - started) * 1000, 2)
