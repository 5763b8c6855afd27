"""Asynchronous client for the Twitter API v2."""

import json
import logging
import os
from collections.abc import AsyncIterator
from dataclasses import dataclass, field

import httpx

from tweetquery.errors import TwitterError
from tweetquery.models import Reply

logger = logging.getLogger(__name__)

DEFAULT_CONTENT_TYPE = "application/json"


@dataclass
class Request:
    """Generic API request.

    ``method`` is the API path, e.g. "2/tweets/search/recent". Parameters with
    several values are sent as a single comma-separated value.
    """

    method: str
    params: dict[str, list[str]] = field(default_factory=dict)
    http_method: str = "GET"
    data: bytes | None = None
    content_type: str | None = None

    def add(self, name: str, *values: str) -> None:
        """Append values for name, keeping any previous ones."""
        if not values:
            return
        self.params.setdefault(name, []).extend(values)

    def set(self, name: str, value: str) -> None:
        """Replace any values for name with value."""
        self.params[name] = [value]

    def query_params(self) -> dict[str, str]:
        return {name: ",".join(values) for name, values in self.params.items()}

    def headers(self) -> dict[str, str]:
        if not self.data:
            return {}
        return {"Content-Type": self.content_type or DEFAULT_CONTENT_TYPE}


class Client:
    """Client for the Twitter API v2, authorized with a bearer token."""

    BASE_URL = "https://api.twitter.com"

    def __init__(
        self,
        bearer_token: str | None = None,
        base_url: str | None = None,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._bearer_token = bearer_token or self._load_from_env()
        self._base_url = (base_url or self.BASE_URL).rstrip("/")
        self._timeout = timeout
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    def _load_from_env(self) -> str | None:
        return os.getenv("TWITTER_BEARER_TOKEN")

    async def __aenter__(self) -> "Client":
        self._client = httpx.AsyncClient(timeout=self._timeout, transport=self._transport)
        return self

    async def __aexit__(self, *_: object) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None

    def _build(self, request: Request) -> httpx.Request:
        if self._client is None:
            raise RuntimeError("Client not initialized. Use 'async with client:'")
        if not self._bearer_token:
            raise TwitterError("missing bearer token. Set TWITTER_BEARER_TOKEN or pass bearer_token=")

        headers = {"Authorization": f"Bearer {self._bearer_token}", **request.headers()}
        return self._client.build_request(
            request.http_method,
            f"{self._base_url}/{request.method.lstrip('/')}",
            params=request.query_params(),
            headers=headers,
            content=request.data or None,
        )

    async def call(self, request: Request) -> Reply:
        """Issue the request and return the decoded reply."""
        hreq = self._build(request)
        logger.debug("Requesting: %s %s", hreq.method, hreq.url)
        try:
            response = await self._client.send(hreq)
        except httpx.HTTPError as e:
            raise TwitterError(f"issuing request: {e}") from e
        logger.debug("Response status: %s", response.status_code)

        _check_status(response, response.content)
        return _decode(response.content, "decoding response body")

    async def stream(self, request: Request) -> AsyncIterator[Reply]:
        """Issue a streaming request and yield one reply per message.

        The server delivers newline-delimited JSON objects; blank keep-alive
        lines are skipped. Stop iterating (or close the iterator) to end the
        stream.
        """
        hreq = self._build(request)
        logger.debug("Streaming: %s %s", hreq.method, hreq.url)
        try:
            response = await self._client.send(hreq, stream=True)
        except httpx.HTTPError as e:
            raise TwitterError(f"issuing request: {e}") from e

        try:
            logger.debug("Response status: %s", response.status_code)
            if not response.is_success:
                _check_status(response, await response.aread())
            async for line in response.aiter_lines():
                if not line.strip():
                    continue
                yield _decode(line.encode(), "decoding stream response")
        except httpx.HTTPError as e:
            raise TwitterError(f"reading stream: {e}") from e
        finally:
            await response.aclose()


def _check_status(response: httpx.Response, body: bytes) -> None:
    if response.is_success:
        return
    message = response.reason_phrase or "request failed"
    try:
        detail = json.loads(body)
    except ValueError:
        detail = None
    if isinstance(detail, dict):
        message = detail.get("detail") or detail.get("title") or message
    raise TwitterError(message, status=response.status_code, data=body)


def _decode(body: bytes, what: str) -> Reply:
    try:
        obj = json.loads(body)
    except ValueError as e:
        raise TwitterError(what, data=body) from e
    if not isinstance(obj, dict):
        raise TwitterError(f"{what}: expected an object", data=body)
    return Reply.from_json(obj)
