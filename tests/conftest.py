from __future__ import annotations

from collections.abc import Callable

import httpx
import pytest

from tweetquery.client import Client

TOKEN = "test-token"


class Recorder:
    """Serves canned responses in order and records the requests it saw."""

    def __init__(self, *responses: httpx.Response | Callable[[httpx.Request], httpx.Response]):
        self.responses = list(responses)
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        response = self.responses.pop(0)
        if callable(response):
            return response(request)
        return response

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]


@pytest.fixture
def make_client() -> Callable[[Recorder], Client]:
    def make(recorder: Recorder) -> Client:
        return Client(bearer_token=TOKEN, transport=httpx.MockTransport(recorder))

    return make
