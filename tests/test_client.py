from __future__ import annotations

import httpx
import pytest

from tests.conftest import TOKEN, Recorder
from tweetquery.client import Client, Request
from tweetquery.errors import TwitterError


def test_request_params_join_values():
    req = Request(method="2/tweets")
    req.add("ids", "1", "2")
    req.add("ids", "3")
    req.add("expansions")
    req.set("max_results", "10")
    assert req.query_params() == {"ids": "1,2,3", "max_results": "10"}


def test_request_set_replaces():
    req = Request(method="2/tweets")
    req.add("ids", "1", "2")
    req.set("ids", "9")
    assert req.params == {"ids": ["9"]}


def test_request_headers_only_with_body():
    assert Request(method="x").headers() == {}
    assert Request(method="x", data=b"{}").headers() == {"Content-Type": "application/json"}
    assert Request(method="x", data=b"a", content_type="text/plain").headers() == {
        "Content-Type": "text/plain"
    }


class TestCall:
    @pytest.mark.asyncio
    async def test_call_decodes_reply(self, make_client):
        recorder = Recorder(
            httpx.Response(
                200,
                json={
                    "data": [{"id": "1", "text": "hi"}],
                    "meta": {"result_count": 1},
                    "errors": [{"title": "Not Found Error", "parameter": "ids", "value": "2"}],
                },
            )
        )
        async with make_client(recorder) as cli:
            reply = await cli.call(Request(method="2/tweets", params={"ids": ["1", "2"]}))

        assert reply.data == [{"id": "1", "text": "hi"}]
        assert reply.meta == {"result_count": 1}
        assert reply.errors[0].title == "Not Found Error"
        assert reply.errors[0].value == "2"

        sent = recorder.last
        assert sent.method == "GET"
        assert sent.url.path == "/2/tweets"
        assert sent.url.params["ids"] == "1,2"
        assert sent.headers["Authorization"] == f"Bearer {TOKEN}"

    @pytest.mark.asyncio
    async def test_call_sends_body(self, make_client):
        recorder = Recorder(httpx.Response(200, json={}))
        async with make_client(recorder) as cli:
            await cli.call(Request(method="2/things", http_method="POST", data=b'{"a": 1}'))

        assert recorder.last.method == "POST"
        assert recorder.last.content == b'{"a": 1}'
        assert recorder.last.headers["Content-Type"] == "application/json"

    @pytest.mark.asyncio
    async def test_http_error_raises(self, make_client):
        recorder = Recorder(
            httpx.Response(401, json={"title": "Unauthorized", "detail": "Unauthorized"})
        )
        async with make_client(recorder) as cli:
            with pytest.raises(TwitterError) as exc:
                await cli.call(Request(method="2/tweets"))

        assert exc.value.status == 401
        assert exc.value.message == "Unauthorized"
        assert b"Unauthorized" in exc.value.data

    @pytest.mark.asyncio
    async def test_bad_json_raises(self, make_client):
        recorder = Recorder(httpx.Response(200, content=b"not json"))
        async with make_client(recorder) as cli:
            with pytest.raises(TwitterError, match="decoding response body"):
                await cli.call(Request(method="2/tweets"))

    @pytest.mark.asyncio
    async def test_transport_error_raises(self, make_client):
        def fail(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        async with make_client(Recorder(fail)) as cli:
            with pytest.raises(TwitterError, match="issuing request"):
                await cli.call(Request(method="2/tweets"))

    @pytest.mark.asyncio
    async def test_call_outside_context_raises(self):
        cli = Client(bearer_token=TOKEN)
        with pytest.raises(RuntimeError):
            await cli.call(Request(method="2/tweets"))

    @pytest.mark.asyncio
    async def test_missing_token_raises(self, monkeypatch):
        monkeypatch.delenv("TWITTER_BEARER_TOKEN", raising=False)
        async with Client(transport=httpx.MockTransport(Recorder())) as cli:
            with pytest.raises(TwitterError, match="bearer token"):
                await cli.call(Request(method="2/tweets"))

    def test_token_from_env(self, monkeypatch):
        monkeypatch.setenv("TWITTER_BEARER_TOKEN", "from-env")
        assert Client()._bearer_token == "from-env"


class TestStream:
    @pytest.mark.asyncio
    async def test_stream_yields_each_message(self, make_client):
        body = b'{"data": {"id": "1", "text": "a"}}\r\n\r\n{"data": {"id": "2", "text": "b"}}\r\n'
        recorder = Recorder(httpx.Response(200, content=body))
        async with make_client(recorder) as cli:
            replies = [r async for r in cli.stream(Request(method="2/tweets/search/stream"))]

        assert [r.data["id"] for r in replies] == ["1", "2"]

    @pytest.mark.asyncio
    async def test_stream_error_status(self, make_client):
        recorder = Recorder(httpx.Response(429, json={"title": "Too Many Requests"}))
        async with make_client(recorder) as cli:
            with pytest.raises(TwitterError) as exc:
                async for _ in cli.stream(Request(method="2/tweets/search/stream")):
                    pass

        assert exc.value.status == 429
