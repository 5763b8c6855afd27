from __future__ import annotations

import json

import httpx
import pytest

from tests.conftest import Recorder
from tweetquery import query as q
from tweetquery.errors import InvalidQueryError
from tweetquery.models import Rule
from tweetquery.rules import add_rules, delete_rules, get_rules

RULES_PATH = "/2/tweets/search/stream/rules"


@pytest.mark.asyncio
async def test_get_all_rules(make_client):
    recorder = Recorder(
        httpx.Response(
            200,
            json={
                "data": [
                    {"id": "1", "value": "cat has:images", "tag": "cats"},
                    {"id": "2", "value": "dog"},
                ],
                "meta": {"sent": "2021-01-02T03:04:05.000Z"},
            },
        )
    )
    async with make_client(recorder) as cli:
        result = await get_rules(cli)

    assert result.rules == (
        Rule(value="cat has:images", tag="cats", id="1"),
        Rule(value="dog", id="2"),
    )
    assert result.meta["sent"] == "2021-01-02T03:04:05.000Z"
    assert recorder.last.url.path == RULES_PATH
    assert "ids" not in recorder.last.url.params


@pytest.mark.asyncio
async def test_get_rules_by_id(make_client):
    recorder = Recorder(httpx.Response(200, json={"meta": {}}))
    async with make_client(recorder) as cli:
        result = await get_rules(cli, "1", "2")

    assert result.rules == ()
    assert recorder.last.url.params["ids"] == "1,2"


@pytest.mark.asyncio
async def test_add_rules(make_client):
    recorder = Recorder(
        httpx.Response(
            201,
            json={
                "data": [{"id": "9", "value": "(cat OR kitten) has:images", "tag": "cats"}],
                "meta": {"summary": {"created": 2, "not_created": 0, "valid": 2, "invalid": 0}},
            },
        )
    )
    async with make_client(recorder) as cli:
        result = await add_rules(
            cli,
            [
                Rule("cat has:images lang:en", tag="cat pictures"),
                q.Some("cat", "kitten") & q.has_images(),
            ],
        )

    sent = recorder.last
    assert sent.method == "POST"
    assert sent.url.path == RULES_PATH
    assert "dry_run" not in sent.url.params
    assert json.loads(sent.content) == {
        "add": [
            {"value": "cat has:images lang:en", "tag": "cat pictures"},
            {"value": "(cat OR kitten) has:images"},
        ]
    }
    assert result.rules[0].id == "9"
    assert result.meta["summary"]["created"] == 2


@pytest.mark.asyncio
async def test_add_rules_dry_run(make_client):
    recorder = Recorder(httpx.Response(200, json={"meta": {"summary": {"valid": 1}}}))
    async with make_client(recorder) as cli:
        await add_rules(cli, ["dog"], dry_run=True)

    assert recorder.last.url.params["dry_run"] == "true"


@pytest.mark.asyncio
async def test_add_invalid_rule_is_rejected_locally(make_client):
    recorder = Recorder()
    async with make_client(recorder) as cli:
        with pytest.raises(InvalidQueryError):
            await add_rules(cli, [q.has_images() & q.lang("en")])

    assert recorder.requests == []


@pytest.mark.asyncio
async def test_delete_rules(make_client):
    recorder = Recorder(httpx.Response(200, json={"meta": {"summary": {"deleted": 2}}}))
    async with make_client(recorder) as cli:
        result = await delete_rules(cli, ["1", "2"], dry_run=True)

    assert json.loads(recorder.last.content) == {"delete": {"ids": ["1", "2"]}}
    assert recorder.last.url.params["dry_run"] == "true"
    assert result.rules == ()
    assert result.meta["summary"]["deleted"] == 2
