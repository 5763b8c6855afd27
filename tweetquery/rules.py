"""Read and modify the rules that select tweets for the filtered stream.

Each update either adds or deletes rules, never both. With ``dry_run=True``
the server only reports whether the update would succeed::

    async with Client() as cli:
        await add_rules(cli, [Rule("cat has:images lang:en", tag="cat pictures")])
        await add_rules(cli, [q.Some("dog", "puppy") & q.has_images()], dry_run=True)
        await delete_rules(cli, ["1234"])
"""

import json
import logging
from collections.abc import Iterable

from tweetquery.client import Client, Request
from tweetquery.errors import TwitterError
from tweetquery.models import Reply, Rule, RulesResult
from tweetquery.query.combinators import Query
from tweetquery.search import query_string

logger = logging.getLogger(__name__)

RULES_METHOD = "2/tweets/search/stream/rules"


async def get_rules(client: Client, *ids: str) -> RulesResult:
    """Fetch the given rule IDs, or every rule if none are given."""
    request = Request(method=RULES_METHOD)
    request.add("ids", *ids)
    return _decode_rules(await client.call(request))


async def add_rules(
    client: Client,
    rules: Iterable[Rule | Query | str],
    dry_run: bool = False,
) -> RulesResult:
    """Add stream rules. Query values are validated and rendered first."""
    adds = []
    for rule in rules:
        if isinstance(rule, Rule):
            entry = {"value": query_string(rule.value)}
            if rule.tag:
                entry["tag"] = rule.tag
        else:
            entry = {"value": query_string(rule)}
        adds.append(entry)
    logger.info("Adding %s rules (dry_run=%s)", len(adds), dry_run)
    return await _update(client, {"add": adds}, dry_run)


async def delete_rules(client: Client, ids: Iterable[str], dry_run: bool = False) -> RulesResult:
    """Delete stream rules by ID."""
    ids = list(ids)
    logger.info("Deleting %s rules (dry_run=%s)", len(ids), dry_run)
    return await _update(client, {"delete": {"ids": ids}}, dry_run)


async def _update(client: Client, body: dict, dry_run: bool) -> RulesResult:
    request = Request(
        method=RULES_METHOD,
        http_method="POST",
        data=json.dumps(body).encode(),
    )
    if dry_run:
        request.set("dry_run", "true")
    return _decode_rules(await client.call(request))


def _decode_rules(reply: Reply) -> RulesResult:
    data = reply.data or []
    if not isinstance(data, list):
        raise TwitterError("decoding rules data", data=json.dumps(data).encode())
    return RulesResult(
        rules=tuple(Rule.from_json(r) for r in data),
        meta=reply.meta,
    )
