import asyncio
import json
import sys
from dataclasses import asdict
from datetime import datetime
from typing import Annotated

import cyclopts

from tweetquery import query as q
from tweetquery.client import Client
from tweetquery.errors import InvalidQueryError, TwitterError
from tweetquery.models import Rule, RulesResult, Tweet
from tweetquery.rules import add_rules, delete_rules, get_rules
from tweetquery.search import SearchOptions, search_recent, take

app = cyclopts.App(
    name="tweetquery",
    help="Build structured search queries and run them against the Twitter API v2.",
)

rules_app = cyclopts.App(name="rules", help="Manage filtered-stream rules.")
app.command(rules_app)

HAS_FILTERS = {
    "hashtags": q.has_hashtags,
    "links": q.has_links,
    "mentions": q.has_mentions,
    "media": q.has_media,
    "images": q.has_images,
    "videos": q.has_videos,
}


def build_query(
    terms: tuple[str, ...] = (),
    any_terms: list[str] | None = None,
    from_users: list[str] | None = None,
    to_users: list[str] | None = None,
    hashtags: list[str] | None = None,
    mentions: list[str] | None = None,
    urls: list[str] | None = None,
    language: str | None = None,
    has: list[str] | None = None,
    verified: bool = False,
    exclude_retweets: bool = False,
) -> q.Query:
    """Combine command-line options into a single conjunction.

    Several --from (or --to) users match any of them.
    """
    parts: list[q.Query] = [q.word(t) for t in terms]
    if any_terms:
        parts.append(q.Some(*any_terms))
    if from_users:
        parts.append(q.Or(*(q.from_user(u) for u in from_users)))
    if to_users:
        parts.append(q.Or(*(q.to_user(u) for u in to_users)))
    parts.extend(q.hashtag(h) for h in hashtags or ())
    parts.extend(q.mention(m) for m in mentions or ())
    parts.extend(q.url(u) for u in urls or ())
    if language:
        parts.append(q.lang(language))
    for name in has or ():
        if name not in HAS_FILTERS:
            raise ValueError(f"Unknown filter: {name!r}. Available: {list(HAS_FILTERS)}")
        parts.append(HAS_FILTERS[name]())
    if verified:
        parts.append(q.is_verified())
    if exclude_retweets:
        parts.append(q.Not(q.is_retweet()))
    return q.And(*parts)


def _to_json(tweet: Tweet) -> str:
    def default_serializer(obj):
        if isinstance(obj, datetime):
            return obj.isoformat()
        raise TypeError(f"Object of type {type(obj)} is not JSON serializable")

    return json.dumps(asdict(tweet), ensure_ascii=False, default=default_serializer)


async def _run_search(query: q.Query, max_results: int, as_json: bool) -> int:
    count = 0
    options = SearchOptions(max_results=min(max(max_results, 10), 100))
    async with Client() as cli:
        async for tweet in take(max_results, search_recent(cli, query, options)):
            if as_json:
                print(_to_json(tweet))
            else:
                print(f"{tweet.id}\t{tweet.text}")
            count += 1
    return count


@app.command(name="search")
def search(
    *terms: Annotated[str, cyclopts.Parameter(help="Words that must all appear")],
    any_terms: Annotated[
        list[str] | None,
        cyclopts.Parameter(name="--any", help="Words of which at least one must appear"),
    ] = None,
    from_users: Annotated[
        list[str] | None,
        cyclopts.Parameter(name="--from", help="Tweets from any of these users"),
    ] = None,
    to_users: Annotated[
        list[str] | None,
        cyclopts.Parameter(name="--to", help="Replies to any of these users"),
    ] = None,
    hashtags: Annotated[
        list[str] | None,
        cyclopts.Parameter(name="--hashtag", help="Required hashtags"),
    ] = None,
    mentions: Annotated[
        list[str] | None,
        cyclopts.Parameter(name="--mention", help="Required mentions"),
    ] = None,
    urls: Annotated[
        list[str] | None,
        cyclopts.Parameter(name="--url", help="Required URLs"),
    ] = None,
    language: Annotated[
        str | None,
        cyclopts.Parameter(name="--lang", help="Language code, e.g. en"),
    ] = None,
    has: Annotated[
        list[str] | None,
        cyclopts.Parameter(
            name="--has", help="Content filters: hashtags, links, mentions, media, images, videos"
        ),
    ] = None,
    verified: Annotated[
        bool,
        cyclopts.Parameter(name="--verified", help="Only tweets from verified authors"),
    ] = False,
    exclude_retweets: Annotated[
        bool,
        cyclopts.Parameter(name="--exclude-retweets", help="Leave out native retweets"),
    ] = False,
    max_results: Annotated[
        int,
        cyclopts.Parameter(name=["--max", "-n"], help="Maximum number of tweets"),
    ] = 10,
    as_json: Annotated[
        bool,
        cyclopts.Parameter(name="--json", help="Print one JSON object per tweet"),
    ] = False,
    dry_run: Annotated[
        bool,
        cyclopts.Parameter(name="--dry-run", help="Print the rendered query and exit"),
    ] = False,
) -> None:
    """Search recent tweets."""
    try:
        query = build_query(
            terms,
            any_terms=any_terms,
            from_users=from_users,
            to_users=to_users,
            hashtags=hashtags,
            mentions=mentions,
            urls=urls,
            language=language,
            has=has,
            verified=verified,
            exclude_retweets=exclude_retweets,
        )
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    if not query.is_valid():
        print(
            f"Error: query needs at least one word, user, hashtag, mention or URL: {query.render()!r}",
            file=sys.stderr,
        )
        sys.exit(1)

    if dry_run:
        print(query.render())
        return

    try:
        count = asyncio.run(_run_search(query, max_results, as_json))
    except (TwitterError, InvalidQueryError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    print(f"\nTotal: {count} tweets", file=sys.stderr)


def _print_rules(result: RulesResult) -> None:
    for rule in result.rules:
        tag = f"\t[{rule.tag}]" if rule.tag else ""
        print(f"{rule.id}\t{rule.value}{tag}")
    summary = result.meta.get("summary")
    if summary:
        print(", ".join(f"{k}: {v}" for k, v in summary.items()), file=sys.stderr)


def _run_rules(action) -> None:
    async def run() -> RulesResult:
        async with Client() as cli:
            return await action(cli)

    try:
        result = asyncio.run(run())
    except (TwitterError, InvalidQueryError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    _print_rules(result)


@rules_app.command(name="list")
def list_rules(
    *ids: Annotated[str, cyclopts.Parameter(help="Rule IDs (all rules if omitted)")],
) -> None:
    """List filtered-stream rules."""
    _run_rules(lambda cli: get_rules(cli, *ids))


@rules_app.command(name="add")
def add(
    query: Annotated[str, cyclopts.Parameter(help="Rule query string")],
    tag: Annotated[
        str | None,
        cyclopts.Parameter(name="--tag", help="Label reported with matching tweets"),
    ] = None,
    dry_run: Annotated[
        bool,
        cyclopts.Parameter(name="--dry-run", help="Only validate the rule"),
    ] = False,
) -> None:
    """Add a filtered-stream rule."""
    _run_rules(lambda cli: add_rules(cli, [Rule(query, tag=tag)], dry_run=dry_run))


@rules_app.command(name="delete")
def delete(
    *ids: Annotated[str, cyclopts.Parameter(help="Rule IDs to delete")],
    dry_run: Annotated[
        bool,
        cyclopts.Parameter(name="--dry-run", help="Only validate the deletion"),
    ] = False,
) -> None:
    """Delete filtered-stream rules by ID."""
    if not ids:
        print("Error: No rule IDs provided.", file=sys.stderr)
        sys.exit(1)
    _run_rules(lambda cli: delete_rules(cli, ids, dry_run=dry_run))


def main() -> None:
    app()


if __name__ == "__main__":
    main()
