import logging
from collections.abc import AsyncIterator
from dataclasses import dataclass, field
from typing import TypeVar
from datetime import UTC, datetime

from tweetquery.client import Client, Request
from tweetquery.errors import InvalidQueryError
from tweetquery.models import SearchMeta, SearchPage, Tweet, parse_tweets
from tweetquery.query.combinators import Query

logger = logging.getLogger(__name__)

DATE_FORMAT = "%Y-%m-%dT%H:%M:%SZ"

T = TypeVar("T")


async def take(n: int, aiter: AsyncIterator[T]) -> AsyncIterator[T]:
    """Take at most n items from an async iterator."""
    count = 0
    async for item in aiter:
        if count >= n:
            break
        yield item
        count += 1


def query_string(query: Query | str) -> str:
    """Render a query for transmission.

    Raw strings are sent as given. A Query must be valid, since the server
    rejects queries that consist only of filters.
    """
    if isinstance(query, str):
        return query
    if not query.is_valid():
        raise InvalidQueryError(f"query has no standalone term: {query.render()!r}")
    return query.render()


def _format_time(t: datetime) -> str:
    if t.tzinfo is not None:
        t = t.astimezone(UTC)
    return t.strftime(DATE_FORMAT)


@dataclass
class SearchOptions:
    """Optional parameters for search and stream requests."""

    start_time: datetime | None = None
    end_time: datetime | None = None
    max_results: int = 0  # 0 lets the server choose; otherwise 10..100
    since_id: str | None = None
    until_id: str | None = None
    expansions: list[str] = field(default_factory=list)
    tweet_fields: list[str] = field(default_factory=list)
    user_fields: list[str] = field(default_factory=list)

    def apply(self, request: Request) -> None:
        if self.start_time:
            request.set("start_time", _format_time(self.start_time))
        if self.end_time:
            request.set("end_time", _format_time(self.end_time))
        if self.max_results > 0:
            request.set("max_results", str(self.max_results))
        if self.since_id:
            request.set("since_id", self.since_id)
        if self.until_id:
            request.set("until_id", self.until_id)
        self.apply_fields(request)

    def apply_fields(self, request: Request) -> None:
        request.add("expansions", *self.expansions)
        request.add("tweet.fields", *self.tweet_fields)
        request.add("user.fields", *self.user_fields)


async def search_page(
    client: Client,
    query: Query | str,
    options: SearchOptions | None = None,
    page_token: str | None = None,
) -> SearchPage:
    """Fetch one page of recent tweets matching query."""
    request = Request(method="2/tweets/search/recent")
    request.set("query", query_string(query))
    if options:
        options.apply(request)
    if page_token:
        request.set("next_token", page_token)

    reply = await client.call(request)
    tweets = parse_tweets(reply.data)
    meta = SearchMeta.from_json(reply.meta)
    logger.debug("Results count: %s", len(tweets))
    return SearchPage(tweets=tweets, meta=meta, reply=reply)


async def search_recent(
    client: Client,
    query: Query | str,
    options: SearchOptions | None = None,
    max_pages: int | None = None,
) -> AsyncIterator[Tweet]:
    """
    Search recent tweets, following pagination tokens.

    Args:
        client: An open Client
        query: Query AST or raw query string
        options: Optional request parameters
        max_pages: Stop after this many pages (None follows every page)

    Examples:
        async with Client() as cli:
            async for tweet in take(50, search_recent(cli, q.All("cat", "dog"))):
                print(tweet.text)
    """
    rendered = query_string(query)
    logger.info("Starting recent search: %s", rendered)

    token: str | None = None
    pages = 0
    while max_pages is None or pages < max_pages:
        page = await search_page(client, rendered, options, token)
        pages += 1
        for tweet in page.tweets:
            yield tweet
        token = page.meta.next_token
        if not token:
            break
    logger.info("Search complete after %s pages", pages)


async def search_stream(
    client: Client,
    options: SearchOptions | None = None,
) -> AsyncIterator[Tweet]:
    """Stream tweets matching the current filtered-stream rules.

    Only the expansions and field selections of options apply to streams.
    """
    request = Request(method="2/tweets/search/stream")
    if options:
        options.apply_fields(request)
    async for reply in client.stream(request):
        for tweet in parse_tweets(reply.data):
            yield tweet
