from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

_TWEET_FIELDS = ("id", "text", "author_id", "conversation_id", "created_at", "lang")


@dataclass(frozen=True)
class ErrorDetail:
    """Error reported inside an otherwise successful reply, e.g. missing expansions."""

    title: str
    detail: str | None = None
    type: str | None = None
    parameter: str | None = None
    value: str | None = None
    resource_type: str | None = None

    @classmethod
    def from_json(cls, obj: dict) -> "ErrorDetail":
        return cls(
            title=obj.get("title", ""),
            detail=obj.get("detail"),
            type=obj.get("type"),
            parameter=obj.get("parameter"),
            value=obj.get("value"),
            resource_type=obj.get("resource_type"),
        )


@dataclass(frozen=True)
class Reply:
    """Root reply object returned by a successful API call."""

    data: Any = None
    includes: dict[str, Any] = field(default_factory=dict)
    meta: dict[str, Any] = field(default_factory=dict)
    errors: tuple[ErrorDetail, ...] = ()

    @classmethod
    def from_json(cls, obj: dict) -> "Reply":
        return cls(
            data=obj.get("data"),
            includes=obj.get("includes") or {},
            meta=obj.get("meta") or {},
            errors=tuple(ErrorDetail.from_json(e) for e in obj.get("errors") or ()),
        )


@dataclass(frozen=True)
class Tweet:
    """Tweet with the commonly requested fields; the rest are kept in extras."""

    id: str
    text: str
    author_id: str | None = None
    conversation_id: str | None = None
    created_at: datetime | None = None
    lang: str | None = None

    extras: dict[str, Any] = field(default_factory=dict, compare=False)

    def __hash__(self) -> int:
        return hash(self.id)

    @classmethod
    def from_json(cls, obj: dict) -> "Tweet | None":
        """Parse a tweet object, returning None if it has no ID."""
        tweet_id = obj.get("id")
        if not tweet_id:
            return None

        created_at = None
        created_str = obj.get("created_at")
        if created_str:
            try:
                created_at = datetime.fromisoformat(created_str)
            except ValueError:
                pass

        return cls(
            id=tweet_id,
            text=obj.get("text", ""),
            author_id=obj.get("author_id"),
            conversation_id=obj.get("conversation_id"),
            created_at=created_at,
            lang=obj.get("lang"),
            extras={k: v for k, v in obj.items() if k not in _TWEET_FIELDS},
        )


def parse_tweets(data: Any) -> list[Tweet]:
    """Decode the data of a reply, which may hold one tweet or a list of them."""
    if not data:
        return []
    if isinstance(data, dict):
        data = [data]
    tweets = []
    for obj in data:
        tweet = Tweet.from_json(obj)
        if tweet:
            tweets.append(tweet)
    return tweets


@dataclass(frozen=True)
class SearchMeta:
    """Server metadata reported with a search reply."""

    result_count: int = 0
    newest_id: str | None = None
    oldest_id: str | None = None
    next_token: str | None = None

    @classmethod
    def from_json(cls, obj: dict) -> "SearchMeta":
        return cls(
            result_count=obj.get("result_count", 0),
            newest_id=obj.get("newest_id"),
            oldest_id=obj.get("oldest_id"),
            next_token=obj.get("next_token"),
        )


@dataclass
class SearchPage:
    """One page of recent search results."""

    tweets: list[Tweet]
    meta: SearchMeta
    reply: Reply


@dataclass(frozen=True)
class Rule:
    """A single filtered-stream rule."""

    value: str
    tag: str | None = None
    id: str | None = None

    @classmethod
    def from_json(cls, obj: dict) -> "Rule":
        return cls(value=obj.get("value", ""), tag=obj.get("tag"), id=obj.get("id"))


@dataclass
class RulesResult:
    """Rules returned by a fetch or update, with the server's summary metadata."""

    rules: tuple[Rule, ...] = ()
    meta: dict[str, Any] = field(default_factory=dict)
