# tweetquery/query/combinators.py
from dataclasses import dataclass


@dataclass(frozen=True)
class Query:
    """Base AST node for search queries."""

    def __and__(self, other: "Query") -> "Query":
        return And(self, other)

    def __or__(self, other: "Query") -> "Query":
        return Or(self, other)

    def __invert__(self) -> "Query":
        return Not(self)

    def render(self) -> str:
        """Render the query in the search endpoint's filter syntax."""
        return _render(self)

    def is_valid(self) -> bool:
        """Report whether the query contains at least one standalone term.

        A valid query may contain invalid subqueries.
        """
        return _is_valid(self)

    def __str__(self) -> str:
        return _render(self)


@dataclass(frozen=True)
class Word(Query):
    """Free-text keyword, quoted when it contains whitespace."""

    text: str


@dataclass(frozen=True)
class Tagged(Query):
    """Prefixed term: tag + argument, e.g. from:jack or url:"x"."""

    tag: str
    arg: str
    quoted: bool = False


@dataclass(frozen=True)
class Filter(Query):
    """Field modifier such as has:images. Never standalone."""

    token: str


@dataclass(frozen=True)
class Conjunction(Query):
    """All terms must match."""

    terms: tuple[Query, ...] = ()


@dataclass(frozen=True)
class Disjunction(Query):
    """Any term may match."""

    terms: tuple[Query, ...] = ()


@dataclass(frozen=True)
class Negation(Query):
    """Negated leaf term."""

    operand: Query


def _render(query: Query) -> str:
    match query:
        case Word(text=t):
            return f'"{t}"' if _has_space(t) else t
        case Tagged(tag=tag, arg=a, quoted=True):
            return f'{tag}"{a}"'
        case Tagged(tag=tag, arg=a):
            return f"{tag}{a}"
        case Filter(token=t):
            return t
        case Conjunction(terms=ts):
            return " ".join(_compile(ts))
        case Disjunction(terms=ts):
            return " OR ".join(_compile(ts))
        case Negation(operand=o):
            return f"-{_render(o)}"
        case _:
            raise ValueError(f"Unsupported query node: {query}")


def _is_valid(query: Query) -> bool:
    match query:
        case Word() | Tagged():
            return True
        case Filter():
            return False
        case Conjunction(terms=ts) | Disjunction(terms=ts):
            return any(_is_valid(t) for t in ts)
        case Negation(operand=o):
            return _is_valid(o)
        case _:
            raise ValueError(f"Unsupported query node: {query}")


def _is_compound(query: Query) -> bool:
    match query:
        case Conjunction(terms=ts) | Disjunction(terms=ts):
            return len(ts) > 1
        case Negation(operand=o):
            return _is_compound(o)
        case _:
            return False


def _compile(terms: tuple[Query, ...]) -> list[str]:
    return [f"({_render(t)})" if _is_compound(t) else _render(t) for t in terms]


def _has_space(s: str) -> bool:
    return " " in s or "\t" in s


def _untag(tag: str, s: str) -> str:
    return s.removeprefix(tag)


def _flatten(queries: tuple[Query, ...], kind: type) -> tuple[Query, ...]:
    """Splice the terms of same-kind arguments in place of the arguments."""
    out: list[Query] = []
    for q in queries:
        if isinstance(q, kind):
            out.extend(q.terms)
        else:
            out.append(q)
    return tuple(out)


# Combinators (public API)
def And(*queries: Query) -> Query:
    """Match the conjunction of the given queries."""
    if len(queries) == 1:
        return queries[0]
    terms = _flatten(queries, Conjunction)
    if len(terms) == 1:
        return terms[0]
    return Conjunction(terms)


def Or(*queries: Query) -> Query:
    """Match the disjunction of the given queries."""
    if len(queries) == 1:
        return queries[0]
    terms = _flatten(queries, Disjunction)
    if len(terms) == 1:
        return terms[0]
    return Disjunction(terms)


def Not(query: Query) -> Query:
    """Match the negation of query.

    Negations of conjunctions and disjunctions are pushed down to the leaves
    (De Morgan), and a double negation yields the original query.
    """
    match query:
        case Negation(operand=o):
            return o
        case Conjunction(terms=ts):
            return Or(*(Not(t) for t in ts))
        case Disjunction(terms=ts):
            return And(*(Not(t) for t in ts))
        case _:
            return Negation(query)


def All(*terms: str) -> Query:
    """Match a conjunction of words, equivalent to And(word(s), ...)."""
    return And(*(word(t) for t in terms))


def Some(*terms: str) -> Query:
    """Match a disjunction of words, equivalent to Or(word(s), ...)."""
    return Or(*(word(t) for t in terms))


# Factory functions (public API)
def word(value: str) -> Word:
    return Word(value.strip())


def from_user(value: str) -> Tagged:
    """Tweets from the specified user."""
    return Tagged("from:", _untag("@", value))


def to_user(value: str) -> Tagged:
    """Tweets that reply to the specified user."""
    return Tagged("to:", _untag("@", value))


def retweets_of(value: str) -> Tagged:
    return Tagged("retweets_of:", _untag("@", value))


def url(value: str) -> Tagged:
    """Tweets containing the URL, matched against plain and expanded forms."""
    return Tagged("url:", value, quoted=True)


def hashtag(value: str) -> Tagged:
    return Tagged("#", _untag("#", value))


def mention(value: str) -> Tagged:
    return Tagged("@", _untag("@", value))


def entity(value: str) -> Tagged:
    return Tagged("entity:", value)


def in_thread(conversation_id: str) -> Tagged:
    """Tweets belonging to the given conversation."""
    return Tagged("conversation_id:", conversation_id)


def lang(code: str) -> Filter:
    """Tweets tagged with the given language. A tweet has at most one."""
    return Filter(f"lang:{code}")


IS_RETWEET = Filter("is:retweet")
IS_VERIFIED = Filter("is:verified")
HAS_HASHTAGS = Filter("has:hashtags")
HAS_LINKS = Filter("has:links")
HAS_MENTIONS = Filter("has:mentions")
HAS_MEDIA = Filter("has:media")
HAS_IMAGES = Filter("has:images")
HAS_VIDEOS = Filter("has:videos")


def is_retweet() -> Filter:
    """Native retweets, not quote tweets."""
    return IS_RETWEET


def is_verified() -> Filter:
    return IS_VERIFIED


def has_hashtags() -> Filter:
    return HAS_HASHTAGS


def has_links() -> Filter:
    return HAS_LINKS


def has_mentions() -> Filter:
    return HAS_MENTIONS


def has_media() -> Filter:
    return HAS_MEDIA


def has_images() -> Filter:
    return HAS_IMAGES


def has_videos() -> Filter:
    """Native videos only; links to videos elsewhere do not count."""
    return HAS_VIDEOS
