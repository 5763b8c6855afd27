"""Structured builder for search query strings.

The module is the builder: every function is pure and returns an immutable
query node. Render a node with ``render()`` (or ``str()``) and check it with
``is_valid()`` before sending it::

    from tweetquery import query as q

    expr = q.And(
        q.Or(q.All("red", "green", "blue"), q.Some("black", "white")),
        q.has_images(),
        q.Not(q.is_retweet()),
    )
    expr.render()  # '((red green blue) OR black OR white) has:images -is:retweet'
"""

from tweetquery.query.combinators import (
    All,
    And,
    Conjunction,
    Disjunction,
    Filter,
    Negation,
    Not,
    Or,
    Query,
    Some,
    Tagged,
    Word,
    entity,
    from_user,
    has_hashtags,
    has_images,
    has_links,
    has_media,
    has_mentions,
    has_videos,
    hashtag,
    in_thread,
    is_retweet,
    is_verified,
    lang,
    mention,
    retweets_of,
    to_user,
    url,
    word,
)

__all__ = [
    # Nodes
    "Query",
    "Word",
    "Tagged",
    "Filter",
    "Conjunction",
    "Disjunction",
    "Negation",
    # Combinators
    "And",
    "Or",
    "Not",
    "All",
    "Some",
    # Terms
    "word",
    "from_user",
    "to_user",
    "retweets_of",
    "url",
    "hashtag",
    "mention",
    "entity",
    "in_thread",
    # Filters
    "lang",
    "is_retweet",
    "is_verified",
    "has_hashtags",
    "has_links",
    "has_mentions",
    "has_media",
    "has_images",
    "has_videos",
]
