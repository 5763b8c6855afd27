"""tweetquery - Structured search queries for the Twitter API v2."""

from tweetquery.client import Client, Request
from tweetquery.errors import InvalidQueryError, TwitterError
from tweetquery.models import ErrorDetail, Reply, Rule, RulesResult, SearchMeta, SearchPage, Tweet
from tweetquery.query import (
    All,
    And,
    Not,
    Or,
    Query,
    Some,
    word,
)
from tweetquery.rules import add_rules, delete_rules, get_rules
from tweetquery.search import SearchOptions, query_string, search_page, search_recent, search_stream, take

__all__ = [
    # Query combinators
    "Query",
    "And",
    "Or",
    "Not",
    "All",
    "Some",
    "word",
    # Client
    "Client",
    "Request",
    "TwitterError",
    "InvalidQueryError",
    # Models
    "Tweet",
    "Reply",
    "ErrorDetail",
    "SearchMeta",
    "SearchPage",
    "Rule",
    "RulesResult",
    # Search
    "SearchOptions",
    "query_string",
    "search_page",
    "search_recent",
    "search_stream",
    "take",
    # Rules
    "get_rules",
    "add_rules",
    "delete_rules",
]
