from __future__ import annotations

import os

import pytest

from tweetquery.models import Tweet

requires_bearer_token = pytest.mark.skipif(
    not os.environ.get("TWITTER_BEARER_TOKEN"),
    reason="TWITTER_BEARER_TOKEN not set",
)


def assert_valid_tweet(tweet: Tweet) -> None:
    assert tweet.id and tweet.id.isdigit(), f"Invalid tweet id: {tweet.id!r}"
    assert tweet.text is not None, "Tweet must have text"
