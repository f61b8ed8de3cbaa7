"""Pytest configuration and shared fixtures.

This module provides centralized test fixtures for:
- An in-memory record store seeded with a small blog graph
- Presenter descriptors for the blog record types
- Presenters with a captured diagnostic sink
"""

from types import SimpleNamespace

import pytest

from parkes_presenter import MemoryStore, Presenter, Record, extend_models

# =============================================================================
# Descriptors
# =============================================================================

BLOG_MODELS = {
    "user": {
        "public_attributes": ["uuid", "key", "name", "bio", "teamUuid"],
        "private_attributes": ["role"],
        "nested_associations": ["posts", "team"],
    },
    "post": {
        "public_attributes": ["uuid", "key", "title", "body", "authorUuid"],
        "private_attributes": ["followers"],
        "nested_associations": [{"association": "user", "rename": "author"}],
    },
    "team": {
        "public_attributes": ["uuid", "key", "name"],
        "private_attributes": ["secretPower"],
        "nested_associations": ["user"],
    },
    "comment": {
        "public_attributes": ["uuid", "body"],
        "private_attributes": [],
        "nested_associations": {"public": ["user"], "private": ["user", "post"]},
    },
}


@pytest.fixture
def blog_models() -> dict:
    """Descriptor fields for the blog record types."""
    return BLOG_MODELS


# =============================================================================
# Record Store Fixtures
# =============================================================================


@pytest.fixture
def store() -> MemoryStore:
    """Empty in-memory record store."""
    return MemoryStore()


@pytest.fixture
def graph(store: MemoryStore) -> SimpleNamespace:
    """Blog graph with every association left unloaded.

    Bill Ryan belongs to team Generations and wrote one post, which has
    one comment. All relations are fetchable through the store.
    """
    team = Record(1, "team", {
        "uuid": "uuid_for_team",
        "key": "key_for_team",
        "name": "Generations",
        "secretPower": "people",
        "userId": 1,
    })
    user = Record(1, "user", {
        "uuid": "uuid_for_bill",
        "key": "key_for_bill",
        "name": "Bill Ryan",
        "bio": None,
        "role": "Veteran",
        "teamId": 1,
    })
    post = Record(1, "post", {
        "uuid": "uuid_for_post",
        "key": "key_for_post",
        "title": "The Defining Moment of our Times",
        "body": None,
        "followers": 11000,
        "userId": 1,
    })
    comment = Record(1, "comment", {
        "uuid": "uuid_for_comment",
        "body": "Hear, hear",
        "userId": 1,
        "postId": 1,
    })

    store.relate(user, "team", team)
    store.relate(user, "posts", [post])
    store.relate(team, "user", user)
    store.relate(post, "user", user)
    store.relate(comment, "user", user)
    store.relate(comment, "post", post)

    return SimpleNamespace(team=team, user=user, post=post, comment=comment)


# =============================================================================
# Presenter Fixtures
# =============================================================================


@pytest.fixture
def diagnostics() -> list[str]:
    """Collected missing-association diagnostics."""
    return []


@pytest.fixture
def make_presenter(store: MemoryStore, diagnostics: list[str]):
    """Factory for presenters over the blog descriptors.

    Keyword arguments are passed to ``extend_models`` as options.
    """

    def _make(models: dict | None = None, **options) -> Presenter:
        registry = extend_models(models if models is not None else BLOG_MODELS, options)
        return Presenter(store, registry, warn=diagnostics.append)

    return _make


@pytest.fixture
def presenter(make_presenter) -> Presenter:
    """Presenter that lazily loads missing associations."""
    return make_presenter(missing_associations="load")
