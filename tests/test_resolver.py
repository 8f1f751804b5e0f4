"""Tests for resolving referenced record ids into document links."""
from unittest.mock import MagicMock

import requests

from helpers import fake_session, json_response
from schemas.docs import DocumentReference
from src.client.resolver import ReferenceResolver

BASE = "http://ask.test"

DOCS = [
    {"id": "a", "title": "T1", "slug": "s1"},
    {"id": "b", "title": "T2", "slug": "s2"},
]


def make_resolver(*responses):
    session = fake_session(*responses)
    return ReferenceResolver(base_url=BASE, session=session, timeout=5), session


def test_resolves_ids_in_order():
    resolver, session = make_resolver(json_response(DOCS))
    related = resolver.update("netlifyDocs", ["a", "b"])
    assert related == [
        DocumentReference(id="a", title="T1", slug="s1"),
        DocumentReference(id="b", title="T2", slug="s2"),
    ]
    assert resolver.related_docs == related
    args, kwargs = session.post.call_args
    assert args[0] == f"{BASE}/api/docs-get"
    assert kwargs["json"] == {"database": "netlifyDocs", "ids": ["a", "b"]}


def test_empty_ids_clear_without_request():
    resolver, session = make_resolver(json_response(DOCS))
    resolver.update("netlifyDocs", ["a", "b"])
    assert resolver.update("netlifyDocs", []) == []
    assert resolver.related_docs == []
    assert session.post.call_count == 1


def test_none_ids_issue_no_request():
    resolver, session = make_resolver()
    assert resolver.update("netlifyDocs", None) == []
    session.post.assert_not_called()


def test_missing_title_shows_no_references():
    resolver, _ = make_resolver(json_response([{"id": "a", "slug": "s1"}]))
    assert resolver.update("netlifyDocs", ["a"]) == []
    assert resolver.related_docs == []


def test_non_array_response_shows_no_references():
    resolver, _ = make_resolver(json_response({"error": "nope"}))
    assert resolver.update("netlifyDocs", ["a"]) == []


def test_http_failure_shows_no_references():
    resp = MagicMock()
    resp.raise_for_status.side_effect = requests.HTTPError("502 Bad Gateway")
    resolver, _ = make_resolver(resp)
    assert resolver.update("netlifyDocs", ["a"]) == []


def test_unchanged_ids_are_not_refetched():
    resolver, session = make_resolver(json_response(DOCS))
    resolver.update("netlifyDocs", ["a", "b"])
    resolver.update("netlifyDocs", ["a", "b"])
    assert session.post.call_count == 1


def test_changed_database_refetches():
    resolver, session = make_resolver(json_response(DOCS), json_response(DOCS[:1]))
    resolver.update("netlifyDocs", ["a", "b"])
    assert [d.id for d in resolver.update("otherDocs", ["a", "b"])] == ["a"]
    assert session.post.call_count == 2


def test_clear_related_empties_and_allows_refetch():
    resolver, session = make_resolver(json_response(DOCS), json_response(DOCS))
    resolver.update("netlifyDocs", ["a", "b"])
    resolver.clear_related()
    assert resolver.related_docs == []
    resolver.update("netlifyDocs", ["a", "b"])
    assert session.post.call_count == 2
    assert len(resolver.related_docs) == 2


def test_document_reference_url():
    assert DocumentReference(id="a", title="T", slug="docs.netlify.com/x").url == (
        "https://docs.netlify.com/x"
    )


def test_update_from_superseded_cycle_is_skipped():
    resolver, session = make_resolver(json_response(DOCS))
    stale = resolver.clear_related()
    resolver.clear_related()
    assert resolver.update("netlifyDocs", ["a", "b"], cycle=stale) == []
    session.post.assert_not_called()


def test_update_from_current_cycle_resolves():
    resolver, session = make_resolver(json_response(DOCS))
    cycle = resolver.clear_related()
    assert len(resolver.update("netlifyDocs", ["a", "b"], cycle=cycle)) == 2
