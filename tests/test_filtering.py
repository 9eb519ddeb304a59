"""
Tests for list search/filter/pagination helpers (src.filtering).
"""

from __future__ import annotations

from src.filtering import filter_documents, matches_search, paginate, sort_documents

USERS = [
    {"id": "1", "email": "ann@x.com", "displayName": "Ann", "role": "user", "isActive": True},
    {"id": "2", "email": "bob@x.com", "displayName": "Bobby", "role": "admin", "isActive": False},
    {"id": "3", "email": "cy@y.com", "displayName": None, "role": "user", "isActive": True},
]


def test_search_is_case_insensitive_substring():
    assert matches_search(USERS[1], "BOB", ("email", "displayName"))
    assert not matches_search(USERS[0], "bob", ("email", "displayName"))


def test_empty_term_matches_everything():
    assert len(filter_documents(USERS, "", ("email",))) == 3
    assert len(filter_documents(USERS, None, ("email",))) == 3


def test_whitespace_is_part_of_the_search_term():
    docs = [{"name": "alpha"}, {"name": "be ta"}]
    assert filter_documents(docs, " ", ("name",)) == [{"name": "be ta"}]
    assert filter_documents([{"name": "xray"}], " x", ("name",)) == []


def test_every_match_contains_the_term():
    for term in ("a", "X.C", " ", "bob@", "zzz"):
        out = filter_documents(USERS, term, ("email", "displayName"))
        assert all(
            any(term.lower() in str(d.get(f) or "").lower() for f in ("email", "displayName")) for d in out
        )


def test_missing_field_is_treated_as_empty():
    assert [d["id"] for d in filter_documents(USERS, "y.com", ("displayName", "email"))] == ["3"]


def test_equality_filters_combine_with_search():
    out = filter_documents(USERS, "x.com", ("email",), {"role": "user", "isActive": True})
    assert [d["id"] for d in out] == ["1"]


def test_all_and_empty_mean_no_filter():
    assert len(filter_documents(USERS, None, (), {"role": "all"})) == 3
    assert len(filter_documents(USERS, None, (), {"role": ""})) == 3
    assert len(filter_documents(USERS, None, (), {"role": None})) == 3


def test_boolean_false_is_a_real_filter():
    assert [d["id"] for d in filter_documents(USERS, None, (), {"isActive": False})] == ["2"]


def test_list_fields_are_searchable():
    posts = [{"id": "p", "tags": ["pdf", "ai"]}]
    assert filter_documents(posts, "ai", ("tags",))


def test_sort_documents_missing_last():
    docs = [{"n": 2}, {}, {"n": 5}]
    assert sort_documents(docs, "n") == [{"n": 2}, {"n": 5}, {}]
    assert sort_documents(docs, "n", descending=True) == [{"n": 5}, {"n": 2}, {}]


def test_paginate_clamps_bounds():
    docs = [{"i": i} for i in range(10)]
    total, page = paginate(docs, limit=3, offset=8)
    assert total == 10
    assert page == [{"i": 8}, {"i": 9}]

    _, page = paginate(docs, limit=0, offset=-5)
    assert page == [{"i": 0}]

    _, page = paginate(docs, limit=1000, offset=0, max_limit=4)
    assert len(page) == 4
