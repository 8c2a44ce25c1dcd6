import json
from datetime import timedelta

from blogpad.services import BlogStore
from conftest import TickingClock


def test_filter_by_tag_is_exact_and_case_sensitive(store):
    a = store.create("alpha", "first", "work, ideas")
    b = store.create("beta", "second", "personal")
    g = store.create("gamma", "third", "work, Workshop")

    assert [x.id for x in store.filter_by_tag("work")] == [a.id, g.id]
    assert store.filter_by_tag("Work") == []
    assert store.filter_by_tag("wor") == []
    assert [x.id for x in store.filter_by_tag("")] == [a.id, b.id, g.id]
    assert [x.id for x in store.filter_by_tag(None)] == [a.id, b.id, g.id]

def test_filter_returns_a_copy(store):
    store.create("alpha", "first", "")
    store.filter_by_tag("").clear()
    assert len(store) == 1

def test_sort_by_recency_puts_last_touched_first(store):
    a = store.create("alpha", "a", "")
    b = store.create("beta", "b", "")
    c = store.create("gamma", "c", "")
    store.update(a.id, "alpha", "a2", "")

    store.sort_by_recency()
    assert [x.title for x in store.blogs] == ["alpha", "gamma", "beta"]
    stamps = [x.updated_at for x in store.blogs]
    assert stamps == sorted(stamps, reverse=True)
    assert b in store.blogs and c in store.blogs

def test_sort_keeps_ties_in_place_and_invalid_dates_last(storage):
    storage.blobs["blogs"] = json.dumps([
        {"id": 1, "title": "broken", "content": "x", "tags": [], "createdAt": None, "updatedAt": "nope"},
    ])
    store = BlogStore(storage, key="blogs", clock=TickingClock(step=timedelta(0)))
    store.create("first", "x", "")
    store.create("second", "x", "")

    store.sort_by_recency()
    assert [x.title for x in store.blogs] == ["first", "second", "broken"]

def test_update_changes_fields_and_timestamp(store):
    n = store.create("draft", "hello", "temp")
    created, updated = n.created_at, n.updated_at

    result = store.update(n.id, "final", "world", "Work, ideas")
    assert result is n
    assert (n.title, n.content, n.tags) == ("final", "world", ["Work", "ideas"])
    assert n.created_at == created
    assert n.updated_at > updated
    assert n.updated_at >= n.created_at

def test_update_unknown_id_is_silent_noop(store, storage):
    store.create("draft", "hello", "")
    snapshot = storage.blobs["blogs"]
    assert store.update(12345, "x", "y", "z") is None
    assert storage.blobs["blogs"] == snapshot
    assert len(store) == 1

def test_all_tags(store):
    store.create("a", "a", "rust, go")
    store.create("b", "b", "go, web")
    assert store.all_tags() == ["go", "rust", "web"]

def test_invalid_dates_sort_below_the_earliest_valid_date(storage):
    storage.blobs["blogs"] = json.dumps([
        {"id": 2, "title": "broken", "content": "x", "tags": [], "createdAt": None, "updatedAt": "nope"},
        {"id": 1, "title": "ancient", "content": "x", "tags": [],
         "createdAt": "0001-01-01T00:00:00Z", "updatedAt": "0001-01-01T00:00:00Z"},
    ])
    store = BlogStore(storage, key="blogs")
    store.sort_by_recency()
    assert [x.id for x in store.blogs] == [1, 2]
