import pytest
from fastapi.testclient import TestClient

from blogpad.app import app, get_store


@pytest.fixture()
def client(store):
    app.dependency_overrides[get_store] = lambda: store
    yield TestClient(app)
    app.dependency_overrides.clear()


def test_create_list_and_filter(client):
    r = client.post("/api/blogs", json={"title": " A ", "content": "hello", "tags": "go, rust"})
    assert r.status_code == 201
    created = r.json()
    assert created["title"] == "A"
    assert created["tags"] == ["go", "rust"]
    assert created["created_display"] == created["updated_display"]

    client.post("/api/blogs", json={"title": "B", "content": "world", "tags": "web"})
    titles = [b["title"] for b in client.get("/api/blogs").json()]
    assert titles == ["B", "A"]
    assert [b["title"] for b in client.get("/api/blogs", params={"tag": "rust"}).json()] == ["A"]
    assert client.get("/api/tags").json() == ["go", "rust", "web"]

def test_blank_fields_are_rejected(client, store):
    r = client.post("/api/blogs", json={"title": "", "content": "x"})
    assert r.status_code == 400
    assert len(store) == 0

def test_get_update_delete(client):
    blog_id = client.post("/api/blogs", json={"title": "A", "content": "hello"}).json()["id"]

    r = client.put(f"/api/blogs/{blog_id}", json={"title": "A2", "content": "hello2", "tags": "go"})
    assert r.status_code == 200
    assert r.json()["tags"] == ["go"]
    assert client.get(f"/api/blogs/{blog_id}").json()["title"] == "A2"

    assert client.delete(f"/api/blogs/{blog_id}").json() == {"ok": True, "deleted": True}
    assert client.get(f"/api/blogs/{blog_id}").status_code == 404
    assert client.delete(f"/api/blogs/{blog_id}").json()["deleted"] is False

def test_update_unknown_blog_is_404(client):
    r = client.put("/api/blogs/1", json={"title": "x", "content": "y"})
    assert r.status_code == 404

def test_persist_failure_is_reported(client, store, storage):
    storage.fail = True
    r = client.post("/api/blogs", json={"title": "A", "content": "hello"})
    assert r.status_code == 500
    assert "quota exceeded" in r.json()["detail"]
    assert len(store) == 0

def test_index_page(client):
    r = client.get("/")
    assert r.status_code == 200
    assert 'id="blog-form"' in r.text
    assert "escapeHtml" in r.text
