"""
Integration tests for the /posts resource against an in-memory database.
"""
import logging

import pytest

from apps.blog.models import Post

POST_KEYS = {"id", "author", "content", "title", "comments"}


# ──────────────────────────────────────────────────────────────────────────────
# GET /posts
# ──────────────────────────────────────────────────────────────────────────────

def test_list_posts_empty(client):
    response = client.get("/posts")
    assert response.status_code == 200
    assert response.json() == []


def test_list_posts_returns_every_post(client, make_author, make_post):
    ada = make_author()
    grace = make_author("Grace", "Hopper", "grace")
    for i in range(4):
        make_post(ada, title=f"Ada {i}")
    make_post(grace, title="Grace", comments=["nice", "thanks"])

    response = client.get("/posts")
    assert response.status_code == 200
    posts = response.json()
    assert len(posts) == 5
    for post in posts:
        assert set(post) == POST_KEYS

    by_title = {post["title"]: post for post in posts}
    assert by_title["Ada 0"]["author"] == "Ada Lovelace"
    assert by_title["Grace"]["author"] == "Grace Hopper"
    assert by_title["Grace"]["comments"] == [{"content": "nice"}, {"content": "thanks"}]


# ──────────────────────────────────────────────────────────────────────────────
# GET /posts/{id}
# ──────────────────────────────────────────────────────────────────────────────

def test_get_post(client, make_author, make_post):
    post_id = make_post(make_author(), title="Hi", content="World", comments=["c1"])

    response = client.get(f"/posts/{post_id}")
    assert response.status_code == 200
    assert response.json() == {
        "id": post_id,
        "author": "Ada Lovelace",
        "content": "World",
        "title": "Hi",
        "comments": [{"content": "c1"}],
    }


def test_get_missing_post_is_404(client):
    response = client.get("/posts/does-not-exist")
    assert response.status_code == 404
    assert response.json() == {"error": "Post not found"}


# ──────────────────────────────────────────────────────────────────────────────
# POST /posts
# ──────────────────────────────────────────────────────────────────────────────

def test_create_post(client, make_author, stored_post):
    author_id = make_author()

    response = client.post(
        "/posts", json={"title": "Hi", "content": "World", "author_id": author_id}
    )
    assert response.status_code == 201
    body = response.json()
    assert body["author"] == "Ada Lovelace"
    assert body["title"] == "Hi"
    assert body["content"] == "World"
    assert body["comments"] == []

    stored = stored_post(body["id"])
    assert stored["author_id"] == author_id
    assert stored["title"] == "Hi"


@pytest.mark.parametrize("missing", ["title", "content", "author_id"])
def test_create_post_missing_field(client, make_author, count_rows, missing):
    payload = {"title": "Hi", "content": "World", "author_id": make_author()}
    del payload[missing]

    response = client.post("/posts", json=payload)
    assert response.status_code == 400
    assert response.json() == {"error": f"Missing `{missing}` in request body"}
    assert count_rows(Post) == 0


def test_create_post_unknown_author(client, count_rows):
    response = client.post(
        "/posts", json={"title": "Hi", "content": "World", "author_id": "nobody"}
    )
    assert response.status_code == 400
    assert response.json() == {"error": "Author not found"}
    assert count_rows(Post) == 0


def test_create_post_without_body(client):
    response = client.post("/posts")
    assert response.status_code == 400


def test_create_post_with_invalid_json(client):
    response = client.post(
        "/posts", content=b"{not json", headers={"Content-Type": "application/json"}
    )
    assert response.status_code == 400
    assert "error" in response.json()


def test_create_then_get_scenario(client):
    """Create an author and a post through the API, then read the post back."""
    author = client.post(
        "/authors", json={"firstName": "Ada", "lastName": "Lovelace", "userName": "ada"}
    )
    assert author.status_code == 201

    created = client.post(
        "/posts", json={"title": "Hi", "content": "World", "author_id": author.json()["id"]}
    )
    assert created.status_code == 201
    assert created.json()["author"] == "Ada Lovelace"

    fetched = client.get(f"/posts/{created.json()['id']}")
    assert fetched.status_code == 200
    assert fetched.json()["author"] == "Ada Lovelace"


# ──────────────────────────────────────────────────────────────────────────────
# PUT /posts/{id}
# ──────────────────────────────────────────────────────────────────────────────

def test_update_post(client, make_author, make_post, stored_post):
    author_id = make_author()
    post_id = make_post(author_id, title="Old", content="Old body", comments=["keep me"])
    before = stored_post(post_id)

    response = client.put(
        f"/posts/{post_id}",
        json={
            "id": post_id,
            "title": "New",
            "content": "New body",
            "author_id": "someone-else",
            "comments": [{"content": "injected"}],
        },
    )
    assert response.status_code == 200
    assert response.json() == {"id": post_id, "title": "New", "content": "New body"}

    after = stored_post(post_id)
    assert after["title"] == "New"
    assert after["content"] == "New body"
    assert after["author_id"] == before["author_id"]
    assert after["comments"] == before["comments"] == ["keep me"]


def test_update_only_title(client, make_author, make_post, stored_post):
    post_id = make_post(make_author(), title="Old", content="Body")

    response = client.put(f"/posts/{post_id}", json={"id": post_id, "title": "New"})
    assert response.status_code == 200
    assert stored_post(post_id)["content"] == "Body"


def test_update_id_mismatch_changes_nothing(client, make_author, make_post, stored_post):
    post_id = make_post(make_author(), title="Old")

    response = client.put(f"/posts/{post_id}", json={"id": "other", "title": "New"})
    assert response.status_code == 400
    assert response.json() == {
        "error": "Request path id and request body id values must match"
    }
    assert stored_post(post_id)["title"] == "Old"


def test_update_missing_post_is_404(client):
    response = client.put("/posts/ghost", json={"id": "ghost", "title": "New"})
    assert response.status_code == 404
    assert response.json() == {"error": "Post not found"}


# ──────────────────────────────────────────────────────────────────────────────
# DELETE /posts/{id}
# ──────────────────────────────────────────────────────────────────────────────

def test_delete_post_twice(client, make_author, make_post, stored_post):
    post_id = make_post(make_author(), comments=["gone too"])

    first = client.delete(f"/posts/{post_id}")
    assert first.status_code == 204
    assert first.content == b""
    assert stored_post(post_id) is None

    second = client.delete(f"/posts/{post_id}")
    assert second.status_code == 204
    assert stored_post(post_id) is None


def test_delete_post_removes_comments(client, make_author, make_post, database):
    from apps.blog.models import Comment

    post_id = make_post(make_author(), comments=["a", "b"])
    client.delete(f"/posts/{post_id}")

    with database.SessionLocal() as session:
        assert session.query(Comment).filter(Comment.post_id == post_id).count() == 0


# ──────────────────────────────────────────────────────────────────────────────
# Errors and routing
# ──────────────────────────────────────────────────────────────────────────────

def test_unmatched_route(client):
    response = client.get("/nothing/here")
    assert response.status_code == 404
    assert response.json() == {"message": "Not Found"}


def test_unsupported_method_is_unmatched(client):
    response = client.patch("/posts")
    assert response.status_code == 404
    assert response.json() == {"message": "Not Found"}


def test_storage_failure_is_generic_500(client, database, caplog):
    database.drop_all()

    with caplog.at_level(logging.ERROR, logger="apps.shared.errors"):
        response = client.get("/posts")

    assert response.status_code == 500
    body = response.json()
    assert body["error"] == "List posts failed. Please try again later."
    assert len(body["error_id"]) == 8
    assert "blog_posts" not in response.text
    assert body["error_id"] in caplog.text

    # Recreate so the fixture teardown has tables to drop
    database.create_all()


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok", "service": "blog", "database": "connected"}


def test_requests_are_access_logged(client, caplog):
    with caplog.at_level(logging.INFO, logger="access"):
        client.get("/posts")
    assert '"GET /posts HTTP/1.1" 200' in caplog.text


def test_list_posts_in_creation_order(client, make_author):
    author_id = make_author()
    titles = [f"t{i:02d}" for i in range(20)]
    for title in titles:
        created = client.post(
            "/posts", json={"title": title, "content": "c", "author_id": author_id}
        )
        assert created.status_code == 201

    listed = [post["title"] for post in client.get("/posts").json()]
    assert listed == titles


def test_unexpected_error_is_generic_500_and_access_logged(database, monkeypatch, caplog):
    from fastapi.testclient import TestClient

    from apps.blog import repository
    from apps.blog.main import create_app

    def broken(db):
        raise RuntimeError("secret internals")

    monkeypatch.setattr(repository, "find_all_posts", broken)

    with TestClient(create_app(database), raise_server_exceptions=False) as client:
        with caplog.at_level(logging.INFO, logger="access"):
            response = client.get("/posts")

    assert response.status_code == 500
    body = response.json()
    assert body["error"] == "An unexpected server error occurred. Please try again later."
    assert len(body["error_id"]) == 8
    assert "secret internals" not in response.text
    assert '"GET /posts HTTP/1.1" 500' in caplog.text
