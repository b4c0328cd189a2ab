"""
Shared fixtures: an in-memory database per test and an app bound to it.

Seed helpers open a short-lived session, commit, and close it again so
they never hold a transaction open while the app handles a request.
"""
import pytest
from fastapi.testclient import TestClient

from apps.blog import config
from apps.blog.main import create_app
from apps.blog.models import Author, Comment, Post
from apps.shared.database import Database

TEST_DATABASE_URL = config.TEST_DATABASE_URL


@pytest.fixture
def database():
    db = Database.connect(TEST_DATABASE_URL)
    db.create_all()
    yield db
    db.drop_all()
    db.dispose()


@pytest.fixture
def client(database):
    app = create_app(database)
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def make_author(database):
    """Insert an author, return its id."""

    def _make(first_name="Ada", last_name="Lovelace", user_name="ada"):
        with database.SessionLocal() as session:
            author = Author(first_name=first_name, last_name=last_name, user_name=user_name)
            session.add(author)
            session.commit()
            return author.id

    return _make


@pytest.fixture
def make_post(database):
    """Insert a post (optionally with comments), return its id."""

    def _make(author_id, title="Hello", content="World", comments=()):
        with database.SessionLocal() as session:
            post = Post(title=title, content=content, author_id=author_id)
            post.comments = [
                Comment(content=text, position=index) for index, text in enumerate(comments)
            ]
            session.add(post)
            session.commit()
            return post.id

    return _make


@pytest.fixture
def stored_post(database):
    """Read a post back as a plain dict, or None."""

    def _fetch(post_id):
        with database.SessionLocal() as session:
            post = session.query(Post).filter(Post.id == post_id).first()
            if post is None:
                return None
            return {
                "id": post.id,
                "title": post.title,
                "content": post.content,
                "author_id": post.author_id,
                "comments": [comment.content for comment in post.comments],
            }

    return _fetch


@pytest.fixture
def count_rows(database):
    def _count(model):
        with database.SessionLocal() as session:
            return session.query(model).count()

    return _count
