"""
Storage operations for the Blog API.

Every function takes an open session and performs one round trip (plus
the commit for writes). SQLAlchemy failures are rolled back and re-raised
as StorageError so handlers never see driver exceptions.
"""
import logging
from contextlib import contextmanager
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, joinedload, selectinload

from apps.blog.errors import ConflictError, StorageError
from apps.blog.models import Author, Post

logger = logging.getLogger(__name__)


@contextmanager
def storage_operation(db: Session, operation: str):
    """Roll back and wrap any SQLAlchemy error raised inside the block."""
    try:
        yield
    except SQLAlchemyError as e:
        db.rollback()
        raise StorageError(operation) from e


# ──────────────────────────────────────────────────────────────────────────────
# Posts
# ──────────────────────────────────────────────────────────────────────────────

def _posts_with_author():
    return select(Post).options(joinedload(Post.author), selectinload(Post.comments))


def find_all_posts(db: Session) -> list[Post]:
    """All posts, oldest first, with author and comments loaded."""
    with storage_operation(db, "List posts"):
        stmt = _posts_with_author().order_by(Post.seq.asc())
        return list(db.scalars(stmt).unique().all())


def find_post_by_id(db: Session, post_id: str) -> Optional[Post]:
    with storage_operation(db, "Get post"):
        stmt = _posts_with_author().where(Post.id == post_id)
        return db.scalars(stmt).unique().first()


def create_post(db: Session, title: str, content: Optional[str], author: Author) -> Post:
    with storage_operation(db, "Create post"):
        post = Post(title=title, content=content, author_id=author.id)
        db.add(post)
        db.commit()
        db.refresh(post)
        logger.info(f"Created post {post.id} by author {author.id}")
        return post


def update_post_returning_new(db: Session, post_id: str, changes: dict) -> Optional[Post]:
    """
    Apply `changes` to the post and return it as stored afterwards.
    Returns None when no post has that id.
    """
    with storage_operation(db, "Update post"):
        post = db.scalars(select(Post).where(Post.id == post_id)).first()
        if post is None:
            return None

        for key, value in changes.items():
            setattr(post, key, value)

        db.commit()
        db.refresh(post)
        return post


def delete_post_by_id(db: Session, post_id: str) -> bool:
    """Delete the post and its comments. Returns False if it did not exist."""
    with storage_operation(db, "Delete post"):
        post = db.scalars(select(Post).where(Post.id == post_id)).first()
        if post is None:
            return False

        db.delete(post)
        db.commit()
        logger.info(f"Deleted post {post_id}")
        return True


# ──────────────────────────────────────────────────────────────────────────────
# Authors
# ──────────────────────────────────────────────────────────────────────────────

def find_all_authors(db: Session) -> list[Author]:
    with storage_operation(db, "List authors"):
        stmt = select(Author).order_by(Author.created_at.asc(), Author.user_name.asc())
        return list(db.scalars(stmt).all())


def find_author_by_id(db: Session, author_id: str) -> Optional[Author]:
    with storage_operation(db, "Get author"):
        return db.get(Author, author_id)


def find_author_by_username(db: Session, user_name: str) -> Optional[Author]:
    with storage_operation(db, "Get author"):
        return db.scalars(select(Author).where(Author.user_name == user_name)).first()


def create_author(db: Session, first_name: str, last_name: str, user_name: str) -> Author:
    """Insert an author. Raises ConflictError if userName is already taken."""
    if find_author_by_username(db, user_name) is not None:
        raise ConflictError("userName already taken")

    author = Author(first_name=first_name, last_name=last_name, user_name=user_name)
    try:
        db.add(author)
        db.commit()
    except IntegrityError as e:
        # Another request inserted the same userName after our check
        db.rollback()
        raise ConflictError("userName already taken") from e
    except SQLAlchemyError as e:
        db.rollback()
        raise StorageError("Create author") from e

    with storage_operation(db, "Create author"):
        db.refresh(author)
    logger.info(f"Created author {author.id} ({user_name})")
    return author


def delete_author_by_id(db: Session, author_id: str) -> bool:
    """Delete the author together with their posts and comments."""
    with storage_operation(db, "Delete author"):
        author = db.get(Author, author_id)
        if author is None:
            return False

        db.delete(author)
        db.commit()
        logger.info(f"Deleted author {author_id} and their posts")
        return True
