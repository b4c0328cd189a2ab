"""
Blog database models.

Three tables:
1. blog_authors  - people who write posts, userName is unique
2. blog_posts    - posts, each referencing exactly one author
3. blog_comments - comments owned by a post, kept in insertion order

Posts reference authors by id only. Loading the author is an explicit
step in the repository, never a side effect of querying posts.
"""
from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey, func
from sqlalchemy.orm import relationship

from apps.shared.database import Base, new_id


class Author(Base):
    __tablename__ = "blog_authors"

    id = Column(String(32), primary_key=True, default=new_id)
    first_name = Column("firstName", String(100))
    last_name = Column("lastName", String(100))
    user_name = Column("userName", String(100), unique=True, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    posts = relationship(
        "Post",
        back_populates="author",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )


class Post(Base):
    """
    A blog post.

    Only title and content change after creation; author and comments
    are fixed by the API.
    """
    __tablename__ = "blog_posts"

    # Insertion order; the public id is random
    seq = Column(Integer, primary_key=True, autoincrement=True)
    id = Column(String(32), unique=True, nullable=False, index=True, default=new_id)
    title = Column(String(300), nullable=False)
    content = Column(Text)
    author_id = Column(
        String(32),
        ForeignKey("blog_authors.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    author = relationship("Author", back_populates="posts")
    comments = relationship(
        "Comment",
        back_populates="post",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="Comment.position",
    )


class Comment(Base):
    __tablename__ = "blog_comments"

    id = Column(String(32), primary_key=True, default=new_id)
    post_id = Column(
        String(32),
        ForeignKey("blog_posts.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    position = Column(Integer, nullable=False, default=0)
    content = Column(Text)

    post = relationship("Post", back_populates="comments")
