"""
Public JSON shapes for stored blog rows.

Everything here is a pure function of its arguments: no session access,
no lazy loading beyond attributes already on the objects passed in.
"""
from typing import Optional

from apps.blog.models import Author, Post


def author_display_name(author: Optional[Author]) -> str:
    """"First Last", trimmed. Empty string when the author is missing."""
    if author is None:
        return ""
    first = author.first_name or ""
    last = author.last_name or ""
    return f"{first} {last}".strip()


def project_post(post: Post, author: Optional[Author]) -> dict:
    """Convert a post and its resolved author to the API representation."""
    return {
        "id": post.id,
        "author": author_display_name(author),
        "content": post.content,
        "title": post.title,
        "comments": [{"content": comment.content} for comment in post.comments],
    }


def project_post_update(post: Post) -> dict:
    return {
        "id": post.id,
        "title": post.title,
        "content": post.content,
    }


def project_author(author: Author) -> dict:
    return {
        "id": author.id,
        "name": author_display_name(author),
        "userName": author.user_name,
    }
