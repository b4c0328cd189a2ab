"""
Request validation for the Blog API.

Runs before any storage call. Key presence is checked on the raw body so
the caller is told which field is missing; value types are then checked
by building the pydantic schema.
"""
import logging
from typing import Any, Iterable

import pydantic

from apps.blog.errors import ValidationError
from apps.blog.schemas import AuthorCreate, PostCreate, PostUpdate

logger = logging.getLogger(__name__)

POST_REQUIRED_FIELDS = ("title", "content", "author_id")
POST_UPDATEABLE_FIELDS = ("title", "content")
AUTHOR_REQUIRED_FIELDS = ("firstName", "lastName", "userName")


def _fail(message: str) -> ValidationError:
    logger.warning(message)
    return ValidationError(message)


def require_object(body: Any) -> dict:
    if not isinstance(body, dict):
        raise _fail("Request body must be a JSON object")
    return body


def require_fields(body: dict, fields: Iterable[str]) -> None:
    """Raise ValidationError naming the first key absent from body."""
    for field in fields:
        if field not in body:
            raise _fail(f"Missing `{field}` in request body")


def _build(schema, body: dict):
    try:
        return schema.model_validate(body)
    except pydantic.ValidationError as e:
        first = e.errors()[0]
        location = ".".join(str(part) for part in first["loc"])
        raise _fail(f"Invalid `{location}` in request body: {first['msg']}") from e


def validate_post_create(body: Any) -> PostCreate:
    body = require_object(body)
    require_fields(body, POST_REQUIRED_FIELDS)
    return _build(PostCreate, body)


def validate_ids_match(path_id: str, body: Any) -> dict:
    """Path id and body id must both be present and equal."""
    body = require_object(body)
    body_id = body.get("id")
    if not (path_id and body_id is not None and str(body_id) == path_id):
        raise _fail("Request path id and request body id values must match")
    return body


def updateable_fields(body: dict) -> dict:
    """Copy only title/content out of body; other keys are ignored."""
    update = _build(PostUpdate, {
        field: body[field] for field in POST_UPDATEABLE_FIELDS if field in body
    })
    changes = update.model_dump(exclude_unset=True)
    if "title" in changes and changes["title"] is None:
        raise _fail("`title` cannot be null")
    return changes


def validate_post_update(path_id: str, body: Any) -> dict:
    body = validate_ids_match(path_id, body)
    return updateable_fields(body)


def validate_author_create(body: Any) -> AuthorCreate:
    body = require_object(body)
    require_fields(body, AUTHOR_REQUIRED_FIELDS)
    return _build(AuthorCreate, body)
