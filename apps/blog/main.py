"""
Blog Service API

CRUD endpoints for blog posts and their authors.
"""
import logging
from contextlib import asynccontextmanager
from typing import Any, Optional

from fastapi import FastAPI, APIRouter, Body, Depends, Request, Response, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session
from starlette.exceptions import HTTPException as StarletteHTTPException

from apps.blog import config, repository
from apps.blog.errors import BlogError, NotFoundError, StorageError
from apps.blog.projection import (
    project_author,
    project_post,
    project_post_update,
)
from apps.blog.schemas import AuthorResponse, PostResponse, PostUpdateResponse
from apps.blog.validators import (
    validate_author_create,
    validate_post_create,
    validate_post_update,
)
from apps.shared.access_log import setup_access_log
from apps.shared.cors import setup_cors
from apps.shared.database import Database
from apps.shared.errors import error_response, log_and_sanitize_error

logger = logging.getLogger(__name__)


def get_db(request: Request):
    """Dependency injection for database sessions"""
    yield from request.app.state.database.session()


router = APIRouter(tags=["blog"])


@router.get("/health")
def health(request: Request):
    """Health check endpoint - returns service status and database connectivity"""
    db_connected = request.app.state.database.check_connection()
    return {
        "status": "ok" if db_connected else "degraded",
        "service": "blog",
        "database": "connected" if db_connected else "disconnected",
    }


# ──────────────────────────────────────────────────────────────────────────────
# Posts
# ──────────────────────────────────────────────────────────────────────────────

@router.get("/posts", response_model=list[PostResponse])
def list_posts(db: Session = Depends(get_db)):
    """List all posts with their author's name."""
    posts = repository.find_all_posts(db)
    return [project_post(post, post.author) for post in posts]


@router.get("/posts/{post_id}", response_model=PostResponse)
def get_post(post_id: str, db: Session = Depends(get_db)):
    post = repository.find_post_by_id(db, post_id)
    if post is None:
        raise NotFoundError("Post not found")
    return project_post(post, post.author)


@router.post("/posts", response_model=PostResponse, status_code=201)
def create_post(body: Any = Body(None), db: Session = Depends(get_db)):
    """
    Create a post for an existing author.

    Body: {"title": ..., "content": ..., "author_id": ...}
    Responds 400 when a field is missing or the author does not exist.
    """
    data = validate_post_create(body)

    author = repository.find_author_by_id(db, data.author_id)
    if author is None:
        logger.warning(f"Author not found: {data.author_id}")
        raise NotFoundError("Author not found", status_code=status.HTTP_400_BAD_REQUEST)

    post = repository.create_post(db, title=data.title, content=data.content, author=author)
    return project_post(post, author)


@router.put("/posts/{post_id}", response_model=PostUpdateResponse)
def update_post(post_id: str, body: Any = Body(None), db: Session = Depends(get_db)):
    """
    Update title and/or content of a post.
    The body must repeat the post id; other fields are ignored.
    """
    changes = validate_post_update(post_id, body)

    post = repository.update_post_returning_new(db, post_id, changes)
    if post is None:
        raise NotFoundError("Post not found")
    return project_post_update(post)


@router.delete("/posts/{post_id}", status_code=204)
def delete_post(post_id: str, db: Session = Depends(get_db)):
    """Delete a post. Unknown ids are not an error."""
    repository.delete_post_by_id(db, post_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# ──────────────────────────────────────────────────────────────────────────────
# Authors
# ──────────────────────────────────────────────────────────────────────────────

@router.get("/authors", response_model=list[AuthorResponse])
def list_authors(db: Session = Depends(get_db)):
    return [project_author(author) for author in repository.find_all_authors(db)]


@router.get("/authors/{author_id}", response_model=AuthorResponse)
def get_author(author_id: str, db: Session = Depends(get_db)):
    author = repository.find_author_by_id(db, author_id)
    if author is None:
        raise NotFoundError("Author not found")
    return project_author(author)


@router.post("/authors", response_model=AuthorResponse, status_code=201)
def create_author(body: Any = Body(None), db: Session = Depends(get_db)):
    """Create an author. userName must be unique."""
    data = validate_author_create(body)
    author = repository.create_author(
        db,
        first_name=data.first_name,
        last_name=data.last_name,
        user_name=data.user_name,
    )
    return project_author(author)


@router.delete("/authors/{author_id}", status_code=204)
def delete_author(author_id: str, db: Session = Depends(get_db)):
    """Delete an author and every post they wrote."""
    repository.delete_author_by_id(db, author_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# ──────────────────────────────────────────────────────────────────────────────
# Error handlers
# ──────────────────────────────────────────────────────────────────────────────

async def blog_error_handler(request: Request, exc: BlogError):
    if isinstance(exc, StorageError):
        message, error_id = log_and_sanitize_error(exc, exc.operation)
        return error_response(message, exc.status_code, error_id=error_id)
    return error_response(exc.message, exc.status_code)


async def request_validation_handler(request: Request, exc: RequestValidationError):
    first = exc.errors()[0] if exc.errors() else {}
    message = first.get("msg") or "Invalid request"
    logger.warning(f"Rejected request to {request.url.path}: {message}")
    return error_response(message, status.HTTP_400_BAD_REQUEST)


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    # Known path with an unsupported method counts as an unmatched route
    if exc.status_code in (status.HTTP_404_NOT_FOUND, status.HTTP_405_METHOD_NOT_ALLOWED):
        return JSONResponse(status_code=404, content={"message": "Not Found"})
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


async def unexpected_exception_handler(request: Request, exc: Exception):
    message, error_id = log_and_sanitize_error(
        exc,
        f"{request.method} {request.url.path}",
        "An unexpected server error occurred. Please try again later.",
    )
    return error_response(message, status.HTTP_500_INTERNAL_SERVER_ERROR, error_id=error_id)


def create_app(database: Optional[Database] = None) -> FastAPI:
    """
    Build the blog application.

    With `database` given the caller owns the connection. Without it the
    app connects to config.DATABASE_URL on startup and disconnects on shutdown.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        owned = app.state.database is None
        if owned:
            app.state.database = Database.connect(
                config.DATABASE_URL, timeout=config.STORAGE_TIMEOUT_SECONDS
            )
        app.state.database.create_all()
        try:
            yield
        finally:
            if owned:
                app.state.database.dispose()
                app.state.database = None

    app = FastAPI(
        title="Blog Service",
        version="1.0.0",
        description="Blog posts and authors",
        lifespan=lifespan,
    )
    app.state.database = database

    # Setup CORS from shared configuration
    setup_cors(app)
    setup_access_log(app)

    app.add_exception_handler(BlogError, blog_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, unexpected_exception_handler)

    app.include_router(router)
    return app


app = create_app()
