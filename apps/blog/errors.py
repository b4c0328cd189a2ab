"""
Blog service error taxonomy.

Handlers raise these; the exception handlers in apps.blog.main turn them
into JSON responses with the matching status code.
"""


class BlogError(Exception):
    """Base class for errors the blog service reports to callers."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(BlogError):
    """The request is malformed: missing or mismatched fields."""

    status_code = 400


class NotFoundError(BlogError):
    """A referenced entity does not exist."""

    status_code = 404

    def __init__(self, message: str, status_code: int = 404):
        super().__init__(message)
        self.status_code = status_code


class ConflictError(BlogError):
    """A uniqueness rule would be violated (duplicate userName)."""

    status_code = 400


class StorageError(BlogError):
    """The database failed. Details are logged, never returned."""

    status_code = 500

    def __init__(self, operation: str):
        super().__init__(f"{operation} failed")
        self.operation = operation
