"""
Secure Error Handling

Provides utilities for handling errors securely without leaking sensitive information.
"""

import logging
import uuid
from typing import Optional

from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


def log_and_sanitize_error(
    error: Exception,
    context: str,
    user_message: Optional[str] = None
) -> tuple[str, str]:
    """
    Log full error details server-side and return sanitized message for client.

    Args:
        error: The exception that occurred
        context: Description of what operation failed (e.g., "List posts")
        user_message: Optional custom message to show user. If None, uses generic message.

    Returns:
        Tuple of (sanitized_message, error_id) for client response
    """
    # Generate unique error ID for correlation
    error_id = str(uuid.uuid4())[:8]

    # Log full error server-side, with the cause chain when there is one
    cause = error.__cause__ or error
    logger.error(
        f"{context} failed [{error_id}]: {type(cause).__name__}: {str(cause)}",
        exc_info=error,
    )

    if user_message:
        sanitized = user_message
    else:
        sanitized = f"{context} failed. Please try again later."

    return sanitized, error_id


def error_response(message: str, status_code: int, **extra) -> JSONResponse:
    """Consistent error payloads across the API."""
    return JSONResponse(status_code=status_code, content={"error": message, **extra})
