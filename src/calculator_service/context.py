"""
Request context management using ContextVar for async-safe log correlation.
"""

from contextvars import ContextVar
from typing import Optional

# Context variable to store the current request id across async boundaries
current_request_id: ContextVar[Optional[str]] = ContextVar('current_request_id', default=None)


def set_request_id(request_id: str) -> None:
    """Set the current request id in the context."""
    current_request_id.set(request_id)


def get_request_id() -> Optional[str]:
    """Get the current request id from the context."""
    return current_request_id.get()


def clear_request_id() -> None:
    """Clear the current request id from the context."""
    current_request_id.set(None)
