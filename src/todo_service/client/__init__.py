"""Client-side components for talking to a todo service."""

from todo_service.client.client import TodoClient
from todo_service.client.errors import (
    TodoClientError,
    TodoClientHTTPError,
    TodoClientJSONError,
    TodoClientNotFoundError,
)


__all__ = [
    'TodoClient',
    'TodoClientError',
    'TodoClientHTTPError',
    'TodoClientJSONError',
    'TodoClientNotFoundError',
]
