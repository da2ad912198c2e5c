"""Request handler components for the todo server."""

from todo_service.server.request_handlers.default_request_handler import (
    DefaultRequestHandler,
)
from todo_service.server.request_handlers.request_handler import RequestHandler


__all__ = [
    'DefaultRequestHandler',
    'RequestHandler',
]
