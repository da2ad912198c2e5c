from todo_service.server.errors import TodoNotFoundError, TodoServerError
from todo_service.server.server import TodoServer


__all__ = [
    'TodoNotFoundError',
    'TodoServer',
    'TodoServerError',
]
