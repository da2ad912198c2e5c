"""Components for storing todos within the todo server."""

from todo_service.server.todos.inmemory_todo_store import InMemoryTodoStore
from todo_service.server.todos.todo_store import TodoStore


__all__ = [
    'InMemoryTodoStore',
    'TodoStore',
]
