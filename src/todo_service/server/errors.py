"""Exceptions raised by the todo server components."""

from uuid import UUID


class TodoServerError(Exception):
    """Base exception for todo server errors."""


class TodoNotFoundError(TodoServerError):
    """Exception raised when a todo id is not present in the store."""

    def __init__(self, todo_id: UUID):
        """Initializes the TodoNotFoundError.

        Args:
            todo_id: The id that was looked up.
        """
        self.todo_id = todo_id
        super().__init__(f'Todo not found: {todo_id}')
