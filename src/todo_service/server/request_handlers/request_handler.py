from abc import ABC, abstractmethod
from uuid import UUID

from todo_service.types import CreateTodo, Todo, UpdateTodo


class RequestHandler(ABC):
    """Todo request handler interface.

    This interface defines the operations behind the todo HTTP routes. The
    HTTP layer takes care of decoding bodies and encoding results.
    """

    @abstractmethod
    async def on_list_todos(self) -> list[Todo]:
        """Handles `GET /todos`.

        Returns:
            Every stored todo, in no particular order.
        """

    @abstractmethod
    async def on_create_todo(self, params: CreateTodo) -> Todo:
        """Handles `POST /todos`.

        Args:
            params: The decoded request body.

        Returns:
            The newly created todo.
        """

    @abstractmethod
    async def on_update_todo(self, todo_id: UUID, params: UpdateTodo) -> Todo:
        """Handles `PATCH /todos/{id}`.

        Args:
            todo_id: The id taken from the request path.
            params: The fields to change; unset fields are left alone.

        Returns:
            The full todo after the update.

        Raises:
            TodoNotFoundError: If `todo_id` is not in the store.
        """

    @abstractmethod
    async def on_delete_todo(self, todo_id: UUID) -> None:
        """Handles `DELETE /todos/{id}`.

        Args:
            todo_id: The id taken from the request path.

        Raises:
            TodoNotFoundError: If `todo_id` is not in the store.
        """
