from abc import ABC, abstractmethod
from uuid import UUID

from todo_service.types import Todo


class TodoStore(ABC):
    """Todo Store interface.

    Defines the methods for storing, updating and removing `Todo` records.
    """

    @abstractmethod
    async def list(self) -> list[Todo]:
        """Returns a snapshot of every todo in the store, in no particular order."""

    @abstractmethod
    async def insert(self, todo: Todo) -> None:
        """Adds a todo, replacing any record with the same id."""

    @abstractmethod
    async def get(self, todo_id: UUID) -> Todo | None:
        """Retrieves a todo from the store by ID."""

    @abstractmethod
    async def update(
        self,
        todo_id: UUID,
        text: str | None = None,
        completed: bool | None = None,
    ) -> Todo:
        """Applies the supplied fields to a stored todo and returns the result.

        Raises:
            TodoNotFoundError: If no todo with `todo_id` exists.
        """

    @abstractmethod
    async def remove(self, todo_id: UUID) -> bool:
        """Removes a todo by ID, returning whether anything was removed."""
