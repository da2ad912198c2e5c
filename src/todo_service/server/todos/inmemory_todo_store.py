import logging

from uuid import UUID

from todo_service.server.errors import TodoNotFoundError
from todo_service.server.todos.todo_store import TodoStore
from todo_service.types import Todo
from todo_service.utils.rwlock import ReadWriteLock


logger = logging.getLogger(__name__)


class InMemoryTodoStore(TodoStore):
    """In-memory implementation of TodoStore.

    Reads share a readers/writer lock and writes take it exclusively. Records
    are copied on the way in and out so callers never hold a reference to
    the stored object.
    """

    def __init__(self) -> None:
        logger.debug('Initializing InMemoryTodoStore')
        self.todos: dict[UUID, Todo] = {}
        self.lock = ReadWriteLock()

    async def list(self) -> list[Todo]:
        async with self.lock.read():
            logger.debug('Listing %d todos', len(self.todos))
            return [todo.model_copy() for todo in self.todos.values()]

    async def insert(self, todo: Todo) -> None:
        async with self.lock.write():
            self.todos[todo.id] = todo.model_copy()
            logger.info('Todo %s saved successfully.', todo.id)

    async def get(self, todo_id: UUID) -> Todo | None:
        async with self.lock.read():
            logger.debug('Attempting to get todo with id: %s', todo_id)
            todo = self.todos.get(todo_id)
            if todo:
                logger.debug('Todo %s retrieved successfully.', todo_id)
                return todo.model_copy()
            logger.debug('Todo %s not found in store.', todo_id)
            return None

    async def update(
        self,
        todo_id: UUID,
        text: str | None = None,
        completed: bool | None = None,
    ) -> Todo:
        # Lookup and write share one exclusive section so concurrent updates
        # or deletes of the same id cannot interleave.
        async with self.lock.write():
            logger.debug('Attempting to update todo with id: %s', todo_id)
            todo = self.todos.get(todo_id)
            if todo is None:
                logger.debug('Todo %s not found in store.', todo_id)
                raise TodoNotFoundError(todo_id)

            changes: dict[str, str | bool] = {}
            if text is not None:
                changes['text'] = text
            if completed is not None:
                changes['completed'] = completed

            updated = todo.model_copy(update=changes)
            self.todos[todo_id] = updated
            logger.info(
                'Todo %s updated successfully (fields: %s).',
                todo_id,
                ', '.join(changes) or 'none',
            )
            return updated.model_copy()

    async def remove(self, todo_id: UUID) -> bool:
        async with self.lock.write():
            logger.debug('Attempting to delete todo with id: %s', todo_id)
            if todo_id in self.todos:
                del self.todos[todo_id]
                logger.info('Todo %s deleted successfully.', todo_id)
                return True
            logger.warning(
                'Attempted to delete nonexistent todo with id: %s', todo_id
            )
            return False
