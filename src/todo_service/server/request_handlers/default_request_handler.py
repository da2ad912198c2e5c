import logging

from uuid import UUID, uuid4

from todo_service.server.errors import TodoNotFoundError
from todo_service.server.request_handlers.request_handler import RequestHandler
from todo_service.server.todos import TodoStore
from todo_service.types import CreateTodo, Todo, UpdateTodo
from todo_service.utils.telemetry import SpanKind, trace_class


logger = logging.getLogger(__name__)


@trace_class(kind=SpanKind.SERVER)
class DefaultRequestHandler(RequestHandler):
    """Default request handler backed by a `TodoStore`."""

    def __init__(self, todo_store: TodoStore) -> None:
        """Initializes the DefaultRequestHandler.

        Args:
            todo_store: The `TodoStore` holding every todo.
        """
        self.todo_store = todo_store

    async def on_list_todos(self) -> list[Todo]:
        """Default handler for `GET /todos`."""
        return await self.todo_store.list()

    async def on_create_todo(self, params: CreateTodo) -> Todo:
        """Default handler for `POST /todos`.

        Text is stored as given, empty strings included.
        """
        todo = Todo(id=uuid4(), text=params.text, completed=False)
        await self.todo_store.insert(todo)
        logger.debug('Created todo %s', todo.id)
        return todo

    async def on_update_todo(self, todo_id: UUID, params: UpdateTodo) -> Todo:
        """Default handler for `PATCH /todos/{id}`."""
        return await self.todo_store.update(
            todo_id, text=params.text, completed=params.completed
        )

    async def on_delete_todo(self, todo_id: UUID) -> None:
        """Default handler for `DELETE /todos/{id}`."""
        if not await self.todo_store.remove(todo_id):
            raise TodoNotFoundError(todo_id)
