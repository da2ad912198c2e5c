import logging

from typing import Any

from starlette.applications import Starlette

from todo_service.config import Settings
from todo_service.server.apps import TodoStarletteApplication
from todo_service.server.request_handlers import DefaultRequestHandler
from todo_service.server.todos import InMemoryTodoStore, TodoStore


logger = logging.getLogger(__name__)


class TodoServer:
    """Todo server that runs a Starlette application with uvicorn.

    The store is created once here and lives as long as the server object.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        todo_store: TodoStore | None = None,
    ):
        """Initializes the TodoServer."""
        self.settings = settings or Settings()
        self.todo_store = todo_store or InMemoryTodoStore()

    def app(self, **kwargs: Any) -> Starlette:
        """Builds and returns the Starlette application instance."""
        logger.info('Building todo application instance')
        return TodoStarletteApplication(
            http_handler=DefaultRequestHandler(self.todo_store),
            request_timeout=self.settings.request_timeout,
        ).build(**kwargs)

    def start(self, **kwargs: Any) -> None:
        """Starts the server using uvicorn."""
        import uvicorn

        logger.debug(
            'listening on %s:%s', self.settings.host, self.settings.port
        )
        uvicorn.run(
            self.app(),
            host=self.settings.host,
            port=self.settings.port,
            **kwargs,
        )
