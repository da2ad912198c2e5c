import json
import logging

from typing import Any, TypeVar
from uuid import UUID

from pydantic import BaseModel, ValidationError
from starlette.applications import Starlette
from starlette.middleware import Middleware
from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from starlette.routing import Route

from todo_service.config import DEFAULT_REQUEST_TIMEOUT
from todo_service.server.errors import TodoNotFoundError
from todo_service.server.middleware import (
    RequestTracingMiddleware,
    TimeoutMiddleware,
    unhandled_error_response,
)
from todo_service.server.request_handlers.request_handler import RequestHandler
from todo_service.types import CreateTodo, UpdateTodo


logger = logging.getLogger(__name__)

BodyT = TypeVar('BodyT', bound=BaseModel)


class InvalidBodyError(Exception):
    """Raised when a request body is not valid JSON for the expected model."""

    def __init__(self, detail: Any):
        self.detail = detail
        super().__init__(f'Invalid request body: {detail}')


class TodoStarletteApplication:
    """A Starlette application serving the todo CRUD endpoints.

    Decodes JSON bodies into the pydantic request models, dispatches to the
    `RequestHandler`, and encodes results and errors as HTTP responses.
    """

    def __init__(
        self,
        http_handler: RequestHandler,
        request_timeout: float = DEFAULT_REQUEST_TIMEOUT,
    ):
        """Initializes the TodoStarletteApplication.

        Args:
            http_handler: The handler instance performing the todo operations.
            request_timeout: Seconds a request may run before a 408 is sent.
        """
        self.handler = http_handler
        self.request_timeout = request_timeout

    async def _parse_body(self, request: Request, model: type[BodyT]) -> BodyT:
        try:
            body = await request.json()
        except (json.decoder.JSONDecodeError, UnicodeDecodeError) as e:
            raise InvalidBodyError(str(e)) from e
        try:
            return model.model_validate(body)
        except ValidationError as e:
            raise InvalidBodyError(json.loads(e.json())) from e

    def _invalid_body_response(self, error: InvalidBodyError) -> JSONResponse:
        logger.warning('Rejected request body: %s', error.detail)
        return JSONResponse(
            {'error': 'Invalid request body', 'detail': error.detail},
            status_code=422,
        )

    def _not_found_response(self, error: TodoNotFoundError) -> Response:
        logger.warning('%s', error)
        return Response(status_code=404)

    async def _handle_list_todos(self, request: Request) -> JSONResponse:
        """Handles `GET /todos`: every todo as a JSON array."""
        todos = await self.handler.on_list_todos()
        return JSONResponse([todo.model_dump(mode='json') for todo in todos])

    async def _handle_create_todo(self, request: Request) -> Response:
        """Handles `POST /todos`: 201 with the created todo."""
        try:
            params = await self._parse_body(request, CreateTodo)
        except InvalidBodyError as e:
            return self._invalid_body_response(e)

        todo = await self.handler.on_create_todo(params)
        return JSONResponse(todo.model_dump(mode='json'), status_code=201)

    async def _handle_update_todo(self, request: Request) -> Response:
        """Handles `PATCH /todos/{id}`: 200 with the updated todo, or 404."""
        todo_id: UUID = request.path_params['todo_id']
        try:
            params = await self._parse_body(request, UpdateTodo)
            todo = await self.handler.on_update_todo(todo_id, params)
        except InvalidBodyError as e:
            return self._invalid_body_response(e)
        except TodoNotFoundError as e:
            return self._not_found_response(e)
        return JSONResponse(todo.model_dump(mode='json'))

    async def _handle_delete_todo(self, request: Request) -> Response:
        """Handles `DELETE /todos/{id}`: 204 when deleted, 404 otherwise."""
        todo_id: UUID = request.path_params['todo_id']
        try:
            await self.handler.on_delete_todo(todo_id)
        except TodoNotFoundError as e:
            return self._not_found_response(e)
        return Response(status_code=204)

    def routes(self, todos_url: str = '/todos') -> list[Route]:
        """Returns the Starlette Routes for the todo endpoints.

        Args:
            todos_url: The URL path of the todo collection. Single todos live
              at ``{todos_url}/{id}``, where the id must be a UUID.

        Returns:
            A list of Starlette Route objects.
        """
        item_url = f'{todos_url}/{{todo_id:uuid}}'
        return [
            Route(
                todos_url,
                self._handle_list_todos,
                methods=['GET'],
                name='list_todos',
            ),
            Route(
                todos_url,
                self._handle_create_todo,
                methods=['POST'],
                name='create_todo',
            ),
            Route(
                item_url,
                self._handle_update_todo,
                methods=['PATCH'],
                name='update_todo',
            ),
            Route(
                item_url,
                self._handle_delete_todo,
                methods=['DELETE'],
                name='delete_todo',
            ),
        ]

    def build(self, todos_url: str = '/todos', **kwargs: Any) -> Starlette:
        """Builds and returns the Starlette application instance.

        The middleware chain, outermost first, is: unhandled-error mapping
        (500), request timeout (408), request tracing.

        Args:
            todos_url: The URL path of the todo collection.
            **kwargs: Additional keyword arguments to pass to the Starlette
              constructor. Routes, middleware and exception handlers given
              here are kept alongside the todo ones.

        Returns:
            A configured Starlette application instance.
        """
        app_routes = self.routes(todos_url)
        if 'routes' in kwargs:
            kwargs['routes'].extend(app_routes)
        else:
            kwargs['routes'] = app_routes

        kwargs['middleware'] = [
            Middleware(TimeoutMiddleware, timeout=self.request_timeout),
            Middleware(RequestTracingMiddleware),
            *kwargs.get('middleware', []),
        ]
        kwargs['exception_handlers'] = {
            Exception: unhandled_error_response,
            **kwargs.get('exception_handlers', {}),
        }

        return Starlette(**kwargs)
