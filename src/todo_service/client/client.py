import json

from typing import Any
from uuid import UUID

import httpx

from pydantic import ValidationError

from todo_service.client.errors import (
    TodoClientHTTPError,
    TodoClientJSONError,
    TodoClientNotFoundError,
)
from todo_service.types import CreateTodo, Todo, UpdateTodo
from todo_service.utils.telemetry import SpanKind, trace_class


@trace_class(kind=SpanKind.CLIENT)
class TodoClient:
    """Async client for the todo HTTP service."""

    def __init__(
        self,
        httpx_client: httpx.AsyncClient,
        base_url: str,
        todos_path: str = '/todos',
    ):
        """Initializes the TodoClient.

        Args:
            httpx_client: An async HTTP client instance (e.g., httpx.AsyncClient).
            base_url: The base URL of the todo service.
            todos_path: The path of the todo collection, relative to the base URL.
        """
        self.url = f'{base_url.rstrip("/")}/{todos_path.strip("/")}'
        self.httpx_client = httpx_client

    async def list_todos(
        self, *, http_kwargs: dict[str, Any] | None = None
    ) -> list[Todo]:
        """Fetches every todo.

        Raises:
            TodoClientHTTPError: If an HTTP error occurs during the request.
            TodoClientJSONError: If the response is not a list of todos.
        """
        response = await self._send('GET', self.url, http_kwargs=http_kwargs)
        body = self._json(response)
        if not isinstance(body, list):
            raise TodoClientJSONError(f'Expected a JSON array, got {body!r}')
        try:
            return [Todo.model_validate(item) for item in body]
        except ValidationError as e:
            raise TodoClientJSONError(str(e)) from e

    async def create_todo(
        self, text: str, *, http_kwargs: dict[str, Any] | None = None
    ) -> Todo:
        """Creates a todo with the given text.

        Raises:
            TodoClientHTTPError: If an HTTP error occurs during the request.
            TodoClientJSONError: If the response is not a valid todo.
        """
        response = await self._send(
            'POST',
            self.url,
            body=CreateTodo(text=text).model_dump(mode='json'),
            http_kwargs=http_kwargs,
        )
        return self._todo(response)

    async def update_todo(
        self,
        todo_id: UUID,
        *,
        text: str | None = None,
        completed: bool | None = None,
        http_kwargs: dict[str, Any] | None = None,
    ) -> Todo:
        """Changes the given fields of a todo and returns the result.

        Fields left as None are not sent and stay unchanged on the server.

        Raises:
            TodoClientNotFoundError: If the todo does not exist.
            TodoClientHTTPError: If another HTTP error occurs.
            TodoClientJSONError: If the response is not a valid todo.
        """
        payload = UpdateTodo(text=text, completed=completed).model_dump(
            mode='json', exclude_none=True
        )
        response = await self._send(
            'PATCH',
            f'{self.url}/{todo_id}',
            body=payload,
            http_kwargs=http_kwargs,
            todo_id=todo_id,
        )
        return self._todo(response)

    async def delete_todo(
        self, todo_id: UUID, *, http_kwargs: dict[str, Any] | None = None
    ) -> None:
        """Deletes a todo.

        Raises:
            TodoClientNotFoundError: If the todo does not exist.
            TodoClientHTTPError: If another HTTP error occurs.
        """
        await self._send(
            'DELETE',
            f'{self.url}/{todo_id}',
            http_kwargs=http_kwargs,
            todo_id=todo_id,
        )

    async def _send(
        self,
        method: str,
        url: str,
        body: dict[str, Any] | None = None,
        http_kwargs: dict[str, Any] | None = None,
        todo_id: UUID | None = None,
    ) -> httpx.Response:
        """Sends a request and raises for non-success statuses.

        Args:
            method: The HTTP method.
            url: The absolute request URL.
            body: Optional JSON body.
            http_kwargs: Optional dictionary of keyword arguments to pass to the
                underlying httpx request.
            todo_id: The todo addressed by `url`, if any. A 404 for it is
                raised as `TodoClientNotFoundError`.

        Returns:
            The successful `httpx.Response`.

        Raises:
            TodoClientNotFoundError: If `todo_id` is given and the server
                answers 404.
            TodoClientHTTPError: If any other HTTP error occurs.
        """
        try:
            response = await self.httpx_client.request(
                method, url, json=body, **(http_kwargs or {})
            )
            response.raise_for_status()
            return response
        except httpx.HTTPStatusError as e:
            if e.response.status_code == 404 and todo_id is not None:
                raise TodoClientNotFoundError(str(todo_id), str(e)) from e
            raise TodoClientHTTPError(e.response.status_code, str(e)) from e
        except httpx.RequestError as e:
            raise TodoClientHTTPError(
                503, f'Network communication error: {e}'
            ) from e

    def _json(self, response: httpx.Response) -> Any:
        try:
            return response.json()
        except json.JSONDecodeError as e:
            raise TodoClientJSONError(str(e)) from e

    def _todo(self, response: httpx.Response) -> Todo:
        try:
            return Todo.model_validate(self._json(response))
        except ValidationError as e:
            raise TodoClientJSONError(str(e)) from e
