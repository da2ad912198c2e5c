"""Pydantic models for task records and the request bodies that touch them."""

from uuid import UUID

from pydantic import BaseModel, ConfigDict


class Todo(BaseModel):
    """A single task record held by the todo store."""

    id: UUID
    """Server-assigned identifier, immutable once created."""
    text: str
    completed: bool = False


class CreateTodo(BaseModel):
    """Body of a `POST /todos` request."""

    model_config = ConfigDict(strict=True)

    text: str


class UpdateTodo(BaseModel):
    """Body of a `PATCH /todos/{id}` request.

    Fields left unset (or null) are not changed on the stored record. Values
    of the wrong JSON type are rejected rather than coerced.
    """

    model_config = ConfigDict(strict=True)

    text: str | None = None
    completed: bool | None = None
