import asyncio

from typing import Any
from unittest import mock
from uuid import UUID, uuid4

import pytest

from starlette.responses import JSONResponse
from starlette.routing import Route
from starlette.testclient import TestClient

from todo_service.server.apps import TodoStarletteApplication
from todo_service.server.errors import TodoNotFoundError
from todo_service.server.request_handlers import (
    DefaultRequestHandler,
    RequestHandler,
)
from todo_service.server.todos import InMemoryTodoStore
from todo_service.types import Todo


# === TEST SETUP ===

MINIMAL_TODO: dict[str, Any] = {
    'id': UUID('c3b8f1a0-1d2e-4f5a-9b6c-7d8e9f0a1b2c'),
    'text': 'buy milk',
    'completed': False,
}


@pytest.fixture
def store() -> InMemoryTodoStore:
    return InMemoryTodoStore()


@pytest.fixture
def app(store: InMemoryTodoStore) -> TodoStarletteApplication:
    return TodoStarletteApplication(DefaultRequestHandler(store))


@pytest.fixture
def client(app: TodoStarletteApplication) -> TestClient:
    """Create a test client with the app."""
    return TestClient(app.build())


@pytest.fixture
def mock_handler() -> mock.AsyncMock:
    return mock.AsyncMock(spec=RequestHandler)


def create(client: TestClient, text: str) -> dict[str, Any]:
    return create_with_body(client, {'text': text})


def create_with_body(client: TestClient, body: dict[str, Any]) -> dict[str, Any]:
    response = client.post('/todos', json=body)
    assert response.status_code == 201
    return response.json()


# === BASIC FUNCTIONALITY TESTS ===


def test_list_todos_empty(client: TestClient):
    response = client.get('/todos')
    assert response.status_code == 200
    assert response.json() == []


def test_create_todo(client: TestClient):
    """Test that POST /todos returns the new todo with a fresh UUID."""
    response = client.post('/todos', json={'text': 'buy milk'})
    assert response.status_code == 201
    data = response.json()
    assert data['text'] == 'buy milk'
    assert data['completed'] is False
    assert UUID(data['id'])
    assert set(data) == {'id', 'text', 'completed'}


def test_create_todo_ignores_client_supplied_fields(client: TestClient):
    supplied_id = str(uuid4())
    data = create_with_body(
        client, {'text': 'x', 'id': supplied_id, 'completed': True}
    )
    assert data['id'] != supplied_id
    assert data['completed'] is False


def test_create_todo_empty_text(client: TestClient):
    assert create(client, '')['text'] == ''


def test_created_todos_are_listed(client: TestClient):
    """Listing returns exactly the created todos, ids all distinct."""
    created = [create(client, f'todo {i}') for i in range(10)]

    response = client.get('/todos')
    assert response.status_code == 200
    listed = response.json()

    assert len({todo['id'] for todo in created}) == 10
    assert sorted(listed, key=lambda t: t['id']) == sorted(
        created, key=lambda t: t['id']
    )


def test_update_todo_completed_only(client: TestClient):
    todo = create(client, 'buy milk')

    response = client.patch(f'/todos/{todo["id"]}', json={'completed': True})

    assert response.status_code == 200
    assert response.json() == {**todo, 'completed': True}


def test_update_todo_text_only(client: TestClient):
    todo = create(client, 'buy milk')
    client.patch(f'/todos/{todo["id"]}', json={'completed': True})

    response = client.patch(f'/todos/{todo["id"]}', json={'text': 'buy oat milk'})

    assert response.status_code == 200
    assert response.json() == {
        'id': todo['id'],
        'text': 'buy oat milk',
        'completed': True,
    }


def test_update_todo_both_fields(client: TestClient):
    todo = create(client, 'buy milk')

    response = client.patch(
        f'/todos/{todo["id"]}', json={'text': 'done', 'completed': True}
    )

    assert response.json() == {'id': todo['id'], 'text': 'done', 'completed': True}


def test_update_todo_empty_body_returns_record_unchanged(client: TestClient):
    todo = create(client, 'buy milk')

    response = client.patch(f'/todos/{todo["id"]}', json={})

    assert response.status_code == 200
    assert response.json() == todo
    assert client.get('/todos').json() == [todo]


def test_update_todo_not_found(client: TestClient):
    """Test that PATCH on an unknown id is a bare 404 and changes nothing."""
    todo = create(client, 'keep me')

    response = client.patch(
        f'/todos/{uuid4()}', json={'text': 'x', 'completed': True}
    )

    assert response.status_code == 404
    assert response.content == b''
    assert client.get('/todos').json() == [todo]


def test_delete_todo_twice(client: TestClient):
    todo = create(client, 'buy milk')

    first = client.delete(f'/todos/{todo["id"]}')
    second = client.delete(f'/todos/{todo["id"]}')

    assert first.status_code == 204
    assert first.content == b''
    assert second.status_code == 404
    assert second.content == b''


def test_delete_todo_not_found(client: TestClient):
    response = client.delete(f'/todos/{uuid4()}')
    assert response.status_code == 404


def test_example_scenario(client: TestClient):
    """Create, complete, delete and list, as a client would."""
    response = client.post('/todos', json={'text': 'buy milk'})
    assert response.status_code == 201
    todo = response.json()
    assert todo == {'id': todo['id'], 'text': 'buy milk', 'completed': False}

    response = client.patch(f'/todos/{todo["id"]}', json={'completed': True})
    assert response.status_code == 200
    assert response.json() == {
        'id': todo['id'],
        'text': 'buy milk',
        'completed': True,
    }

    assert client.delete(f'/todos/{todo["id"]}').status_code == 204

    response = client.get('/todos')
    assert response.status_code == 200
    assert response.json() == []


# === ROUTING AND BODY ERRORS ===


@pytest.mark.parametrize('method', ['patch', 'delete'])
def test_non_uuid_path_is_not_routed(client: TestClient, method: str):
    kwargs = {'json': {'text': 'x'}} if method == 'patch' else {}
    response = getattr(client, method)('/todos/not-a-uuid', **kwargs)
    assert response.status_code == 404


def test_unsupported_method(client: TestClient):
    assert client.put('/todos', json={'text': 'x'}).status_code == 405


def test_create_todo_invalid_json(client: TestClient):
    response = client.post(
        '/todos',
        content=b'{not json',
        headers={'Content-Type': 'application/json'},
    )
    assert response.status_code == 422
    assert response.json()['error'] == 'Invalid request body'
    assert client.get('/todos').json() == []


def test_create_todo_invalid_utf8(client: TestClient):
    response = client.post(
        '/todos',
        content=b'{"text": "\xff"}',
        headers={'Content-Type': 'application/json'},
    )
    assert response.status_code == 422
    assert response.json()['error'] == 'Invalid request body'
    assert client.get('/todos').json() == []


def test_create_todo_non_string_text(client: TestClient):
    response = client.post('/todos', json={'text': 42})
    assert response.status_code == 422
    assert client.get('/todos').json() == []


def test_create_todo_missing_text(client: TestClient):
    response = client.post('/todos', json={})
    assert response.status_code == 422
    detail = response.json()['detail']
    assert detail[0]['loc'] == ['text']


@pytest.mark.parametrize('completed', ['not a bool', 'yes', 'true', 1, 0])
def test_update_todo_wrong_type(client: TestClient, completed: Any):
    todo = create(client, 'buy milk')

    response = client.patch(
        f'/todos/{todo["id"]}', json={'completed': completed}
    )

    assert response.status_code == 422
    assert client.get('/todos').json() == [todo]


# === MIDDLEWARE ===


def test_handler_receives_parsed_path_id(mock_handler: mock.AsyncMock):
    mock_handler.on_update_todo.return_value = Todo(**MINIMAL_TODO)
    client = TestClient(TodoStarletteApplication(mock_handler).build())

    response = client.patch(f'/todos/{MINIMAL_TODO["id"]}', json={'text': 'x'})

    assert response.status_code == 200
    todo_id, params = mock_handler.on_update_todo.call_args.args
    assert todo_id == MINIMAL_TODO['id']
    assert params.text == 'x'
    assert params.completed is None


def test_handler_not_found_maps_to_404(mock_handler: mock.AsyncMock):
    mock_handler.on_delete_todo.side_effect = TodoNotFoundError(
        MINIMAL_TODO['id']
    )
    client = TestClient(TodoStarletteApplication(mock_handler).build())

    response = client.delete(f'/todos/{MINIMAL_TODO["id"]}')

    assert response.status_code == 404


def test_request_timeout(mock_handler: mock.AsyncMock):
    """A handler outliving the timeout yields 408 with no body."""

    async def slow_list() -> list[Todo]:
        await asyncio.sleep(5)
        return []

    mock_handler.on_list_todos.side_effect = slow_list
    client = TestClient(
        TodoStarletteApplication(mock_handler, request_timeout=0.05).build()
    )

    response = client.get('/todos')

    assert response.status_code == 408
    assert response.content == b''


def test_write_before_timeout_is_kept(store: InMemoryTodoStore):
    """A write that landed before the timeout stays in the store."""

    class SlowAfterWriteHandler(DefaultRequestHandler):
        async def on_create_todo(self, params):
            todo = await super().on_create_todo(params)
            await asyncio.sleep(5)
            return todo

    client = TestClient(
        TodoStarletteApplication(
            SlowAfterWriteHandler(store), request_timeout=0.05
        ).build()
    )

    response = client.post('/todos', json={'text': 'committed'})

    assert response.status_code == 408
    listed = client.get('/todos').json()
    assert [todo['text'] for todo in listed] == ['committed']


def test_unhandled_error_maps_to_500(mock_handler: mock.AsyncMock):
    mock_handler.on_list_todos.side_effect = RuntimeError('boom')
    client = TestClient(
        TodoStarletteApplication(mock_handler).build(),
        raise_server_exceptions=False,
    )

    response = client.get('/todos')

    assert response.status_code == 500
    assert response.text == 'Unhandled internal error: boom'


def test_request_tracing_span(client: TestClient):
    span = mock.MagicMock()
    tracer = mock.MagicMock()
    tracer.start_as_current_span.return_value.__enter__.return_value = span
    tracer.start_as_current_span.return_value.__exit__.return_value = False

    with mock.patch(
        'todo_service.server.middleware.get_tracer', return_value=tracer
    ):
        response = client.get('/todos')

    assert response.status_code == 200
    name = tracer.start_as_current_span.call_args.args[0]
    assert name == 'GET /todos'
    span.set_attribute.assert_any_call('http.status_code', 200)


def test_build_keeps_extra_routes(app: TodoStarletteApplication):
    async def health(request):
        return JSONResponse({'status': 'ok'})

    client = TestClient(app.build(routes=[Route('/health', health)]))

    assert client.get('/health').json() == {'status': 'ok'}
    assert client.get('/todos').status_code == 200


def test_custom_todos_url(app: TodoStarletteApplication):
    client = TestClient(app.build(todos_url='/api/todos'))

    todo = client.post('/api/todos', json={'text': 'x'}).json()

    assert client.get('/api/todos').json() == [todo]
    assert client.delete(f'/api/todos/{todo["id"]}').status_code == 204
    assert client.get('/todos').status_code == 404
