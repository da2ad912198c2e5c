from unittest import mock

from starlette.applications import Starlette
from starlette.testclient import TestClient

from todo_service.config import Settings
from todo_service.server import TodoServer
from todo_service.server.todos import InMemoryTodoStore


def test_app_shares_one_store():
    server = TodoServer()
    assert isinstance(server.todo_store, InMemoryTodoStore)

    first = TestClient(server.app())
    todo = first.post('/todos', json={'text': 'shared'}).json()

    second = TestClient(server.app())
    assert second.get('/todos').json() == [todo]


def test_app_returns_starlette():
    assert isinstance(TodoServer().app(), Starlette)


def test_start_runs_uvicorn_with_settings():
    settings = Settings(host='0.0.0.0', port=9999)
    server = TodoServer(settings)

    with mock.patch('uvicorn.run') as run:
        server.start(log_level='info')

    app = run.call_args.args[0]
    assert isinstance(app, Starlette)
    assert run.call_args.kwargs == {
        'host': '0.0.0.0',
        'port': 9999,
        'log_level': 'info',
    }
