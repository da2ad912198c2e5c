"""Errors raised by `TodoClient`."""


class TodoClientError(Exception):
    """Base class for everything the todo client raises."""


class TodoClientHTTPError(TodoClientError):
    """The todo service answered with a non-success status, or was unreachable.

    Network failures are reported with status 503.
    """

    def __init__(self, status_code: int, message: str):
        self.status_code = status_code
        self.message = message
        super().__init__(f'HTTP Error {status_code}: {message}')


class TodoClientNotFoundError(TodoClientHTTPError):
    """The todo addressed by an update or delete does not exist (404)."""

    def __init__(self, todo_id: str, message: str = ''):
        self.todo_id = todo_id
        super().__init__(404, message or f'Todo {todo_id} does not exist')


class TodoClientJSONError(TodoClientError):
    """A response body was not valid JSON or did not have the todo shape."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(f'JSON Error: {message}')
