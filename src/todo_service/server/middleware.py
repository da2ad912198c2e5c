"""ASGI middleware wrapped around the todo routes.

`TimeoutMiddleware` bounds how long a request may run and
`RequestTracingMiddleware` opens a span and writes a log line per request.
`unhandled_error_response` is registered as the application's catch-all
exception handler.
"""

import asyncio
import logging
import time

from starlette.requests import Request
from starlette.responses import PlainTextResponse, Response
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from todo_service.config import DEFAULT_REQUEST_TIMEOUT
from todo_service.utils.telemetry import SpanKind, get_tracer


logger = logging.getLogger(__name__)



class TimeoutMiddleware:
    """Answers 408 when the wrapped app does not finish within `timeout` seconds.

    The request task is cancelled on expiry. Store writes that completed
    before that point are kept. If the response had already started, the
    timeout propagates instead because a second status line cannot be sent.
    """

    def __init__(
        self, app: ASGIApp, timeout: float = DEFAULT_REQUEST_TIMEOUT
    ) -> None:
        self.app = app
        self.timeout = timeout

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope['type'] != 'http':
            await self.app(scope, receive, send)
            return

        response_started = False

        async def send_wrapper(message: Message) -> None:
            nonlocal response_started
            if message['type'] == 'http.response.start':
                response_started = True
            await send(message)

        try:
            await asyncio.wait_for(
                self.app(scope, receive, send_wrapper), timeout=self.timeout
            )
        except asyncio.TimeoutError:
            if response_started:
                raise
            logger.warning(
                'Request %s %s timed out after %ss',
                scope['method'],
                scope['path'],
                self.timeout,
            )
            await Response(status_code=408)(scope, receive, send)


class RequestTracingMiddleware:
    """Wraps each HTTP request in a SERVER span and logs its outcome."""

    def __init__(self, app: ASGIApp) -> None:
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope['type'] != 'http':
            await self.app(scope, receive, send)
            return

        method = scope['method']
        path = scope['path']
        status_code: int | None = None

        async def send_wrapper(message: Message) -> None:
            nonlocal status_code
            if message['type'] == 'http.response.start':
                status_code = message['status']
            await send(message)

        logger.debug('started processing request %s %s', method, path)
        start = time.perf_counter()
        with get_tracer().start_as_current_span(
            f'{method} {path}',
            kind=SpanKind.SERVER,
            attributes={'http.method': method, 'http.target': path},
        ) as span:
            try:
                await self.app(scope, receive, send_wrapper)
            finally:
                latency_ms = (time.perf_counter() - start) * 1000
                if status_code is not None:
                    span.set_attribute('http.status_code', status_code)
                logger.debug(
                    'finished processing request %s %s -> %s (%.1f ms)',
                    method,
                    path,
                    status_code,
                    latency_ms,
                )


async def unhandled_error_response(
    request: Request, exc: Exception
) -> PlainTextResponse:
    """Turns any exception that escaped the routes into a 500 response."""
    logger.error(
        'Unhandled exception on %s %s',
        request.method,
        request.url.path,
        exc_info=exc,
    )
    return PlainTextResponse(
        f'Unhandled internal error: {exc}', status_code=500
    )
