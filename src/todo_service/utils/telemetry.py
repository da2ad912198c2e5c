"""OpenTelemetry tracing helpers for the todo service.

`trace_function` wraps a sync or async callable in a span and `trace_class`
applies it to the public methods of a class. Spans record exceptions and set
an OK or ERROR status. Without a configured tracer provider OpenTelemetry
hands out no-op spans, so the decorators cost almost nothing by default.

Usage:
    ```python
    @trace_function(span_name='todos.create', kind=SpanKind.SERVER)
    async def create(): ...


    @trace_class(exclude_list=['helper'])
    class Service: ...
    ```
"""

import functools
import inspect
import logging

from collections.abc import Callable
from typing import Any

from opentelemetry import trace
from opentelemetry.trace import Span, StatusCode
from opentelemetry.trace import SpanKind as _SpanKind


SpanKind = _SpanKind
__all__ = ['SpanKind', 'get_tracer', 'trace_class', 'trace_function']
INSTRUMENTING_MODULE_NAME = 'todo-service'
INSTRUMENTING_MODULE_VERSION = '0.1.0'

AttributeExtractor = Callable[
    [Span, tuple, dict, Any, Exception | None], None
]

logger = logging.getLogger(__name__)


def get_tracer() -> trace.Tracer:
    """Returns the tracer used for every span this package creates."""
    return trace.get_tracer(
        INSTRUMENTING_MODULE_NAME, INSTRUMENTING_MODULE_VERSION
    )


def _run_extractor(
    extractor: AttributeExtractor | None,
    span_name: str,
    span: Span,
    args: tuple,
    kwargs: dict,
    result: Any,
    exception: Exception | None,
) -> None:
    if not extractor:
        return
    try:
        extractor(span, args, kwargs, result, exception)
    except Exception as attr_e:
        logger.error(
            f'attribute_extractor error in span {span_name}: {attr_e}'
        )


def trace_function(
    func: Callable | None = None,
    *,
    span_name: str | None = None,
    kind: SpanKind = SpanKind.INTERNAL,
    attributes: dict[str, Any] | None = None,
    attribute_extractor: AttributeExtractor | None = None,
) -> Callable:
    """Decorates a function so that every call runs inside a span.

    Usable bare (`@trace_function`) or with arguments
    (`@trace_function(span_name='x')`).

    Args:
        func: The function to wrap. None when called with arguments.
        span_name: Span name. Defaults to ``module.qualname`` of `func`.
        kind: The ``SpanKind`` of the created span.
        attributes: Static attributes set on every span.
        attribute_extractor: Called as
            ``extractor(span, args, kwargs, result, exception)`` after the
            call, even when it raised. Its own errors are logged, not raised.

    Returns:
        The wrapped function, or a decorator when `func` is None.
    """
    if func is None:
        return functools.partial(
            trace_function,
            span_name=span_name,
            kind=kind,
            attributes=attributes,
            attribute_extractor=attribute_extractor,
        )

    actual_span_name = span_name or f'{func.__module__}.{func.__qualname__}'
    is_async_func = inspect.iscoroutinefunction(func)

    logger.debug(
        f'Start tracing for {actual_span_name}, is_async_func {is_async_func}'
    )

    def _start_span() -> Any:
        return get_tracer().start_as_current_span(actual_span_name, kind=kind)

    @functools.wraps(func)
    async def async_wrapper(*args: Any, **kwargs: Any) -> Any:
        with _start_span() as span:
            for k, v in (attributes or {}).items():
                span.set_attribute(k, v)
            result = None
            exception = None
            try:
                result = await func(*args, **kwargs)
                span.set_status(StatusCode.OK)
                return result
            except Exception as e:
                exception = e
                span.record_exception(e)
                span.set_status(StatusCode.ERROR, description=str(e))
                raise
            finally:
                _run_extractor(
                    attribute_extractor,
                    actual_span_name,
                    span,
                    args,
                    kwargs,
                    result,
                    exception,
                )

    @functools.wraps(func)
    def sync_wrapper(*args: Any, **kwargs: Any) -> Any:
        with _start_span() as span:
            for k, v in (attributes or {}).items():
                span.set_attribute(k, v)
            result = None
            exception = None
            try:
                result = func(*args, **kwargs)
                span.set_status(StatusCode.OK)
                return result
            except Exception as e:
                exception = e
                span.record_exception(e)
                span.set_status(StatusCode.ERROR, description=str(e))
                raise
            finally:
                _run_extractor(
                    attribute_extractor,
                    actual_span_name,
                    span,
                    args,
                    kwargs,
                    result,
                    exception,
                )

    return async_wrapper if is_async_func else sync_wrapper


def trace_class(
    include_list: list[str] | None = None,
    exclude_list: list[str] | None = None,
    kind: SpanKind = SpanKind.INTERNAL,
) -> Callable[[type], type]:
    """Class decorator applying `trace_function` to selected methods.

    Dunder methods are never traced. When `include_list` is given only those
    methods are traced; otherwise every method except those in
    `exclude_list`.

    Args:
        include_list: Method names to trace exclusively.
        exclude_list: Method names to skip when `include_list` is not given.
        kind: The ``SpanKind`` for the created spans.

    Returns:
        A decorator that rewraps the class's methods in place.
    """
    exclude_list = exclude_list or []

    def decorator(cls: type) -> type:
        for name, method in inspect.getmembers(cls, inspect.isfunction):
            if name.startswith('__') and name.endswith('__'):
                continue
            if include_list and name not in include_list:
                continue
            if not include_list and name in exclude_list:
                continue

            span_name = f'{cls.__module__}.{cls.__name__}.{name}'
            setattr(
                cls,
                name,
                trace_function(span_name=span_name, kind=kind)(method),
            )
        return cls

    return decorator
