"""Utility helpers for the todo service."""

from todo_service.utils.rwlock import ReadWriteLock
from todo_service.utils.telemetry import SpanKind, trace_class, trace_function


__all__ = [
    'ReadWriteLock',
    'SpanKind',
    'trace_class',
    'trace_function',
]
