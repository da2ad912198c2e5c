"""HTTP application components for the todo server."""

from todo_service.server.apps.starlette_app import TodoStarletteApplication


__all__ = ['TodoStarletteApplication']
