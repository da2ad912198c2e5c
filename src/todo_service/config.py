"""Process configuration read from the environment."""

import os

from collections.abc import Mapping
from dataclasses import dataclass


ENV_PREFIX = 'TODO_'
DEFAULT_REQUEST_TIMEOUT = 10.0
# Names understood by both logging and uvicorn.
LOG_LEVELS = ('CRITICAL', 'ERROR', 'WARNING', 'INFO', 'DEBUG')


@dataclass(frozen=True)
class Settings:
    """Runtime settings for the todo server."""

    host: str = '127.0.0.1'
    port: int = 8080
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT
    log_level: str = 'DEBUG'

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> 'Settings':
        """Builds settings from ``TODO_*`` variables, falling back to defaults.

        Raises:
            ValueError: If a numeric variable cannot be parsed or the log
                level is unknown.
        """
        env = os.environ if environ is None else environ
        defaults = cls()
        return cls(
            host=env.get(f'{ENV_PREFIX}HOST', defaults.host),
            port=_parse(env, 'PORT', int, defaults.port),
            request_timeout=_parse(
                env, 'REQUEST_TIMEOUT', float, defaults.request_timeout
            ),
            log_level=_parse(env, 'LOG_LEVEL', _log_level, defaults.log_level),
        )


def _log_level(raw: str) -> str:
    level = raw.strip().upper()
    if level not in LOG_LEVELS:
        raise ValueError(f'unknown log level {raw!r}')
    return level


def _parse(env: Mapping[str, str], name: str, convert, default):
    key = f'{ENV_PREFIX}{name}'
    raw = env.get(key)
    if raw is None or raw == '':
        return default
    try:
        return convert(raw)
    except ValueError as e:
        raise ValueError(f'Invalid value for {key}: {raw!r}') from e
