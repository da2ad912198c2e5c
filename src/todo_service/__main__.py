import logging

import click

from dotenv import load_dotenv

from todo_service.config import LOG_LEVELS, Settings
from todo_service.server import TodoServer


@click.command()
@click.option('--host', 'host', default=None, help='Interface to bind.')
@click.option('--port', 'port', type=int, default=None, help='Port to bind.')
@click.option(
    '--timeout',
    'timeout',
    type=float,
    default=None,
    help='Per-request timeout in seconds.',
)
@click.option(
    '--log-level',
    'log_level',
    type=click.Choice(LOG_LEVELS, case_sensitive=False),
    default=None,
)
def main(
    host: str | None,
    port: int | None,
    timeout: float | None,
    log_level: str | None,
):
    """Runs the todo HTTP service."""
    load_dotenv()
    env_settings = Settings.from_env()
    settings = Settings(
        host=host or env_settings.host,
        port=env_settings.port if port is None else port,
        request_timeout=(
            env_settings.request_timeout if timeout is None else timeout
        ),
        log_level=(log_level or env_settings.log_level).upper(),
    )

    logging.basicConfig(
        level=settings.log_level,
        format='%(asctime)s %(levelname)s %(name)s: %(message)s',
    )

    TodoServer(settings).start(log_level=settings.log_level.lower())


if __name__ == '__main__':
    main()
