import asyncio
import logging

import click
import httpx

from todo_service.client import TodoClient


logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


async def run(base_url: str) -> None:
    async with httpx.AsyncClient() as httpx_client:
        client = TodoClient(httpx_client, base_url=base_url)

        todo = await client.create_todo('buy milk')
        logger.info('created %s', todo.model_dump(mode='json'))

        todo = await client.update_todo(todo.id, completed=True)
        logger.info('completed %s', todo.model_dump(mode='json'))

        await client.delete_todo(todo.id)
        logger.info('remaining %s', await client.list_todos())


@click.command()
@click.option('--url', 'url', default='http://127.0.0.1:8080')
def main(url: str):
    """Walks one todo through create, complete and delete."""
    asyncio.run(run(url))


if __name__ == '__main__':
    main()
