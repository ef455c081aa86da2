import argparse
import asyncio
import logging

import httpx

from transaction_table.client.columns import TRANSACTION_COLUMNS
from transaction_table.client.controller import TableController
from transaction_table.client.render import render_table
from transaction_table.client.state import TableState
from transaction_table.config import Settings


def parse_args(argv=None):
    settings = Settings.from_env()
    parser = argparse.ArgumentParser(description="Print one page of the transactions table")
    parser.add_argument("--url", default=settings.api_url, help="Base URL of GET /api/transactions")
    parser.add_argument("--page", type=int, default=1)
    parser.add_argument("--limit", type=int, default=10, choices=[10, 20, 50, 100])
    parser.add_argument("-q", "--search", default="", help="Id, hash, user name or email")
    parser.add_argument("--type", default="", help="CREDIT, DEBIT, TRANSFER or PAYMENT")
    parser.add_argument("--sort-field", default="createdAt")
    parser.add_argument("--sort-direction", default="desc", choices=["asc", "desc"])
    return parser.parse_args(argv)


async def show(args) -> str:
    state = TableState(
        page=args.page,
        limit=args.limit,
        q=args.search,
        type=args.type,
        sort_field=args.sort_field,
        sort_direction=args.sort_direction,
    )
    async with httpx.AsyncClient(timeout=10.0) as client:
        controller = TableController(args.url, client, state=state)
        await controller.load()
        return render_table(controller.view, TRANSACTION_COLUMNS, controller.state)


def main(argv=None):
    logging.basicConfig(level=logging.WARNING, format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')
    args = parse_args(argv)
    print(asyncio.run(show(args)))


if __name__ == "__main__":
    main()
