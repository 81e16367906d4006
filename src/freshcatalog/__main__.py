"""Command-line entry point: ``python -m freshcatalog [route ...]``.

Loads each route once through its freshness policy and prints one JSON line
per route to stdout. Exits 1 if any route did not end up ``ready``.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys

from freshcatalog.app import CatalogApp
from freshcatalog.config import Settings
from freshcatalog.errors import CatalogError
from freshcatalog.logging_config import configure_logging
from freshcatalog.policy import ROUTE_POLICIES, policy_for_route


async def _run(routes: list[str], settings: Settings) -> int:
    exit_code = 0
    async with CatalogApp(settings) as app:
        for route in routes:
            async with app.request() as scope:
                view = app.view(route, scope)
                state = await view.load()
            line = {
                "route": route,
                "policy": view.policy.value,
                "state": state.model_dump(mode="json"),
            }
            print(json.dumps(line, ensure_ascii=False))
            if state.kind != "ready":
                exit_code = 1
    return exit_code


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="freshcatalog",
        description="Load the product catalog through each route's freshness policy.",
    )
    parser.add_argument(
        "routes",
        nargs="*",
        default=list(ROUTE_POLICIES),
        help="routes to load (default: all of %(default)s)",
    )
    args = parser.parse_args(argv)
    for route in args.routes:
        try:
            policy_for_route(route)
        except CatalogError as exc:
            parser.error(exc.message)

    settings = Settings()
    configure_logging(settings.logging)
    return asyncio.run(_run(args.routes, settings))


if __name__ == "__main__":
    sys.exit(main())
