"""
catalog_demo.py — Minimal pathgraph catalog example.

Seeds an in-memory catalog, reads a few paths, rates a title, pushes a title
onto a genre, and prints the mixed JSON Graph envelope.

Usage:
    PYTHONPATH=src python examples/catalog_demo.py
"""

import json
import logging

from pathgraph import assemble, ref
from pathgraph.handlers import Catalog


async def main() -> None:
    catalog = Catalog.in_memory(
        titles=[
            {"_id": "1", "name": "House of Cards", "year": 2013, "rating": 4},
            {"_id": "2", "name": "Orange Is the New Black", "year": 2013, "rating": 4},
            {"_id": "3", "name": "Stranger Things", "year": 2016, "rating": 5},
        ],
        lists=[
            {
                "_id": "all",
                "recommendations": [
                    {"name": "Drama", "titles": [1, 2]},
                    {"name": "Sci-Fi", "titles": [3]},
                ],
            },
            {
                "_id": "alice",
                "recommendations": [{"name": "Watch Later", "titles": [3]}],
            },
        ],
    )
    ctx = catalog.context("alice")

    rated = await catalog.user_rating.set(
        ctx, {"jsonGraph": {"titlesById": {"3": {"userRating": 7}}}}
    )
    pushed = await catalog.genre_push.call(
        ctx, "genrelist[0].titles.push", [ref("titlesById", 1)]
    )
    envelope = assemble(
        [
            await catalog.genre_names.get(ctx, "genrelist[0..1].name"),
            await catalog.genre_titles.get(ctx, "genrelist[0].titles[0..2]"),
            await catalog.title_fields.get(ctx, 'titlesById[1, 3, 99]["name", "year"]'),
            await catalog.user_rating.get(ctx, "titlesById[1, 3].userRating"),
            rated,
            pushed,
        ]
    )
    print(json.dumps(envelope.to_json(), indent=2))


if __name__ == "__main__":
    import asyncio

    logging.basicConfig(level=logging.INFO)
    asyncio.run(main())
