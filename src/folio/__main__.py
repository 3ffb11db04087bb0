"""Entry point: python -m folio [fragments|views|schema|head]

Reads the repository settings from folio.toml / environment and prints the
requested collection as YAML, or the tip commit of the configured reference.
"""

from __future__ import annotations

import asyncio
import logging
import sys

import yaml

from folio.config import FolioConfig, load_config
from folio.session import Folio

_COLLECTIONS = {"fragments": "document", "views": "views", "schema": "schema"}


def _setup_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )


async def _run(config: FolioConfig, cmd: str) -> str:
    folio = Folio.from_config(
        config.repository, config.document.name, config.document.content_path
    )
    async with folio:
        if cmd == "head":
            return await folio.head()
        value = await folio.get(_COLLECTIONS[cmd])
    return yaml.safe_dump(value, default_flow_style=False, allow_unicode=True, sort_keys=False)


def main() -> None:
    cmd = sys.argv[1] if len(sys.argv) > 1 else "fragments"

    if cmd not in (*_COLLECTIONS, "head"):
        print("Usage: python -m folio [fragments|views|schema|head]")
        print("  fragments: Print the document records (default)")
        print("  views:     Print the saved views")
        print("  schema:    Print the schema")
        print("  head:      Print the tip commit of the configured reference")
        sys.exit(1)

    config = load_config()
    _setup_logging(config.log_level)
    print(asyncio.run(_run(config, cmd)).rstrip())


if __name__ == "__main__":
    main()
