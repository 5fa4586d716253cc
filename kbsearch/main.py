"""Entry point: search | browse | serve."""

import asyncio
import sys

from kbsearch.core.config import config
from kbsearch.core.logger import logger

USAGE = (
    "Usage: python -m kbsearch.main search <term> [--repo <path>] [--json]\n"
    "       python -m kbsearch.main browse [<repository-name> [<subdirectory>]]\n"
    "       python -m kbsearch.main serve"
)


def _pop_option(args: list[str], name: str) -> str | None:
    if name not in args:
        return None
    index = args.index(name)
    value = args[index + 1] if index + 1 < len(args) else None
    del args[index : index + 2]
    return value


def _run(mode: str) -> None:
    if mode == "search":
        from kbsearch.interfaces.cli import run_search

        args = sys.argv[2:]
        as_json = "--json" in args
        args = [a for a in args if a != "--json"]
        repository_path = _pop_option(args, "--repo")
        term = " ".join(args).strip()
        sys.exit(asyncio.run(run_search(term, repository_path=repository_path, as_json=as_json)))

    elif mode == "browse":
        from kbsearch.interfaces.cli import run_browse

        args = sys.argv[2:]
        repository_name = args[0] if args else None
        subdirectory = args[1] if len(args) > 1 else ""
        sys.exit(run_browse(repository_name, subdirectory))

    elif mode == "serve":
        from kbsearch.interfaces.bridge import run_stdio
        from kbsearch.interfaces.cli import load_registry
        from kbsearch.search.orchestrator import SearchOrchestrator

        registry = load_registry()
        asyncio.run(run_stdio(SearchOrchestrator.from_config(registry.snapshot)))

    else:
        print(f"Unknown mode: {mode}")
        print(USAGE)
        sys.exit(1)


def main():
    mode = "search"
    if len(sys.argv) > 1:
        mode = sys.argv[1].lower()

    errors = config.validate()
    if errors:
        for error in errors:
            print(f"Config error: {error}")
        sys.exit(1)

    try:
        _run(mode)
    finally:
        logger.close()


if __name__ == "__main__":
    main()
