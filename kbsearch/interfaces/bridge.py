"""Message bridge between the search UI and the orchestrator.

Incoming:  {"type": "search", "payload": {"term", "repositoryPath"?}}
           {"type": "openResult", "payload": MatchResult}
Outgoing:  {"type": "searchResults", "payload": SearchResponse}

A newer search supersedes an older one still running: the older task is
cancelled and its results are never posted.
"""

from __future__ import annotations

import asyncio
import inspect
import json
import sys
from collections.abc import Awaitable, Callable
from typing import Any

from pydantic import ValidationError

from kbsearch.contracts.search_v1 import (
    MatchResult,
    OpenResultMessage,
    SearchQuery,
    SearchRequestMessage,
    SearchResultsMessage,
    incoming_message_adapter,
)
from kbsearch.core.logger import logger
from kbsearch.search.orchestrator import SearchOrchestrator

Poster = Callable[[dict[str, Any]], Awaitable[None] | None]
Opener = Callable[[MatchResult], Awaitable[None] | None]


async def _maybe_await(value: Awaitable[None] | None) -> None:
    if inspect.isawaitable(value):
        await value


def _log_open(result: MatchResult) -> None:
    logger.info(f"Open requested: {result.file_path}:{result.line_number}")


class MessageBridge:
    def __init__(
        self,
        orchestrator: SearchOrchestrator,
        post: Poster,
        open_result: Opener | None = None,
    ):
        self._orchestrator = orchestrator
        self._post = post
        self._open_result = open_result or _log_open
        self._current: asyncio.Task | None = None

    async def handle(self, message: dict[str, Any]) -> None:
        """Dispatch one incoming message. Unknown or malformed messages are logged and dropped."""
        try:
            parsed = incoming_message_adapter.validate_python(message)
        except ValidationError as e:
            logger.warning(f"Ignoring malformed message: {str(e).splitlines()[0]}")
            return
        if isinstance(parsed, SearchRequestMessage):
            await self._handle_search(parsed.payload)
        elif isinstance(parsed, OpenResultMessage):
            await _maybe_await(self._open_result(parsed.payload))

    async def _handle_search(self, query: SearchQuery) -> None:
        previous = self._current
        if previous is not None and not previous.done():
            previous.cancel()
        task = asyncio.create_task(self._orchestrator.search(query))
        self._current = task
        try:
            response = await task
        except asyncio.CancelledError:
            if self._current is not task and task.cancelled():
                logger.debug(f"Search for {query.term!r} superseded")
                return
            raise
        if self._current is not task:
            return
        self._current = None
        await _maybe_await(
            self._post(SearchResultsMessage(payload=response).model_dump(by_alias=True))
        )


async def run_stdio(orchestrator: SearchOrchestrator) -> None:
    """Serve JSON-line messages on stdin, writing responses to stdout, until EOF."""
    loop = asyncio.get_running_loop()
    pending: set[asyncio.Task] = set()

    def _write(message: dict[str, Any]) -> None:
        sys.stdout.write(json.dumps(message) + "\n")
        sys.stdout.flush()

    bridge = MessageBridge(orchestrator, post=_write)
    while True:
        line = await loop.run_in_executor(None, sys.stdin.readline)
        if not line:
            break
        line = line.strip()
        if not line:
            continue
        try:
            message = json.loads(line)
        except json.JSONDecodeError:
            logger.warning(f"Ignoring non-JSON input: {line[:80]}")
            continue
        if not isinstance(message, dict):
            logger.warning("Ignoring non-object message")
            continue
        task = asyncio.create_task(bridge.handle(message))
        pending.add(task)
        task.add_done_callback(pending.discard)
    if pending:
        await asyncio.gather(*pending, return_exceptions=True)
