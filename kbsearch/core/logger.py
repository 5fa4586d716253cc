"""Structured logging: console output plus a JSON-lines event file."""

import json
import logging
import os
import sys
import threading
import time
from dataclasses import asdict, dataclass
from datetime import datetime
from typing import Any

from kbsearch.core.config import config


def _format_duration(seconds: float) -> str:
    if seconds < 0:
        return "0s"
    if seconds >= 60:
        m = int(seconds // 60)
        s = seconds % 60
        if s < 0.05:
            return f"{m}m"
        return f"{m}m {s:.0f}s" if s >= 1 else f"{m}m {s:.1f}s"
    if seconds >= 0.05:
        return f"{seconds:.1f}s"
    if seconds > 0:
        return "<0.1s"
    return "0s"


def _short_term(term: str, max_len: int = 60) -> str:
    s = term.strip().replace("\n", " ")
    return s[:max_len] + "..." if len(s) > max_len else s


def _use_color() -> bool:
    if os.environ.get("NO_COLOR"):
        return False
    try:
        return sys.stderr.isatty()
    except Exception:
        return False


def _c(role: str) -> str:
    if not _use_color():
        return ""
    # 38;5;N = foreground 256-color
    codes = {
        "term": "\033[38;5;81m",
        "done_ok": "\033[38;5;78m",
        "done_fail": "\033[38;5;203m",
        "duration": "\033[38;5;221m",
        "strategy": "\033[38;5;245m",
    }
    return codes.get(role, "")


def _reset() -> str:
    if not _use_color():
        return ""
    return "\033[0m"


@dataclass
class LogEvent:
    event_type: str
    timestamp: str
    data: dict[str, Any]

    def to_dict(self) -> dict:
        return asdict(self)

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), default=str)


class KBLogger:
    def __init__(self):
        self.log_file = config.logs_dir / "search.log"
        self._file_lock = threading.Lock()
        self._log_file_handle = None
        self._file_enabled = config.log_to_file
        self._setup_console_logger()

    def _setup_console_logger(self):
        self.console = logging.getLogger("kbsearch")
        self.console.setLevel(logging.DEBUG)
        self._console_formatter = logging.Formatter(
            "%(asctime)s │ %(message)s", datefmt="%H:%M:%S"
        )
        if not self.console.handlers:
            handler = logging.StreamHandler()
            handler.setLevel(logging.INFO)
            handler.setFormatter(self._console_formatter)
            self.console.addHandler(handler)

    def _open_log_file(self):
        # Opened on first event so importing the package touches no files.
        if self._log_file_handle is None:
            config.logs_dir.mkdir(parents=True, exist_ok=True)
            self._log_file_handle = open(self.log_file, "a", encoding="utf-8")
        return self._log_file_handle

    def log_event(self, event: LogEvent) -> None:
        if not self._file_enabled:
            return
        with self._file_lock:
            try:
                handle = self._open_log_file()
                handle.write(event.to_json() + "\n")
                handle.flush()
            except OSError as e:
                self._file_enabled = False
                self.console.warning(f"Event log disabled: {e}")

    def _timestamp(self) -> str:
        return datetime.now().isoformat()

    def search_started(self, term: str, repositories: list[str]) -> float:
        """Log the start of a search; returns the monotonic start time for search_finished."""
        started = time.monotonic()
        event = LogEvent(
            event_type="SEARCH_STARTED",
            timestamp=self._timestamp(),
            data={"term": term[:200], "repositories": repositories},
        )
        self.log_event(event)
        self.console.debug(
            f"Search {_c('term')}{_short_term(term)!r}{_reset()} in {len(repositories)} repositories"
        )
        return started

    def strategy_selected(self, strategy: str) -> None:
        event = LogEvent(
            event_type="STRATEGY_SELECTED",
            timestamp=self._timestamp(),
            data={"strategy": strategy},
        )
        self.log_event(event)
        self.console.debug(f"Content search: {_c('strategy')}{strategy}{_reset()}")

    def search_finished(
        self,
        term: str,
        content_count: int,
        file_name_count: int,
        result_count: int,
        *,
        started: float | None = None,
    ) -> None:
        elapsed = (time.monotonic() - started) if started is not None else 0.0
        event = LogEvent(
            event_type="SEARCH_FINISHED",
            timestamp=self._timestamp(),
            data={
                "term": term[:200],
                "content_matches": content_count,
                "file_name_matches": file_name_count,
                "results": result_count,
                "duration_seconds": round(elapsed, 3),
            },
        )
        self.log_event(event)
        dur = f"{_c('duration')}{_format_duration(elapsed)}{_reset()}"
        self.console.info(
            f"{_c('done_ok')}✓ Search{_reset()} {_c('term')}{_short_term(term)!r}{_reset()}  "
            f"{result_count} results ({content_count} content, {file_name_count} file names)  {dur}"
        )

    def tool_failed(self, repository: str, reason: str) -> None:
        event = LogEvent(
            event_type="TOOL_FAILED",
            timestamp=self._timestamp(),
            data={"repository": repository, "reason": reason[:500]},
        )
        self.log_event(event)
        self.console.warning(
            f"{_c('done_fail')}[failed]{_reset()} ripgrep in {repository}: {reason[:120]}"
        )

    def error(self, message: str, *args, exception: Exception | None = None, **kwargs):
        event = LogEvent(
            event_type="ERROR",
            timestamp=self._timestamp(),
            data={
                "message": message,
                "exception": str(exception) if exception else None,
            },
        )
        self.log_event(event)

        allowed = {"exc_info", "stack_info", "stacklevel", "extra"}
        log_kwargs = {k: v for k, v in kwargs.items() if k in allowed}
        if exception and "exc_info" not in log_kwargs:
            log_kwargs["exc_info"] = exception

        self.console.error(f"Error: {message}", *args, **log_kwargs)

    def info(self, message: str, *args, **kwargs):
        allowed = {"exc_info", "stack_info", "stacklevel", "extra"}
        log_kwargs = {k: v for k, v in kwargs.items() if k in allowed}
        self.console.info(message, *args, **log_kwargs)

    def warning(self, message: str, *args, **kwargs):
        event = LogEvent(
            event_type="WARNING",
            timestamp=self._timestamp(),
            data={"message": message[:500]},
        )
        self.log_event(event)

        allowed = {"exc_info", "stack_info", "stacklevel", "extra"}
        log_kwargs = {k: v for k, v in kwargs.items() if k in allowed}
        self.console.warning(message, *args, **log_kwargs)

    def debug(self, message: str, *args, **kwargs):
        allowed = {"exc_info", "stack_info", "stacklevel", "extra"}
        log_kwargs = {k: v for k, v in kwargs.items() if k in allowed}
        self.console.debug(message, *args, **log_kwargs)

    def close(self) -> None:
        with self._file_lock:
            if self._log_file_handle is not None:
                self._log_file_handle.close()
                self._log_file_handle = None


logger = KBLogger()
