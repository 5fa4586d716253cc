"""Content search by spawning ripgrep once per repository."""

from __future__ import annotations

import asyncio
import os
import re
import shutil
import sys
from collections.abc import Sequence

from kbsearch.contracts.search_v1 import MatchResult, RepositoryRef
from kbsearch.core.config import Config
from kbsearch.core.logger import logger
from kbsearch.search.cancel import StopToken
from kbsearch.search.constants import (
    RIPGREP_CANDIDATE_DIRS,
    RIPGREP_OK_EXIT_CODES,
    ContentStrategy,
    StopReason,
)
from kbsearch.search.interface import ContentSearcher

_REGEX_META = re.compile(r"[.*+?^${}()|\[\]\\]")
# Path is non-greedy so "a:b.md:3:x" splits at the first ":<digits>:".
_RG_LINE = re.compile(r"^(.+?):(\d+):(.*)$")
_NEWLINE = re.compile(r"\r?\n")


def escape_term(term: str) -> str:
    """Escape regex metacharacters so ripgrep matches ``term`` literally."""
    return _REGEX_META.sub(lambda m: "\\" + m.group(0), term)


def executable_name(platform: str | None = None) -> str:
    return "rg.exe" if (platform or sys.platform) == "win32" else "rg"


def ripgrep_candidates(
    app_root: str = "",
    explicit_path: str = "",
    platform: str | None = None,
) -> list[str]:
    """Candidate executable locations, in probe order."""
    candidates: list[str] = []
    if explicit_path:
        candidates.append(explicit_path)
    if app_root:
        name = executable_name(platform)
        for parts in RIPGREP_CANDIDATE_DIRS:
            candidates.append(os.path.join(app_root, *parts, name))
    return candidates


def build_ripgrep_args(term: str, exclude_patterns: Sequence[str]) -> list[str]:
    args = [
        "--ignore-case",
        "--line-number",
        "--no-heading",
        "--with-filename",
        "--color",
        "never",
        "--trim",
        "--regexp",
        escape_term(term),
    ]
    for pattern in exclude_patterns:
        args.extend(["--glob", f"!{pattern}"])
    # A term starting with "-" must never be parsed as a flag.
    args.extend(["--", "."])
    return args


def parse_ripgrep_line(line: str, repository: RepositoryRef) -> MatchResult | None:
    """Parse one ``path:line:content`` output line; None if it has another shape."""
    match = _RG_LINE.match(line)
    if not match:
        return None
    line_number = int(match.group(2))
    if line_number < 1:
        return None
    content = match.group(3)
    return MatchResult(
        repository_name=repository.name,
        repository_path=repository.root_path,
        file_path=os.path.normpath(os.path.join(repository.root_path, match.group(1))),
        line_number=line_number,
        line_content=content,
        match_context=content,
    )


def parse_ripgrep_output(output: str, repository: RepositoryRef) -> list[MatchResult]:
    results: list[MatchResult] = []
    for line in _NEWLINE.split(output):
        if not line:
            continue
        parsed = parse_ripgrep_line(line, repository)
        if parsed is not None:
            results.append(parsed)
    return results


class RipgrepSearcher(ContentSearcher):
    """Runs ripgrep in each repository root. Unavailable when no executable is found."""

    def __init__(self, candidates: Sequence[str] = (), use_path: bool = False):
        self._candidates = list(candidates)
        self._use_path = use_path
        self._probed = False
        self._executable: str | None = None

    @classmethod
    def from_config(cls, cfg: Config) -> "RipgrepSearcher":
        return cls(
            candidates=ripgrep_candidates(app_root=cfg.app_root, explicit_path=cfg.ripgrep_path),
            use_path=cfg.ripgrep_from_path,
        )

    def get_strategy(self) -> ContentStrategy:
        return ContentStrategy.RIPGREP

    def resolve_executable(self) -> str | None:
        """Probe candidate locations once; the result is cached for this searcher."""
        if self._probed:
            return self._executable
        self._probed = True
        for candidate in self._candidates:
            if os.path.isfile(candidate) and os.access(candidate, os.X_OK):
                self._executable = candidate
                break
        else:
            if self._use_path:
                self._executable = shutil.which(executable_name())
        if self._executable:
            logger.debug(f"ripgrep found at {self._executable}")
        else:
            logger.debug("ripgrep not found; content search uses the fallback scanner")
        return self._executable

    def is_available(self) -> bool:
        return self.resolve_executable() is not None

    async def _run(
        self,
        executable: str,
        args: list[str],
        repository: RepositoryRef,
        stop: StopToken | None,
    ) -> str | None:
        try:
            proc = await asyncio.create_subprocess_exec(
                executable,
                *args,
                cwd=repository.root_path,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            logger.tool_failed(repository.name, f"spawn failed: {e}")
            return None

        timeout = stop.remaining() if stop is not None else None
        try:
            stdout, stderr = await asyncio.wait_for(proc.communicate(), timeout=timeout)
        except TimeoutError:
            stop.cancel(StopReason.TIMEOUT)
            await _kill(proc)
            logger.tool_failed(repository.name, f"timed out after {timeout:.1f}s")
            return None
        except asyncio.CancelledError:
            await _kill(proc)
            raise

        if proc.returncode not in RIPGREP_OK_EXIT_CODES:
            reason = stderr.decode("utf-8", errors="replace").strip()
            logger.tool_failed(repository.name, f"exit code {proc.returncode}: {reason}")
            return None
        return stdout.decode("utf-8", errors="replace")

    async def search(
        self,
        term: str,
        repository: RepositoryRef,
        exclude_patterns: Sequence[str],
        stop: StopToken | None = None,
    ) -> list[MatchResult]:
        executable = self.resolve_executable()
        if executable is None or (stop is not None and stop.stopped):
            return []
        args = build_ripgrep_args(term, exclude_patterns)
        output = await self._run(executable, args, repository, stop)
        if output is None:
            return []
        return parse_ripgrep_output(output, repository)


async def _kill(proc: asyncio.subprocess.Process) -> None:
    if proc.returncode is None:
        try:
            proc.kill()
        except ProcessLookupError:
            return
    await proc.wait()
