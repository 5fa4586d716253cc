"""Repository registry: the configured repository list and global exclusion patterns.

Holds configuration in memory and hands out immutable ConfigSnapshot values.
Searches take one snapshot at their start, so later changes never affect an
in-flight search. Subscribers are notified with the new snapshot after every
mutation.

Settings file format (JSON):
    {
        "repositories": [{"name": "notes", "path": "/abs/notes", "excludePatterns": ["drafts"]}],
        "excludePatterns": ["node_modules", ".git"]
    }
"""

import json
import logging
import threading
from collections.abc import Callable, Sequence
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from kbsearch.contracts.search_v1 import ConfigSnapshot, RepositoryRef
from kbsearch.core.errors import RepositoryExistsError, RepositoryNotFoundError, SettingsFileError
from kbsearch.search.excludes import resolve_exclude_patterns

logger = logging.getLogger(__name__)

Subscriber = Callable[[ConfigSnapshot], None]


def _parse_repositories(raw: Any) -> list[RepositoryRef]:
    """Entries without a name or path are dropped, as the settings UI allows partial rows."""
    if not isinstance(raw, list):
        return []
    repositories: list[RepositoryRef] = []
    for entry in raw:
        if not isinstance(entry, dict):
            continue
        if not entry.get("name") or not (entry.get("path") or entry.get("rootPath")):
            continue
        try:
            repositories.append(RepositoryRef.model_validate(entry))
        except ValidationError as e:
            raise SettingsFileError(f"Invalid repository entry {entry.get('name')!r}: {e}") from e
    return repositories


class RepositoryRegistry:
    """Thread-safe configuration container with explicit subscribe/unsubscribe."""

    def __init__(
        self,
        repositories: Sequence[RepositoryRef] = (),
        exclude_patterns: Sequence[str] = (),
    ) -> None:
        self._lock = threading.Lock()
        self._repositories: list[RepositoryRef] = []
        self._exclude_patterns: tuple[str, ...] = tuple(p for p in exclude_patterns if p)
        self._subscribers: list[Subscriber] = []
        for repo in repositories:
            self._check_unique(repo)
            self._repositories.append(repo)

    @classmethod
    def from_settings_file(
        cls, path: Path, default_patterns: Sequence[str] = ()
    ) -> "RepositoryRegistry":
        registry = cls(exclude_patterns=default_patterns)
        registry.load_settings(path)
        return registry

    def load_settings(self, path: Path) -> None:
        """Replace configuration from a JSON settings file. A missing file means no repositories."""
        if not path.exists():
            logger.info("Settings file %s not found; no repositories configured", path)
            return
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            raise SettingsFileError(f"Cannot read settings file {path}: {e}") from e
        if not isinstance(data, dict):
            raise SettingsFileError(f"Settings file {path} must contain a JSON object")

        repositories = _parse_repositories(data.get("repositories"))
        names = [r.name for r in repositories]
        roots = [r.root_path for r in repositories]
        for repo in repositories:
            if names.count(repo.name) > 1 or roots.count(repo.root_path) > 1:
                raise RepositoryExistsError(repo.name)
        patterns = data.get("excludePatterns")
        with self._lock:
            self._repositories = repositories
            if isinstance(patterns, list):
                self._exclude_patterns = tuple(str(p) for p in patterns if p)
        logger.info("Loaded %s repositories from %s", len(repositories), path)
        self._notify()

    def snapshot(self) -> ConfigSnapshot:
        with self._lock:
            return ConfigSnapshot(
                repositories=tuple(self._repositories),
                exclude_patterns=self._exclude_patterns,
            )

    def repositories(self) -> list[RepositoryRef]:
        with self._lock:
            return list(self._repositories)

    def exclude_patterns(self) -> tuple[str, ...]:
        with self._lock:
            return self._exclude_patterns

    def exclude_patterns_for(self, repository: RepositoryRef) -> tuple[str, ...]:
        return resolve_exclude_patterns(repository, self.exclude_patterns())

    def _check_unique(self, repository: RepositoryRef) -> None:
        for existing in self._repositories:
            if existing.root_path == repository.root_path or existing.name == repository.name:
                raise RepositoryExistsError(repository.name)

    def add_repository(self, repository: RepositoryRef) -> None:
        with self._lock:
            self._check_unique(repository)
            self._repositories.append(repository)
        logger.info("Added repository %s (%s)", repository.name, repository.root_path)
        self._notify()

    def remove_repository(self, root_path: str) -> RepositoryRef:
        with self._lock:
            for index, repo in enumerate(self._repositories):
                if repo.root_path == root_path:
                    removed = self._repositories.pop(index)
                    break
            else:
                raise RepositoryNotFoundError(root_path)
        logger.info("Removed repository %s", removed.name)
        self._notify()
        return removed

    def set_exclude_patterns(self, patterns: Sequence[str]) -> None:
        with self._lock:
            self._exclude_patterns = tuple(p for p in patterns if p)
        self._notify()

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """Register callback for configuration changes; returns the unsubscribe function."""
        with self._lock:
            self._subscribers.append(callback)

        def _unsubscribe() -> None:
            with self._lock:
                if callback in self._subscribers:
                    self._subscribers.remove(callback)

        return _unsubscribe

    def _notify(self) -> None:
        snapshot = self.snapshot()
        with self._lock:
            subscribers = list(self._subscribers)
        for callback in subscribers:
            try:
                callback(snapshot)
            except Exception as e:
                logger.warning("Configuration subscriber %r failed: %s", callback, e)

    def close(self) -> None:
        """Drop all subscribers."""
        with self._lock:
            self._subscribers.clear()
