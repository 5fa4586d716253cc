"""Tree listing for the repository browser, hiding excluded entries."""

import os
from collections.abc import Sequence
from dataclasses import dataclass

from kbsearch.contracts.search_v1 import ConfigSnapshot, RepositoryRef
from kbsearch.search.constants import EntryKind
from kbsearch.search.excludes import is_path_excluded
from kbsearch.search.walker import list_directory


@dataclass(frozen=True)
class BrowserItem:
    kind: EntryKind
    name: str
    path: str
    relative_path: str


def list_repository_roots(snapshot: ConfigSnapshot) -> list[RepositoryRef]:
    return sorted(snapshot.repositories, key=lambda r: r.name.casefold())


def list_children(
    repository: RepositoryRef,
    directory: str,
    exclude_patterns: Sequence[str],
) -> list[BrowserItem]:
    """Visible entries of ``directory``: folders first, then files, each sorted by name.

    Raises OSError when the directory cannot be listed.
    """
    folders: list[BrowserItem] = []
    files: list[BrowserItem] = []
    for entry in list_directory(directory):
        relative_path = os.path.relpath(entry.path, repository.root_path)
        if is_path_excluded(relative_path, exclude_patterns):
            continue
        item = BrowserItem(
            kind=entry.kind,
            name=entry.name,
            path=entry.path,
            relative_path=relative_path,
        )
        (folders if entry.is_directory else files).append(item)
    folders.sort(key=lambda i: i.name.casefold())
    files.sort(key=lambda i: i.name.casefold())
    return folders + files
