"""Directory listing and exclusion-aware depth-first traversal."""

import logging
import os
from collections.abc import Iterator, Sequence
from dataclasses import dataclass

from kbsearch.search.cancel import StopToken
from kbsearch.search.constants import EntryKind
from kbsearch.search.excludes import is_path_excluded

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DirEntry:
    kind: EntryKind
    name: str
    path: str

    @property
    def is_directory(self) -> bool:
        return self.kind == EntryKind.DIRECTORY


@dataclass(frozen=True)
class WalkedFile:
    """A file reached by the walk that survived exclusion."""

    path: str
    relative_path: str
    name: str


def list_directory(directory: str) -> list[DirEntry]:
    """List files and directories under ``directory``, sorted by name.

    Symlinks to files are listed as files; symlinks to directories are
    skipped so the walk cannot loop. Sockets, FIFOs and broken links are
    skipped. Raises OSError if the directory cannot be listed.
    """
    entries: list[DirEntry] = []
    with os.scandir(directory) as it:
        for entry in it:
            try:
                if entry.is_dir(follow_symlinks=False):
                    kind = EntryKind.DIRECTORY
                elif entry.is_file():
                    kind = EntryKind.FILE
                else:
                    continue
            except OSError:
                continue
            entries.append(DirEntry(kind=kind, name=entry.name, path=entry.path))
    entries.sort(key=lambda e: e.name)
    return entries


def walk_files(
    root: str,
    patterns: Sequence[str],
    stop: StopToken | None = None,
) -> Iterator[WalkedFile]:
    """Yield every non-excluded file under ``root``, depth first.

    Excluded directories are pruned without being listed. Directories that
    cannot be listed are skipped.
    """

    def _walk(directory: str) -> Iterator[WalkedFile]:
        try:
            entries = list_directory(directory)
        except OSError as e:
            logger.debug("Skipping unreadable directory %s: %s", directory, e)
            return
        for entry in entries:
            if stop is not None and stop.stopped:
                return
            relative_path = os.path.relpath(entry.path, root)
            if is_path_excluded(relative_path, patterns):
                continue
            if entry.is_directory:
                yield from _walk(entry.path)
            else:
                yield WalkedFile(path=entry.path, relative_path=relative_path, name=entry.name)

    if stop is not None and stop.stopped:
        return
    yield from _walk(root)
