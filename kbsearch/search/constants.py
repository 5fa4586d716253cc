"""Shared typed constants for repository search."""

from enum import StrEnum

# Never opened for content inspection by the fallback scanner.
BINARY_EXTENSIONS: frozenset[str] = frozenset(
    {
        ".png",
        ".jpg",
        ".jpeg",
        ".gif",
        ".webp",
        ".pdf",
        ".zip",
        ".gz",
        ".tar",
        ".mp4",
        ".mov",
        ".exe",
        ".dll",
        ".so",
    }
)

# Relative to the application install root, probed in order.
RIPGREP_CANDIDATE_DIRS: tuple[tuple[str, ...], ...] = (
    ("node_modules.asar.unpacked", "@vscode", "ripgrep", "bin"),
    ("node_modules", "@vscode", "ripgrep", "bin"),
)

# ripgrep: 0 = matches found, 1 = no matches. Anything else is a failure.
RIPGREP_OK_EXIT_CODES: frozenset[int] = frozenset({0, 1})


class EntryKind(StrEnum):
    """Kind of a directory entry, resolved once when the directory is listed."""

    FILE = "file"
    DIRECTORY = "directory"


class ContentStrategy(StrEnum):
    """Which content searcher served a query."""

    RIPGREP = "ripgrep"
    FALLBACK = "fallback"


class StopReason(StrEnum):
    CANCELLED = "cancelled"
    TIMEOUT = "timeout"
