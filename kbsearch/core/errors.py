"""Errors raised by configuration and registry operations.

The search path itself never raises these; they signal caller mistakes when
editing the repository list or loading settings.
"""


class KBSearchError(Exception):
    """Base class for kbsearch errors."""


class RepositoryExistsError(KBSearchError):
    def __init__(self, name: str):
        super().__init__(f"Repository already exists: {name}")
        self.name = name


class RepositoryNotFoundError(KBSearchError):
    def __init__(self, root_path: str):
        super().__init__(f"Repository not configured: {root_path}")
        self.root_path = root_path


class SettingsFileError(KBSearchError):
    """Settings file exists but cannot be read or parsed."""
