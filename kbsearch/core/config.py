"""Configuration from environment variables (.env)."""

import os
from pathlib import Path
from dataclasses import dataclass
from dotenv import load_dotenv

load_dotenv()

DEFAULT_EXCLUDE_PATTERNS = "node_modules,.git,.DS_Store,*.vsix,__pycache__"


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


def _env_list(name: str, default: str) -> list[str]:
    return [p.strip() for p in os.getenv(name, default).split(",") if p.strip()]


@dataclass
class Config:
    project_root: Path
    data_dir: Path
    logs_dir: Path
    settings_file: Path
    exclude_patterns: list[str]  # Global patterns, used when a repository has none
    ripgrep_path: str
    app_root: str
    ripgrep_from_path: bool
    max_concurrency: int
    search_timeout_seconds: float
    log_to_file: bool

    @classmethod
    def load(cls) -> "Config":
        project_root = Path(__file__).parent.parent.parent
        data_dir = project_root / "data"
        return cls(
            project_root=project_root,
            data_dir=data_dir,
            logs_dir=Path(os.getenv("KBSEARCH_LOGS_DIR", str(project_root / "logs"))),
            settings_file=Path(os.getenv("KBSEARCH_SETTINGS_FILE", str(data_dir / "repositories.json"))),
            exclude_patterns=_env_list("KBSEARCH_EXCLUDE_PATTERNS", DEFAULT_EXCLUDE_PATTERNS),
            ripgrep_path=os.getenv("KBSEARCH_RIPGREP_PATH", "").strip(),
            app_root=os.getenv("KBSEARCH_APP_ROOT", "").strip(),
            ripgrep_from_path=_env_bool("KBSEARCH_RIPGREP_FROM_PATH", True),
            max_concurrency=max(1, int(os.getenv("KBSEARCH_MAX_CONCURRENCY", "4"))),
            search_timeout_seconds=float(os.getenv("KBSEARCH_SEARCH_TIMEOUT", "30")),
            log_to_file=_env_bool("KBSEARCH_LOG_FILE", True),
        )

    def validate(self) -> list[str]:
        errors = []
        if self.search_timeout_seconds <= 0:
            errors.append(f"Search timeout must be positive: {self.search_timeout_seconds}")
        if self.ripgrep_path and not Path(self.ripgrep_path).exists():
            errors.append(f"Configured ripgrep not found: {self.ripgrep_path}")
        if self.app_root and not Path(self.app_root).is_dir():
            errors.append(f"App root is not a directory: {self.app_root}")
        return errors


config = Config.load()
