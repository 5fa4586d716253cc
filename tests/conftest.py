import os
from collections.abc import Sequence
from pathlib import Path

import pytest

# Must be set before kbsearch.core.config is imported by any test module.
os.environ.setdefault("KBSEARCH_LOG_FILE", "0")


def pytest_addoption(parser: pytest.Parser) -> None:
    parser.addoption(
        "--run-integration",
        action="store_true",
        default=False,
        help="Run integration tests that require a real ripgrep binary.",
    )


def pytest_configure(config: pytest.Config) -> None:
    config.addinivalue_line(
        "markers", "integration: requires runtime tools installed on the host"
    )
    config.addinivalue_line("markers", "property: property-based deterministic tests")


def pytest_collection_modifyitems(
    config: pytest.Config,
    items: Sequence[pytest.Item],
) -> None:
    run_integration = config.getoption("--run-integration")
    skip_integration = pytest.mark.skip(
        reason="integration is opt-in; rerun with --run-integration"
    )

    for item in items:
        if "tests/integration/" in item.nodeid:
            item.add_marker("integration")
        if item.get_closest_marker("integration") and not run_integration:
            item.add_marker(skip_integration)


def write_file(root: Path, relative: str, content: str | bytes) -> Path:
    path = root / relative
    path.parent.mkdir(parents=True, exist_ok=True)
    if isinstance(content, bytes):
        path.write_bytes(content)
    else:
        path.write_text(content, encoding="utf-8")
    return path


@pytest.fixture
def repo_dir(tmp_path: Path) -> Path:
    root = tmp_path / "repo"
    root.mkdir()
    return root


@pytest.fixture
def make_file():
    return write_file
