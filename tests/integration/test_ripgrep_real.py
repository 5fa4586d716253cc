import shutil

import pytest

from kbsearch.contracts.search_v1 import ConfigSnapshot, RepositoryRef, SearchQuery
from kbsearch.search.backends.ripgrep import RipgrepSearcher
from kbsearch.search.orchestrator import SearchOrchestrator

RG = shutil.which("rg")

pytestmark = pytest.mark.skipif(RG is None, reason="ripgrep not installed")


@pytest.fixture
def repository(repo_dir, make_file) -> RepositoryRef:
    make_file(repo_dir, "root.md", "keyword-in-root\n")
    make_file(repo_dir, "node_modules/skip.md", "keyword-in-node-modules\n")
    make_file(repo_dir, "docs/Guide.md", "intro\n  Keyword-In-Docs (a.b)\n")
    make_file(repo_dir, ".gitignore", "keyword-in-gitignore\n")
    return RepositoryRef(name="repo", root_path=str(repo_dir))


@pytest.mark.asyncio
async def test_real_ripgrep_honors_excludes_and_case(repository, repo_dir):
    searcher = RipgrepSearcher(candidates=[RG])
    results = await searcher.search("KEYWORD-in", repository, ["node_modules", ".git"])
    found = {(r.file_path, r.line_number, r.line_content) for r in results}
    assert (str(repo_dir / "root.md"), 1, "keyword-in-root") in found
    assert (str(repo_dir / "docs" / "Guide.md"), 2, "Keyword-In-Docs (a.b)") in found
    assert not any("node_modules" in path for path, _, _ in found)


@pytest.mark.asyncio
async def test_real_ripgrep_treats_term_literally(repository):
    searcher = RipgrepSearcher(candidates=[RG])
    assert await searcher.search("(a.b)", repository, []) != []
    assert await searcher.search("(a*b)", repository, []) == []


@pytest.mark.asyncio
async def test_orchestrator_with_real_ripgrep(repository, repo_dir):
    orchestrator = SearchOrchestrator(
        lambda: ConfigSnapshot(repositories=(repository,), exclude_patterns=("node_modules",)),
        external=RipgrepSearcher(candidates=[RG]),
    )
    response = await orchestrator.search(SearchQuery(term="guide"))
    assert [r.line_content for r in response.results] == ["[File] Guide.md"]
