import json
import os

import pytest

from kbsearch.contracts.search_v1 import MatchResult, RepositoryRef, SearchResponse
from kbsearch.core.repositories import RepositoryRegistry
from kbsearch.interfaces.cli import format_response, run_browse, run_search


def _result(repo: str, name: str, line: int, content: str) -> MatchResult:
    root = f"/kb/{repo}"
    return MatchResult(
        repository_name=repo,
        repository_path=root,
        file_path=f"{root}/{name}",
        line_number=line,
        line_content=content,
    )


@pytest.fixture
def registry(repo_dir, make_file) -> RepositoryRegistry:
    make_file(repo_dir, "a.md", "unique-cli-term here")
    make_file(repo_dir, "docs/b.md", "nothing")
    make_file(repo_dir, "node_modules/c.md", "unique-cli-term hidden")
    return RepositoryRegistry(
        [RepositoryRef(name="repo", root_path=str(repo_dir))],
        exclude_patterns=["node_modules"],
    )


class TestFormat:
    def test_empty_response(self):
        assert format_response(SearchResponse(term="zzz")) == "No results for 'zzz'"

    def test_grouped_by_repository_in_first_seen_order(self):
        response = SearchResponse(
            term="x",
            results=[
                _result("notes", "a.md", 2, "x one"),
                _result("wiki", "b.md", 5, "x two"),
                _result("notes", "x.md", 1, "[File] x.md"),
            ],
        )
        assert format_response(response).splitlines() == [
            "notes (2)",
            "  a.md:2: x one",
            "  x.md:1: [File] x.md",
            "wiki (1)",
            "  b.md:5: x two",
        ]


class TestSearchCommand:
    @pytest.mark.asyncio
    async def test_empty_term_is_an_error(self, capsys):
        assert await run_search("   ", registry=RepositoryRegistry()) == 2
        assert "must not be empty" in capsys.readouterr().out

    @pytest.mark.asyncio
    async def test_text_output(self, registry, capsys):
        assert await run_search("unique-cli-term", registry=registry) == 0
        out = capsys.readouterr().out
        assert "repo (1)" in out
        assert "a.md:1: unique-cli-term here" in out
        assert "node_modules" not in out

    @pytest.mark.asyncio
    async def test_json_output(self, registry, repo_dir, capsys):
        assert await run_search("unique-cli-term", as_json=True, registry=registry) == 0
        payload = json.loads(capsys.readouterr().out)
        assert payload["term"] == "unique-cli-term"
        assert [r["filePath"] for r in payload["results"]] == [str(repo_dir / "a.md")]


class TestBrowseCommand:
    def test_lists_roots(self, registry, repo_dir, capsys):
        assert run_browse(registry=registry) == 0
        assert capsys.readouterr().out.strip() == f"repo\t{repo_dir}"

    def test_lists_children(self, registry, capsys):
        assert run_browse("repo", registry=registry) == 0
        assert capsys.readouterr().out.splitlines() == ["docs/", "a.md"]

    def test_lists_subdirectory(self, registry, capsys):
        assert run_browse("repo", "docs", registry=registry) == 0
        assert capsys.readouterr().out.splitlines() == [os.path.join("docs", "b.md")]

    def test_unknown_repository(self, registry, capsys):
        assert run_browse("nope", registry=registry) == 2
        assert "unknown repository" in capsys.readouterr().out

    def test_unlistable_directory(self, registry, capsys):
        assert run_browse("repo", "missing", registry=registry) == 1

