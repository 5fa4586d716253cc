from __future__ import annotations

import pytest
from hypothesis import given
from hypothesis import strategies as st

from kbsearch.contracts.search_v1 import MatchResult
from kbsearch.search.merge import merge_results


def _match(path: str, line: int, content: str, repo: str = "repo") -> MatchResult:
    return MatchResult(
        repository_name=repo,
        repository_path="/r",
        file_path=path,
        line_number=line,
        line_content=content,
        match_context=content,
    )


def test_content_first_then_new_file_name_matches():
    content = [_match("/r/a.md", 3, "hit"), _match("/r/b.md", 1, "hit")]
    names = [_match("/r/c.md", 1, "[File] c.md")]
    assert merge_results(content, names) == content + names


def test_content_wins_on_collision():
    content = [_match("/r/a.md", 1, "[File] a.md", repo="content")]
    names = [_match("/r/a.md", 1, "[File] a.md", repo="names")]
    merged = merge_results(content, names)
    assert len(merged) == 1
    assert merged[0].repository_name == "content"


def test_same_file_different_line_is_kept():
    content = [_match("/r/a.md", 1, "a.md mentioned")]
    names = [_match("/r/a.md", 1, "[File] a.md")]
    assert len(merge_results(content, names)) == 2


def test_duplicate_content_from_nested_roots_collapses():
    content = [_match("/r/sub/a.md", 2, "x", repo="outer"), _match("/r/sub/a.md", 2, "x", repo="inner")]
    merged = merge_results(content, [])
    assert [m.repository_name for m in merged] == ["outer"]


def test_empty_inputs():
    assert merge_results([], []) == []


MATCHES = st.builds(
    _match,
    path=st.sampled_from(["/r/a.md", "/r/b.md", "/r/c.md"]),
    line=st.integers(min_value=1, max_value=3),
    content=st.sampled_from(["x", "y", "[File] a.md"]),
)


@pytest.mark.property
@given(content=st.lists(MATCHES, max_size=8), names=st.lists(MATCHES, max_size=8))
def test_merge_never_duplicates_and_is_idempotent(content, names):
    merged = merge_results(content, names)
    keys = [m.identity_key for m in merged]
    assert len(keys) == len(set(keys))
    assert merge_results(merged, names) == merged
    assert merge_results(merged, []) == merged
    # Every input key survives.
    assert set(keys) == {m.identity_key for m in [*content, *names]}
