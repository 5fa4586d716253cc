from __future__ import annotations

import pytest
from hypothesis import given
from hypothesis import strategies as st

from kbsearch.search.excludes import is_excluded

SEGMENT = st.text(
    alphabet=st.sampled_from("abcxyz.-_0123"), min_size=1, max_size=8
)
PATHS = st.lists(SEGMENT, min_size=1, max_size=5).map("/".join)


@pytest.mark.property
@given(pattern=SEGMENT, path=PATHS)
def test_plain_pattern_matches_exactly_on_segment_equality(pattern: str, path: str) -> None:
    assert is_excluded(path, pattern) == (pattern in path.split("/"))


@pytest.mark.property
@given(pattern=SEGMENT, suffix=SEGMENT, parents=st.lists(SEGMENT, max_size=3))
def test_plain_pattern_never_matches_longer_name(
    pattern: str, suffix: str, parents: list[str]
) -> None:
    parents = [p for p in parents if p != pattern]
    path = "/".join([*parents, pattern + suffix])
    assert is_excluded(path, pattern) is False


@pytest.mark.property
@given(path=PATHS, pattern=st.lists(SEGMENT, min_size=2, max_size=3).map("/".join))
def test_path_pattern_matches_only_exact_prefix_or_suffix(path: str, pattern: str) -> None:
    expected = (
        path == pattern
        or path.startswith(pattern + "/")
        or path.endswith("/" + pattern)
    )
    assert is_excluded(path, pattern) == expected


@pytest.mark.property
@given(name=SEGMENT, parents=st.lists(SEGMENT, max_size=3), extra=SEGMENT)
def test_extension_wildcard_only_matches_at_segment_end(
    name: str, parents: list[str], extra: str
) -> None:
    # SEGMENT's alphabet has no "p", "n" or "g", so ".png" only appears where appended.
    base = "/".join([*parents, name])
    assert is_excluded(base + ".png", "*.png") is True
    assert is_excluded(base + ".png" + extra, "*.png") is False
    assert is_excluded(base + ".png/" + extra, "*.png") is True
