from __future__ import annotations

import pytest

from pathgraph.errors import InvalidArgumentError
from pathgraph.jsongraph import (
    PathValue,
    Range,
    atom,
    covers,
    expand_pathset,
    format_path,
    integer_keys,
    parse_path,
)


def test_parse_path_reads_dotted_and_indexed_forms():
    assert parse_path("genrelist[0].name") == ("genrelist", 0, "name")
    assert parse_path("genrelist.length") == ("genrelist", "length")
    assert parse_path("titlesById[523, 829]['name', \"year\"]") == (
        "titlesById",
        [523, 829],
        ["name", "year"],
    )


def test_parse_path_reads_inclusive_and_exclusive_ranges():
    assert parse_path("genrelist[0..2].titles[0...10]") == (
        "genrelist",
        Range(0, 2),
        "titles",
        Range(0, 9),
    )


def test_parse_path_keeps_escaped_quotes_in_keys():
    assert parse_path(r"""titlesById[1]["a\"b"]""") == ("titlesById", 1, 'a"b')


@pytest.mark.parametrize(
    "text",
    ["", "   ", "titlesById[{integers}]", "genrelist[0", "genrelist..name", "a['x]"],
)
def test_parse_path_rejects_malformed_input(text):
    with pytest.raises(InvalidArgumentError):
        parse_path(text)


def test_expand_pathset_yields_every_concrete_path():
    paths = list(expand_pathset("titlesById[1, 2][\"name\", \"year\"]"))

    assert paths == [
        ("titlesById", 1, "name"),
        ("titlesById", 1, "year"),
        ("titlesById", 2, "name"),
        ("titlesById", 2, "year"),
    ]
    assert list(expand_pathset(("genrelist", Range(0, 1), "name"))) == [
        ("genrelist", 0, "name"),
        ("genrelist", 1, "name"),
    ]


def test_integer_keys_rejects_strings_and_bools():
    assert integer_keys([1, Range(3, 4)]) == [1, 3, 4]
    with pytest.raises(InvalidArgumentError):
        integer_keys(["1"])
    with pytest.raises(InvalidArgumentError):
        integer_keys(True)


def test_covers_accepts_ancestor_values():
    items = [PathValue(("titlesById", 999), atom())]

    assert covers(items, ("titlesById", 999, "year"))
    assert not covers(items, ("titlesById", 9, "year"))


def test_format_path_renders_path_syntax():
    assert format_path(("genrelist", 0, "titles", Range(2, 4))) == "genrelist[0].titles[2..4]"
    assert format_path(("titlesById", 1, "box shot")) == 'titlesById[1]["box shot"]'
