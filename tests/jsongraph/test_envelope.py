from __future__ import annotations

import pytest

from pathgraph.errors import InvalidArgumentError
from pathgraph.jsongraph import (
    Atom,
    ErrorValue,
    GraphEnvelope,
    Invalidation,
    PathValue,
    Range,
    Ref,
    assemble,
    atom,
    error,
    ref,
)


def test_flatten_returns_inserted_path_values():
    items = [
        PathValue(("titlesById", 1, "name"), "A"),
        PathValue(("titlesById", 1, "year"), 1999),
        PathValue(("genrelist", 0, "titles", 0), ref("titlesById", 1)),
    ]
    envelope = GraphEnvelope.from_path_values(items)

    assert envelope.flatten() == items
    assert envelope.get(("titlesById", 1)) == {"name": "A", "year": 1999}
    assert envelope.get(("titlesById", 2), "absent") == "absent"


def test_later_writes_replace_overlapping_values():
    envelope = GraphEnvelope()
    envelope.set(("titlesById", 1), error("boom"))
    envelope.set(("titlesById", 1, "name"), "A")
    assert envelope.flatten() == [PathValue(("titlesById", 1, "name"), "A")]

    envelope.set(("titlesById", 1), atom())
    assert envelope.flatten() == [PathValue(("titlesById", 1), Atom(None))]


def test_set_rejects_the_empty_path():
    with pytest.raises(InvalidArgumentError):
        GraphEnvelope().set((), 1)


def test_to_json_uses_type_markers_and_ranges():
    envelope = GraphEnvelope.from_path_values(
        [
            PathValue(("genrelist", 0, "titles", 0), Ref(("titlesById", 7))),
            PathValue(("genrelist", 0, "name"), atom()),
            PathValue(("titlesById", 9), ErrorValue("down")),
            Invalidation(("genrelist", 0, "titles", Range(1, 3)), reason="shifted"),
        ]
    )

    payload = envelope.to_json()

    assert payload["jsonGraph"] == {
        "genrelist": {
            "0": {
                "titles": {"0": {"$type": "ref", "value": ["titlesById", 7]}},
                "name": {"$type": "atom"},
            }
        },
        "titlesById": {"9": {"$type": "error", "value": "down"}},
    }
    assert payload["invalidated"] == [
        ["genrelist", 0, "titles", {"from": 1, "to": 3}]
    ]


def test_from_json_decodes_leaves_and_integer_keys():
    envelope = GraphEnvelope.from_json(
        {
            "jsonGraph": {
                "titlesById": {
                    "523": {"userRating": 4, "name": {"$type": "atom", "value": "X"}},
                    "07": {"userRating": 1},
                }
            },
            "paths": [["titlesById", {"from": 1, "length": 2}, "userRating"]],
        }
    )

    assert envelope.get(("titlesById", 523, "userRating")) == 4
    assert envelope.get(("titlesById", 523, "name")) == Atom("X")
    assert envelope.get(("titlesById", "07", "userRating")) == 1
    assert envelope.paths == [("titlesById", Range(1, 2), "userRating")]


@pytest.mark.parametrize(
    "payload",
    [
        {"jsonGraph": []},
        {"jsonGraph": {"a": {"$type": "mystery"}}},
        {"jsonGraph": {"a": [1, 2]}},
        {"jsonGraph": {}, "paths": "nope"},
        {"jsonGraph": {}, "paths": [["a", {"from": 1}]]},
    ],
)
def test_from_json_rejects_malformed_payloads(payload):
    with pytest.raises(InvalidArgumentError):
        GraphEnvelope.from_json(payload)


def test_assemble_mixes_envelopes_and_sequences():
    first = GraphEnvelope.from_path_values([PathValue(("genrelist", "length"), 2)])
    out = assemble(
        [
            first,
            [PathValue(("genrelist", 0, "name"), "Drama")],
            Invalidation(("genrelist", 0, "titles", Range(0, 1))),
        ]
    )

    assert out.flatten() == [
        PathValue(("genrelist", "length"), 2),
        PathValue(("genrelist", 0, "name"), "Drama"),
    ]
    assert out.invalidated == [("genrelist", 0, "titles", Range(0, 1))]
    assert Invalidation(("genrelist", 0, "titles", Range(0, 1))) in out.items()
