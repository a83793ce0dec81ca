"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Path syntax parsing and pathset helpers.

Supported syntax::

    genrelist[0].name
    titlesById[523, 829]['name', "year"]
    genrelist[0..2].titles[0...10]

``a..b`` is inclusive, ``a...b`` excludes ``b``. Route tokens such as
``{integers}`` belong to the router and are rejected here.
"""

from __future__ import annotations

import itertools
import re
from collections.abc import Iterable, Iterator, Sequence

from ..errors import InvalidArgumentError
from ..types import Path, PathKey
from .values import Invalidation, KeySet, PathSet, PathValue, Range

_IDENT = re.compile(r"[A-Za-z_$][\w$]*")
_INT = re.compile(r"-?\d+")


class _Scanner:
    def __init__(self, text: str) -> None:
        self.text = text
        self.pos = 0

    def fail(self, message: str) -> InvalidArgumentError:
        return InvalidArgumentError(
            f"{message} at position {self.pos} in path {self.text!r}"
        )

    def skip_ws(self) -> None:
        while self.pos < len(self.text) and self.text[self.pos].isspace():
            self.pos += 1

    def peek(self) -> str:
        return self.text[self.pos] if self.pos < len(self.text) else ""

    def startswith(self, token: str) -> bool:
        return self.text.startswith(token, self.pos)

    def expect(self, token: str) -> None:
        self.skip_ws()
        if not self.startswith(token):
            raise self.fail(f"Expected {token!r}")
        self.pos += len(token)

    def match(self, pattern: re.Pattern[str]) -> str | None:
        found = pattern.match(self.text, self.pos)
        if found is None:
            return None
        self.pos = found.end()
        return found.group(0)


def _read_quoted(scanner: _Scanner) -> str:
    quote = scanner.peek()
    scanner.pos += 1
    chars: list[str] = []
    while True:
        ch = scanner.peek()
        if not ch:
            raise scanner.fail("Unterminated string")
        scanner.pos += 1
        if ch == "\\":
            escaped = scanner.peek()
            if not escaped:
                raise scanner.fail("Unterminated escape")
            chars.append(escaped)
            scanner.pos += 1
            continue
        if ch == quote:
            return "".join(chars)
        chars.append(ch)


def _read_item(scanner: _Scanner) -> PathKey | Range:
    scanner.skip_ws()
    ch = scanner.peek()
    if ch in ("'", '"'):
        return _read_quoted(scanner)
    if ch == "{":
        raise scanner.fail("Route tokens are not valid in concrete paths")
    number = scanner.match(_INT)
    if number is None:
        ident = scanner.match(_IDENT)
        if ident is None:
            raise scanner.fail("Expected key")
        return ident
    start = int(number)
    if scanner.startswith("..."):
        scanner.pos += 3
        end = scanner.match(_INT)
        if end is None:
            raise scanner.fail("Expected range end")
        return Range(start, int(end) - 1)
    if scanner.startswith(".."):
        scanner.pos += 2
        end = scanner.match(_INT)
        if end is None:
            raise scanner.fail("Expected range end")
        return Range(start, int(end))
    return start


def _read_indexer(scanner: _Scanner) -> KeySet:
    scanner.expect("[")
    items: list[PathKey | Range] = [_read_item(scanner)]
    scanner.skip_ws()
    while scanner.peek() == ",":
        scanner.pos += 1
        items.append(_read_item(scanner))
        scanner.skip_ws()
    scanner.expect("]")
    if len(items) == 1:
        return items[0]
    return items


def parse_path(text: str) -> PathSet:
    """Parse path syntax into a pathset tuple."""
    scanner = _Scanner(text)
    out: list[KeySet] = []
    scanner.skip_ws()
    if not scanner.peek():
        raise InvalidArgumentError("Path must be non-empty")

    while True:
        scanner.skip_ws()
        ch = scanner.peek()
        if not ch:
            break
        if ch == "[":
            out.append(_read_indexer(scanner))
            continue
        if out:
            if ch != ".":
                raise scanner.fail("Expected '.' or '['")
            scanner.pos += 1
            scanner.skip_ws()
        token = scanner.match(_IDENT) or scanner.match(_INT)
        if token is None:
            raise scanner.fail("Expected key")
        out.append(int(token) if _INT.fullmatch(token) else token)
    return tuple(out)


def as_pathset(value: str | Sequence[KeySet]) -> PathSet:
    """Accept path syntax or an already-structured pathset."""
    if isinstance(value, str):
        return parse_path(value)
    return tuple(value)


def keys_of(keyset: KeySet) -> list[PathKey]:
    """Flatten one pathset component into its concrete keys."""
    if isinstance(keyset, Range):
        return list(keyset)
    if isinstance(keyset, (str, int)):
        return [keyset]
    out: list[PathKey] = []
    for item in keyset:
        if isinstance(item, Range):
            out.extend(item)
        else:
            out.append(item)
    return out


def integer_keys(keyset: KeySet) -> list[int]:
    """Concrete keys of ``keyset``, all of which must be integers."""
    keys = keys_of(keyset)
    for key in keys:
        if isinstance(key, bool) or not isinstance(key, int):
            raise InvalidArgumentError(f"Expected integer key, got {key!r}")
    return keys  # type: ignore[return-value]


def expand_pathset(pathset: str | Sequence[KeySet]) -> Iterator[Path]:
    """Yield every concrete path described by ``pathset``."""
    components = [keys_of(part) for part in as_pathset(pathset)]
    for combo in itertools.product(*components):
        yield tuple(combo)


def is_prefix(prefix: Sequence[PathKey], path: Sequence[PathKey]) -> bool:
    """Return whether ``prefix`` equals ``path`` or is one of its ancestors."""
    return len(prefix) <= len(path) and tuple(path[: len(prefix)]) == tuple(prefix)


def covers(items: Iterable[PathValue | Invalidation], path: Sequence[PathKey]) -> bool:
    """Return whether some path value resolves ``path`` or one of its ancestors."""
    return any(
        isinstance(item, PathValue) and is_prefix(item.path, path) for item in items
    )


def format_path(path: Sequence[PathKey | Range]) -> str:
    """Render a concrete path (or invalidation path) in path syntax."""
    parts: list[str] = []
    for index, key in enumerate(path):
        if isinstance(key, Range):
            parts.append(f"[{key.start}..{key.end}]")
        elif isinstance(key, int):
            parts.append(f"[{key}]")
        elif _IDENT.fullmatch(key):
            parts.append(key if index == 0 else f".{key}")
        else:
            escaped = key.replace("\\", "\\\\").replace('"', '\\"')
            parts.append(f'["{escaped}"]')
    return "".join(parts)
