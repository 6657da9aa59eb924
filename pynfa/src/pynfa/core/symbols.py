"""
SymbolGroup: an immutable set of input symbols used as one transition label.

Symbols are stored as a sorted, read-only array of code points. The empty
symbol (written ``ε`` or ``~``) is stored as -1, so it always sorts first.

Grammar accepted by the constructor (tokens separated by a delimiter,
unescaped whitespace ignored):

- a literal character, e.g. ``a``
- a backslash escape: ``\\n \\r \\t \\f \\v``; any other escaped character
  stands for itself (``\\\\``, ``\\,``, ``\\-``, ``\\~``, ``\\ε``)
- ``␣`` for a space
- ``ε`` or ``~`` for the empty symbol
- a range ``x-y`` inside one of ``RANGE_BLOCKS``
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator

import numpy as np

from pynfa.core.types import SymbolParseError

EMPTY_POINT = -1
DEFAULT_DELIMITER = ", "

# Inclusive code point blocks a range may span.
RANGE_BLOCKS: tuple[tuple[int, int], ...] = (
    (ord("0"), ord("9")),
    (ord("A"), ord("Z")),
    (ord("a"), ord("z")),
    (0x0391, 0x03A9),  # Greek capitals
    (0x03B1, 0x03C9),  # Greek small letters
    (0x0410, 0x042F),  # Cyrillic capitals
    (0x0430, 0x044F),  # Cyrillic small letters
)

_ESCAPES = {"n": "\n", "r": "\r", "t": "\t", "f": "\f", "v": "\v"}
_TO_ESCAPE = {
    "\\": "\\\\",
    ",": "\\,",
    "-": "\\-",
    "~": "\\~",
    "ε": "\\ε",
    " ": "␣",
    "\n": "\\n",
    "\r": "\\r",
    "\t": "\\t",
    "\f": "\\f",
    "\v": "\\v",
}
_EMPTY_TOKENS = frozenset({"~", "ε"})
_SPACE_TOKEN = "␣"
_WHITESPACE = frozenset(" \t\n\r\f\v")
_UNESCAPABLE = frozenset(_ESCAPES) | {_SPACE_TOKEN}


def _block_of(point: int) -> tuple[int, int] | None:
    for block in RANGE_BLOCKS:
        if block[0] <= point <= block[1]:
            return block
    return None


def _is_allowed(point: int) -> bool:
    if point == EMPTY_POINT or 0 <= point < 0x80:
        return True
    return _block_of(point) is not None


def _freeze(points: np.ndarray) -> np.ndarray:
    frozen = np.asarray(points, dtype=np.int64).copy()
    frozen.flags.writeable = False
    return frozen


def _point_of(symbol: str) -> int:
    if symbol == "":
        return EMPTY_POINT
    if len(symbol) != 1:
        raise SymbolParseError(f"symbol must be a single character, got {symbol!r}")
    return ord(symbol)


def _read_symbol(text: str, i: int) -> tuple[int, int]:
    c = text[i]
    if c == "\\":
        if i + 1 < len(text):
            escaped = text[i + 1]
            return ord(_ESCAPES.get(escaped, escaped)), i + 2
        return ord("\\"), i + 1
    if c in _EMPTY_TOKENS:
        return EMPTY_POINT, i + 1
    if c == _SPACE_TOKEN:
        return ord(" "), i + 1
    return ord(c), i + 1


def _skip_whitespace(text: str, i: int) -> int:
    while i < len(text) and text[i] in _WHITESPACE:
        i += 1
    return i


def _expand_range(start: int, end: int) -> range:
    if start == EMPTY_POINT or end == EMPTY_POINT:
        raise SymbolParseError("the empty symbol cannot bound a range")
    block = _block_of(start)
    if block is None or not (block[0] <= end <= block[1]):
        raise SymbolParseError(f"invalid range {chr(start)}-{chr(end)}: endpoints must share a range block")
    if start > end:
        raise SymbolParseError(f"invalid range {chr(start)}-{chr(end)}: start is after end")
    return range(start, end + 1)


def parse_symbols(text: str, delimiter: str = ",") -> np.ndarray:
    """
    Parse symbol text into a sorted, read-only array of code points.

    Args:
        text: Symbol text, e.g. ``"a-c, x, \\n"``. Empty text, ``"~"`` and
            ``"ε"`` denote the empty symbol; a single character is taken
            literally.
        delimiter: Single character separating tokens.

    Returns:
        np.ndarray of unique int64 code points, the empty symbol as -1.

    Raises:
        SymbolParseError: On disallowed characters or malformed ranges.
    """
    if len(delimiter) != 1:
        raise ValueError("delimiter must be a single character")

    points: set[int] = set()
    if len(text) == 1:
        points.add(_read_symbol(text, 0)[0])
    elif text.strip() == "":
        points.add(EMPTY_POINT)

    i = 0 if len(text) > 1 else len(text)
    while i < len(text):
        if text[i] in _WHITESPACE or text[i] == delimiter:
            i += 1
            continue

        point, i = _read_symbol(text, i)
        after = _skip_whitespace(text, i)
        if after < len(text) and text[after] == "-":
            end_at = _skip_whitespace(text, after + 1)
            if end_at < len(text) and text[end_at] != delimiter:
                end, i = _read_symbol(text, end_at)
                points.update(_expand_range(point, end))
                continue
        points.add(point)

    for point in points:
        if not _is_allowed(point):
            raise SymbolParseError(f"symbol {chr(point)!r} is not allowed")

    return _freeze(np.array(sorted(points), dtype=np.int64))


_NO_POINTS = _freeze(np.array([], dtype=np.int64))


class SymbolGroup:
    """
    Immutable set of input symbols, optionally including the empty symbol.

    ``SymbolGroup()`` matches nothing, ``SymbolGroup("")`` matches only the
    empty symbol.
    """

    __slots__ = ("_points",)

    def __init__(self, text: str | SymbolGroup | None = None, delimiter: str = ","):
        if isinstance(text, SymbolGroup):
            self._points = text._points
        elif text is None:
            self._points = _NO_POINTS
        else:
            self._points = parse_symbols(text, delimiter)

    @classmethod
    def _from_sorted(cls, points: np.ndarray) -> SymbolGroup:
        group = cls.__new__(cls)
        group._points = _freeze(points)
        return group

    @classmethod
    def from_symbols(cls, symbols: Iterable[str]) -> SymbolGroup:
        points = {_point_of(symbol) for symbol in symbols}
        for point in points:
            if not _is_allowed(point):
                raise SymbolParseError(f"symbol {chr(point)!r} is not allowed")
        return cls._from_sorted(np.array(sorted(points), dtype=np.int64))

    @classmethod
    def empty_symbol(cls) -> SymbolGroup:
        return cls._from_sorted(np.array([EMPTY_POINT], dtype=np.int64))

    @staticmethod
    def share_any(groups: Iterable[SymbolGroup]) -> bool:
        """Whether any two of the groups share a symbol."""
        arrays = [group._points for group in groups if group._points.size]
        if len(arrays) < 2:
            return False
        combined = np.concatenate(arrays)
        return bool(np.unique(combined).size < combined.size)

    @property
    def points(self) -> np.ndarray:
        return self._points

    @property
    def size(self) -> int:
        return int(self._points.size)

    @property
    def has_empty(self) -> bool:
        return bool(self._points.size and self._points[0] == EMPTY_POINT)

    def has(self, symbol: str) -> bool:
        if len(symbol) > 1:
            return False
        point = EMPTY_POINT if symbol == "" else ord(symbol)
        index = np.searchsorted(self._points, point)
        return bool(index < self._points.size and self._points[index] == point)

    def contains(self, other: SymbolGroup) -> bool:
        if other._points.size == 0:
            return True
        return bool(np.isin(other._points, self._points, assume_unique=True).all())

    def equals(self, other: SymbolGroup | None) -> bool:
        if other is None:
            return self._points.size == 0
        return self is other or bool(np.array_equal(self._points, other._points))

    def merge(self, *others: SymbolGroup) -> SymbolGroup:
        points = self._points
        for other in others:
            points = np.union1d(points, other._points)
        if points.size == self._points.size:
            return self
        return SymbolGroup._from_sorted(points)

    def subtract(self, *others: SymbolGroup) -> SymbolGroup:
        points = self._points
        for other in others:
            points = np.setdiff1d(points, other._points, assume_unique=True)
        if points.size == self._points.size:
            return self
        return SymbolGroup._from_sorted(points)

    def without_empty(self) -> SymbolGroup:
        if not self.has_empty:
            return self
        return SymbolGroup._from_sorted(self._points[1:])

    def to_string(self, delimiter: str = DEFAULT_DELIMITER, include_empty: bool = True) -> str:
        """
        Canonical text for the group.

        Runs of three or more consecutive symbols inside one range block are
        written as ``x-y`` when that is strictly shorter than listing them.
        Characters of the delimiter are escaped, so parsing the result with
        the same delimiter character reproduces the group.

        Raises:
            ValueError: If the delimiter contains an escape letter
                (``n r t f v``) or ``␣``, which cannot be escaped back.
        """
        reserved = {c for c in delimiter if c not in _WHITESPACE}
        if reserved & _UNESCAPABLE:
            raise ValueError(f"delimiter {delimiter!r} cannot be escaped in symbol text")
        points = self._points.tolist()
        tokens: list[str] = []

        i = 0
        while i < len(points):
            point = points[i]
            if point == EMPTY_POINT:
                if include_empty:
                    tokens.append("ε")
                i += 1
                continue

            j = i
            block = _block_of(point)
            if block is not None:
                while j + 1 < len(points) and points[j + 1] == points[j] + 1 and points[j + 1] <= block[1]:
                    j += 1

            run = [_escape(chr(p), reserved) for p in points[i : j + 1]]
            collapsed = f"{run[0]}-{run[-1]}"
            if len(run) >= 3 and len(collapsed) < len(delimiter.join(run)):
                tokens.append(collapsed)
            else:
                tokens.extend(run)
            i = j + 1

        return delimiter.join(tokens)

    def __contains__(self, symbol: object) -> bool:
        return isinstance(symbol, str) and self.has(symbol)

    def __iter__(self) -> Iterator[str]:
        for point in self._points.tolist():
            yield "" if point == EMPTY_POINT else chr(point)

    def __len__(self) -> int:
        return int(self._points.size)

    def __bool__(self) -> bool:
        return bool(self._points.size)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SymbolGroup):
            return NotImplemented
        return self.equals(other)

    def __hash__(self) -> int:
        return hash(self._points.tobytes())

    def __str__(self) -> str:
        return self.to_string()

    def __repr__(self) -> str:
        return f"SymbolGroup({self.to_string()!r})"


def _escape(symbol: str, reserved: set[str]) -> str:
    if symbol in _TO_ESCAPE:
        return _TO_ESCAPE[symbol]
    if symbol in reserved:
        return "\\" + symbol
    return symbol
