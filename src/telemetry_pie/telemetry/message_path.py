"""Message path parsing and payload extraction.

A message path names a topic followed by a chain of operations that select
a numeric vector inside each message payload::

    /diagnostics.cpu_load
    /robot/state.joints[0:5].effort
    "/ns.with.dots".markers{id==3}.weights

``[n]`` selects one element, ``[a:b]`` is an inclusive slice and
``{field==literal}`` keeps the elements whose ``field`` equals ``literal``.
Slice bounds and filter operands may reference ``$variables``; those paths
parse successfully but are flagged through :attr:`ParsedPath.uses_variables`
because the extractor has no variable scope to resolve them against.
"""

from __future__ import annotations

import array
import numbers
import re
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any, ClassVar, Union

import numpy as np

from telemetry_pie.errors import ExtractionError, PathParseError

__all__ = [
    "FieldAccess",
    "FilterOperation",
    "ParsedPath",
    "PathOperation",
    "SliceOperation",
    "Variable",
    "get_path_value",
    "parse_message_path",
]


_TOPIC_RE = re.compile(r"[^.\[{}\]\s\"]+")
_NAME_RE = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")
_VARIABLE_RE = re.compile(r"\$([A-Za-z_][A-Za-z0-9_]*)")
_INT_RE = re.compile(r"[+-]?\d+")
_FLOAT_RE = re.compile(r"[+-]?(\d+\.\d*|\.\d+|\d+)([eE][+-]?\d+)?")


@dataclass(frozen=True, slots=True)
class Variable:
    """Reference to a runtime-provided value (``$name``)."""

    name: str

    def __str__(self) -> str:
        return f"${self.name}"


Literal = Union[int, float, str, bool]


@dataclass(frozen=True, slots=True)
class FieldAccess:
    name: str

    kind: ClassVar[str] = "field"

    @property
    def is_dynamic(self) -> bool:
        return False


@dataclass(frozen=True, slots=True)
class SliceOperation:
    """Inclusive ``[start:end]`` range, or a single index when ``single``."""

    start: int | Variable | None
    end: int | Variable | None
    single: bool = False

    kind: ClassVar[str] = "slice"

    @property
    def is_dynamic(self) -> bool:
        return isinstance(self.start, Variable) or isinstance(self.end, Variable)


@dataclass(frozen=True, slots=True)
class FilterOperation:
    path: tuple[str, ...]
    value: Literal | Variable

    kind: ClassVar[str] = "filter"

    @property
    def is_dynamic(self) -> bool:
        return isinstance(self.value, Variable)


PathOperation = Union[FieldAccess, SliceOperation, FilterOperation]


@dataclass(frozen=True, slots=True)
class ParsedPath:
    """Topic name plus the ordered operations applied to its payload."""

    topic_name: str
    operations: tuple[PathOperation, ...]
    text: str = ""

    @property
    def uses_variables(self) -> bool:
        return any(operation.is_dynamic for operation in self.operations)


class _Cursor:
    __slots__ = ("text", "pos")

    def __init__(self, text: str) -> None:
        self.text = text
        self.pos = 0

    def at_end(self) -> bool:
        return self.pos >= len(self.text)

    def peek(self) -> str:
        return self.text[self.pos] if self.pos < len(self.text) else ""

    def fail(self, message: str) -> PathParseError:
        return PathParseError(message, text=self.text, column=self.pos + 1)

    def match(self, pattern: re.Pattern[str]) -> str | None:
        found = pattern.match(self.text, self.pos)
        if found is None:
            return None
        self.pos = found.end()
        return found.group(0)

    def read_until(self, terminator: str) -> str:
        end = self.text.find(terminator, self.pos)
        if end < 0:
            raise self.fail(f"Expected {terminator!r}")
        chunk = self.text[self.pos:end]
        self.pos = end + 1
        return chunk


def _parse_topic(cursor: _Cursor) -> str:
    if cursor.peek() == '"':
        cursor.pos += 1
        topic = cursor.read_until('"')
    else:
        topic = cursor.match(_TOPIC_RE) or ""
    if not topic:
        raise cursor.fail("Message path must start with a topic name")
    return topic


def _parse_bound(raw: str, cursor: _Cursor) -> int | Variable | None:
    raw = raw.strip()
    if not raw:
        return None
    variable = _VARIABLE_RE.fullmatch(raw)
    if variable:
        return Variable(variable.group(1))
    if _INT_RE.fullmatch(raw):
        return int(raw)
    raise cursor.fail(f"Invalid slice bound {raw!r}")


def _parse_literal(raw: str, cursor: _Cursor) -> Literal | Variable:
    raw = raw.strip()
    variable = _VARIABLE_RE.fullmatch(raw)
    if variable:
        return Variable(variable.group(1))
    if raw in ("true", "false"):
        return raw == "true"
    if len(raw) >= 2 and raw[0] == raw[-1] and raw[0] in "\"'":
        return raw[1:-1]
    if _INT_RE.fullmatch(raw):
        return int(raw)
    if _FLOAT_RE.fullmatch(raw):
        return float(raw)
    raise cursor.fail(f"Invalid filter value {raw!r}")


def _parse_slice(cursor: _Cursor) -> SliceOperation:
    body = cursor.read_until("]")
    if ":" in body:
        start_raw, _, end_raw = body.partition(":")
        return SliceOperation(_parse_bound(start_raw, cursor), _parse_bound(end_raw, cursor))
    index = _parse_bound(body, cursor)
    if index is None:
        raise cursor.fail("Empty index")
    return SliceOperation(index, index, single=True)


def _parse_filter(cursor: _Cursor) -> FilterOperation:
    body = cursor.read_until("}")
    lhs, sep, rhs = body.partition("==")
    if not sep:
        raise cursor.fail("Filters must use '=='")
    names = tuple(part.strip() for part in lhs.split("."))
    if not names or not all(_NAME_RE.fullmatch(name) for name in names):
        raise cursor.fail(f"Invalid filter field {lhs.strip()!r}")
    return FilterOperation(names, _parse_literal(rhs, cursor))


def parse_message_path(text: str) -> ParsedPath:
    """Parse ``text`` into a :class:`ParsedPath`.

    Raises :class:`~telemetry_pie.errors.PathParseError` when the text is
    empty or malformed.
    """

    source = (text or "").strip()
    cursor = _Cursor(source)
    topic = _parse_topic(cursor)

    operations: list[PathOperation] = []
    while not cursor.at_end():
        token = cursor.peek()
        cursor.pos += 1
        if token == ".":
            name = cursor.match(_NAME_RE)
            if name is None:
                raise cursor.fail("Expected a field name after '.'")
            operations.append(FieldAccess(name))
        elif token == "[":
            operations.append(_parse_slice(cursor))
        elif token == "{":
            operations.append(_parse_filter(cursor))
        else:
            cursor.pos -= 1
            raise cursor.fail(f"Unexpected character {token!r}")
    return ParsedPath(topic, tuple(operations), source)


def _is_sequence(value: Any) -> bool:
    if isinstance(value, (str, bytes, bytearray, Mapping)):
        return False
    return isinstance(value, (Sequence, np.ndarray, array.array, memoryview))


def _child(value: Any, name: str) -> Any:
    if isinstance(value, Mapping):
        try:
            return value[name]
        except KeyError:
            raise ExtractionError(f"Field {name!r} not found") from None
    try:
        return getattr(value, name)
    except AttributeError:
        raise ExtractionError(
            f"Field {name!r} not found on {type(value).__name__}"
        ) from None


def _lookup(value: Any, path: Sequence[str]) -> Any:
    for name in path:
        value = _child(value, name)
    return value


def _resolve_bound(bound: int | Variable | None, default: int) -> int:
    if bound is None:
        return default
    if isinstance(bound, Variable):
        raise ExtractionError(f"Unresolved variable {bound}")
    return bound


def _apply_slice(value: Any, operation: SliceOperation) -> list[Any]:
    if not _is_sequence(value):
        raise ExtractionError(f"Cannot index into {type(value).__name__}")
    length = len(value)
    if operation.single:
        index = _resolve_bound(operation.start, 0)
        try:
            return [value[index]]
        except IndexError:
            raise ExtractionError(f"Index {index} out of range for length {length}") from None
    start = _resolve_bound(operation.start, 0)
    end = _resolve_bound(operation.end, length - 1)
    return list(value[start:end + 1])


def _matches(value: Any, operation: FilterOperation) -> bool:
    if isinstance(operation.value, Variable):
        raise ExtractionError(f"Unresolved variable {operation.value}")
    try:
        candidate = _lookup(value, operation.path)
    except ExtractionError:
        return False
    if isinstance(candidate, np.generic):
        candidate = candidate.item()
    return bool(candidate == operation.value)


def _as_vector(values: Any) -> np.ndarray:
    if isinstance(values, (str, bytes, bytearray)) or (
        isinstance(values, list) and any(isinstance(item, (str, bytes)) for item in values)
    ):
        raise ExtractionError("Expected numeric data, got text")
    try:
        vector = np.array(values, dtype=np.float64)
    except (TypeError, ValueError) as exc:
        raise ExtractionError(f"Expected numeric data: {exc}") from exc
    if vector.ndim == 0:
        vector = vector.reshape(1)
    if vector.ndim != 1:
        raise ExtractionError(f"Expected a one-dimensional vector, got shape {vector.shape}")
    if not np.all(np.isfinite(vector)):
        raise ExtractionError("Vector contains non-finite values")
    return vector


def get_path_value(payload: Any, path: ParsedPath) -> np.ndarray | None:
    """Extract the numeric vector selected by ``path`` from ``payload``.

    Returns ``None`` when a filter drops every candidate, which callers
    treat as "no value in this message". Raises
    :class:`~telemetry_pie.errors.ExtractionError` when the payload shape
    does not match the path.
    """

    items: list[Any] = [payload]
    for operation in path.operations:
        if isinstance(operation, FieldAccess):
            items = [_child(item, operation.name) for item in items]
        elif isinstance(operation, SliceOperation):
            selected: list[Any] = []
            for item in items:
                selected.extend(_apply_slice(item, operation))
            items = selected
        else:
            kept: list[Any] = []
            for item in items:
                if _is_sequence(item):
                    kept.extend(element for element in item if _matches(element, operation))
                elif _matches(item, operation):
                    kept.append(item)
            items = kept
        if not items:
            return None

    if len(items) == 1 and not isinstance(items[0], numbers.Real):
        (value,) = items
        if _is_sequence(value):
            return _as_vector(value)
        raise ExtractionError(f"Expected numeric data, got {type(value).__name__}")
    if not all(isinstance(item, numbers.Real) for item in items):
        raise ExtractionError("Expected every selected element to be numeric")
    return _as_vector(items)
