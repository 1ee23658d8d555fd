"""Filter, order and limit helpers used by collection-backed adapters.

Predicates are either a mapping of field name to required value (every field
must be loosely equal, nested mappings match partially) or a callable taking
a record. Order strings are comma-separated ``"field direction"`` pairs, for
example ``"age desc, name asc"``.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Iterable, Mapping, Sequence
from typing import Any

from pymodelsync.merge import loose_equal

Predicate = Mapping[str, Any] | Callable[[Any], bool]

_DESCENDING = frozenset({"desc", "descending"})


def matches(record: Any, where: Predicate) -> bool:
    """Return ``True`` when *record* satisfies *where*."""
    if callable(where):
        return bool(where(record))
    if not isinstance(record, Mapping):
        return False
    for field, expected in where.items():
        if field not in record:
            return False
        actual = record[field]
        if isinstance(expected, Mapping):
            if not isinstance(actual, Mapping) or not matches(actual, expected):
                return False
        elif not loose_equal(actual, expected):
            return False
    return True


def key_where(field: str, value: Any) -> Callable[[Any], bool]:
    """Predicate matching records whose *field* loosely equals *value*."""

    def _where(record: Any) -> bool:
        return isinstance(record, Mapping) and loose_equal(record.get(field), value)

    return _where


def key_in(field: str, values: Iterable[Any]) -> Callable[[Any], bool]:
    """Predicate matching records whose *field* is loosely in *values*."""
    wanted = list(values)

    def _where(record: Any) -> bool:
        if not isinstance(record, Mapping) or field not in record:
            return False
        actual = record[field]
        return any(loose_equal(actual, value) for value in wanted)

    return _where


def like_pattern(field: str, pattern: str) -> Callable[[Any], bool]:
    """SQL ``LIKE`` style predicate (``%`` and ``_`` wildcards, case-insensitive)."""
    parts = []
    for char in pattern:
        if char == "%":
            parts.append(".*")
        elif char == "_":
            parts.append(".")
        else:
            parts.append(re.escape(char))
    compiled = re.compile("".join(parts), re.IGNORECASE | re.DOTALL)

    def _where(record: Any) -> bool:
        if not isinstance(record, Mapping) or record.get(field) is None:
            return False
        return compiled.fullmatch(str(record[field])) is not None

    return _where


def parse_order(order: Any) -> list[tuple[str, bool]]:
    """Parse an order string into ``(field, descending)`` pairs.

    Anything that is not a string yields no ordering. Unknown directions
    sort ascending.
    """
    if not isinstance(order, str):
        return []
    pairs: list[tuple[str, bool]] = []
    for chunk in order.split(","):
        tokens = chunk.split()
        if not tokens:
            continue
        direction = tokens[1].lower() if len(tokens) > 1 else "asc"
        pairs.append((tokens[0], direction in _DESCENDING))
    return pairs


def _sort_pass(records: list[Any], field: str, descending: bool) -> list[Any]:
    present = [r for r in records if isinstance(r, Mapping) and r.get(field) is not None]
    missing = [r for r in records if not (isinstance(r, Mapping) and r.get(field) is not None)]
    try:
        present.sort(key=lambda r: r[field], reverse=descending)
    except TypeError:
        present.sort(key=lambda r: str(r[field]), reverse=descending)
    # Records lacking the field always sort last.
    return present + missing


def order_records(records: Sequence[Any], order: Any) -> list[Any]:
    """Stable multi-key sort of *records* by an order string."""
    result = list(records)
    for field, descending in reversed(parse_order(order)):
        result = _sort_pass(result, field, descending)
    return result


def select(records: Sequence[Any], where: Any = None, order: Any = None, limit: Any = 0) -> list[Any]:
    """Filter, order and truncate *records*.

    A malformed ``where`` matches everything and a malformed ``limit`` means
    no limit.
    """
    if not (isinstance(where, Mapping) or callable(where)):
        where = {}
    if not isinstance(limit, int) or isinstance(limit, bool):
        limit = 0

    result = [record for record in records if matches(record, where)]
    if order:
        result = order_records(result, order)
    if limit > 0:
        result = result[:limit]
    return result
