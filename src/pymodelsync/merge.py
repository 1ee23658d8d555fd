"""Merge engine: reconcile several record collections into one.

Two records are the same entity when their primary keys are loosely equal.
The record that was already known (the *existing* side of a merge) absorbs
the incoming fields and keeps its object identity, so callers holding a
reference see the update in place.
"""

from __future__ import annotations

import copy
import re
from collections.abc import Callable, Mapping, MutableMapping
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from pymodelsync.settings import KeySettings

MergeFunction = Callable[[Any, Any, "KeySettings"], list[Any]]
"""``merge(incoming, existing, keys) -> merged``."""

_INT_TEXT = re.compile(r"\s*[+-]?[0-9]+\s*")
_FLOAT_TEXT = re.compile(r"\s*[+-]?(?:[0-9]+(?:\.[0-9]*)?|\.[0-9]+)(?:[eE][+-]?[0-9]+)?\s*")


def _parse_like(text: str, number: int | float) -> int | float | None:
    """Parse *text* as the same numeric type as *number*, or ``None``."""
    if isinstance(number, int):
        return int(text) if _INT_TEXT.fullmatch(text) else None
    return float(text) if _FLOAT_TEXT.fullmatch(text) else None


def loose_equal(left: Any, right: Any) -> bool:
    """Compare two values allowing number/string coercion.

    Values of the same type compare exactly, so ``"01"`` and ``"1"`` differ
    and large integers never collapse through floats. A string only matches
    a number when it parses as that number's type: ``"1" == 1`` and
    ``"1.5" == 1.5``, but ``"1.0"`` does not match the int ``1``. Booleans
    are compared strictly so ``True`` never matches ``1``.
    """
    if left is None or right is None:
        return left is right
    if isinstance(left, bool) or isinstance(right, bool):
        return type(left) is type(right) and left == right
    if isinstance(left, str) and isinstance(right, (int, float)):
        left, right = right, left
    if isinstance(left, (int, float)) and isinstance(right, str):
        parsed = _parse_like(right, left)
        return parsed is not None and parsed == left
    return left == right


def primary_value(record: Any, keys: KeySettings) -> Any:
    """Return the record's primary key value, or ``None`` when undefined."""
    if not isinstance(record, Mapping):
        return None
    return record.get(keys.primary)


def deep_merge(target: MutableMapping[str, Any], source: Mapping[str, Any]) -> MutableMapping[str, Any]:
    """Merge *source* into *target* in place and return *target*.

    Nested mappings are merged recursively, everything else is replaced by a
    deep copy of the incoming value.
    """
    if target is source:
        return target
    for key, value in source.items():
        existing = target.get(key)
        if isinstance(value, Mapping) and isinstance(existing, MutableMapping):
            deep_merge(existing, value)
        else:
            target[key] = copy.deepcopy(value)
    return target


def _absorb(pool: list[Any], record: Any, keys: KeySettings) -> bool:
    """Merge *record* into the first pool entry with the same key.

    A record that is already in *pool* counts as absorbed without merging.
    """
    if any(candidate is record for candidate in pool):
        return True
    value = primary_value(record, keys)
    if value is None:
        return False
    for candidate in pool:
        if loose_equal(primary_value(candidate, keys), value):
            own = candidate[keys.primary]
            deep_merge(candidate, record)
            # A known record keeps its own key value.
            candidate[keys.primary] = own
            return True
    return False


def merge_collections(incoming: Any, existing: Any, keys: KeySettings) -> list[Any]:
    """Merge *incoming* records into *existing* ones.

    Returns ``existing`` as is, each record carrying the incoming fields for
    its key, followed by the incoming records that matched nothing (one per
    key). Duplicates already present in *existing* are left alone. Neither
    input list is mutated; the record objects of *existing* are. Non-list
    inputs yield ``[]``.
    """
    if not isinstance(incoming, list) or not isinstance(existing, list):
        return []

    merged = list(existing)
    remainder: list[Any] = []
    for record in incoming:
        if _absorb(merged, record, keys):
            continue
        if _absorb(remainder, record, keys):
            continue
        remainder.append(record)

    return merged + remainder


def reduce_collections(
    collections: list[Any],
    keys: KeySettings,
    merge: MergeFunction = merge_collections,
) -> list[Any]:
    """Reduce a list of collections right to left into a single one.

    The last two entries ``[..., x, y]`` are replaced by ``merge(y, x)``
    until one collection remains, so earlier collections keep record
    identity and later ones contribute fresher field values.
    """
    pending = list(collections)
    if not pending:
        return []
    while len(pending) > 1:
        existing, incoming = pending[-2], pending[-1]
        pending[-2:] = [merge(incoming, existing, keys)]
    result = pending[0]
    return result if isinstance(result, list) else []
