"""Record wrapper admitted into a model's store.

A :class:`Result` is a plain ``dict`` of the record's fields plus two
lifecycle hooks. Subclass it to attach behaviour to a model's records::

    class User(Result):
        def on_load(self) -> None:
            print("admitted", self.name)

        def greeting(self) -> str:
            return f"{self.fullname} says hello."

The model calls :meth:`on_load` once when the record is admitted into the
store and :meth:`on_remove` once when a delete evicts it.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from typing import Any


class Result(dict[str, Any]):
    """Identity-bearing record with admission/eviction hooks."""

    def __init__(self, data: Mapping[str, Any] | None = None, **fields: Any) -> None:
        super().__init__(data or {}, **fields)
        self._admitted = False
        self._evicted = False

    def __getattr__(self, name: str) -> Any:
        # Only reached when normal attribute lookup fails.
        try:
            return self[name]
        except KeyError:
            raise AttributeError(name) from None

    def on_load(self) -> None:
        """Called once, when the record is admitted into the store."""

    def on_remove(self) -> None:
        """Called once, when the record is evicted by a delete."""

    @property
    def admitted(self) -> bool:
        return self._admitted

    @property
    def evicted(self) -> bool:
        return self._evicted

    def admit(self) -> bool:
        """Fire :meth:`on_load` unless it already ran. Returns whether it fired."""
        if self.admitted:
            return False
        self._admitted = True
        self.on_load()
        return True

    def evict(self) -> bool:
        """Fire :meth:`on_remove` unless it already ran. Returns whether it fired."""
        if self.evicted:
            return False
        self._evicted = True
        self.on_remove()
        return True

    def value_of(self) -> dict[str, Any]:
        """Plain snapshot of the record's own fields."""
        return dict(self)

    def __str__(self) -> str:
        return json.dumps(self, default=str)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({dict.__repr__(self)})"


def is_result(value: Any) -> bool:
    return isinstance(value, Result)


def wrap(data: Any, result_model: type[Result] = Result) -> Any:
    """Wrap a record, or each record of a list, into *result_model*.

    Already wrapped records are returned untouched. Lists are updated in
    place. Anything that is neither a mapping nor a list is returned as is.
    """
    if isinstance(data, list):
        for index, item in enumerate(data):
            data[index] = wrap(item, result_model)
        return data
    if isinstance(data, Result) or not isinstance(data, Mapping):
        return data
    return result_model(data)
