"""Adapter base class.

An adapter exposes some subset of the capability catalog
(:data:`pymodelsync.capabilities.CAPABILITIES`). Every catalog method is
defined here and raises :class:`UnsupportedOperation`; subclasses override
the ones their source can serve, returning a value or an awaitable.

The base class also carries the collection primitives that list-backed
adapters (the store, caches) build on. They operate on a collection passed
in by the subclass and must be called with an adapter as ``self``.
"""

from __future__ import annotations

import functools
import logging
from collections.abc import Callable, Mapping
from typing import Any, ClassVar, TypeVar

from pymodelsync.capabilities import CAPABILITIES, OperationType
from pymodelsync.exceptions import ScopeError, UnsupportedOperation
from pymodelsync.merge import deep_merge
from pymodelsync.query import key_where, select
from pymodelsync.settings import AdapterSettings, KeySettings

_logger = logging.getLogger(__name__)

F = TypeVar("F", bound=Callable[..., Any])


def _scoped(func: F) -> F:
    @functools.wraps(func)
    def wrapper(self: Any, *args: Any, **kwargs: Any) -> Any:
        if not isinstance(self, Adapter):
            raise ScopeError("Scope must be an instance of Adapter.")
        return func(self, *args, **kwargs)

    return wrapper  # type: ignore[return-value]


def _unsupported(func: F) -> F:
    @functools.wraps(func)
    def wrapper(self: Any, *args: Any, **kwargs: Any) -> Any:
        raise UnsupportedOperation(func.__name__, adapter=getattr(self, "name", ""))

    wrapper.__unsupported__ = True  # type: ignore[attr-defined]
    return wrapper  # type: ignore[return-value]


class Adapter:
    """Base for every data adapter."""

    name: ClassVar[str] = "Adapter"

    def __init__(self, settings: AdapterSettings | None = None, **overrides: Any) -> None:
        base = settings if settings is not None else AdapterSettings(name=self.name)
        self._settings = base.compose(**overrides)

    def __repr__(self) -> str:
        return f"<{type(self).__name__} name={self._settings.name!r}>"

    # ------------------------------------------------------------------
    # Settings
    # ------------------------------------------------------------------

    @property
    def settings(self) -> AdapterSettings:
        return self._settings

    @property
    def keys(self) -> KeySettings:
        return self._settings.keys

    def set_settings(self, **overrides: Any) -> AdapterSettings:
        """Compose *overrides* (``keys``, ``merge``, ``enabled``...) into the settings."""
        self._settings = self._settings.compose(**overrides)
        return self._settings

    def accepts(self, kind: OperationType) -> bool:
        return self._settings.accepts(kind)

    # ------------------------------------------------------------------
    # Capability discovery
    # ------------------------------------------------------------------

    @classmethod
    def supports(cls, operation: str) -> bool:
        if operation not in CAPABILITIES:
            return False
        method = getattr(cls, operation, None)
        return callable(method) and not getattr(method, "__unsupported__", False)

    @classmethod
    def capabilities(cls) -> tuple[str, ...]:
        return tuple(name for name in CAPABILITIES if cls.supports(name))

    # ------------------------------------------------------------------
    # Catalog defaults
    # ------------------------------------------------------------------

    @_unsupported
    def insert(self, data: Any) -> Any: ...

    @_unsupported
    def insert_or_update(self, data: Any) -> Any: ...

    @_unsupported
    def get(self, id: Any) -> Any: ...  # noqa: A002

    @_unsupported
    def get_where(self, where: Any = None, order: Any = None, limit: Any = 0) -> Any: ...

    @_unsupported
    def get_all(self, order: Any = None, limit: Any = 0) -> Any: ...

    @_unsupported
    def update(self, data: Any, id: Any) -> Any: ...  # noqa: A002

    @_unsupported
    def update_where(self, data: Any, where: Any) -> Any: ...

    @_unsupported
    def update_where_in(self, data: Any, key: str, values: Any) -> Any: ...

    @_unsupported
    def delete(self, id: Any) -> Any: ...  # noqa: A002

    @_unsupported
    def delete_where(self, where: Any, limit: Any = 0) -> Any: ...

    @_unsupported
    def delete_where_in(self, key: str, values: Any) -> Any: ...

    @_unsupported
    def delete_all(self) -> Any: ...

    @_unsupported
    def where_in(self, key: str, values: Any) -> Any: ...

    @_unsupported
    def like(self, key: str, pattern: str) -> Any: ...

    # ------------------------------------------------------------------
    # Collection primitives
    # ------------------------------------------------------------------

    def _id_where(self, id: Any) -> Callable[[Any], bool]:  # noqa: A002
        return key_where(self.keys.primary, id)

    @_scoped
    def _insert_into(self, collection: Any, data: Any) -> int | None:
        if not isinstance(collection, list):
            return None
        if isinstance(data, list):
            collection.extend(item for item in data if isinstance(item, Mapping))
        elif isinstance(data, Mapping):
            collection.append(data)
        return len(collection)

    @_scoped
    def _insert_or_update_into(self, collection: Any, data: Any) -> Any:
        if not isinstance(collection, list) or not isinstance(data, list):
            return []
        merged = self._settings.merge(data, collection, self.keys)
        # Refill in place so references to the collection stay valid.
        collection[:] = merged
        return len(collection)

    @_scoped
    def _select_from(self, collection: Any, where: Any = None, order: Any = None, limit: Any = 0) -> Any:
        if not isinstance(collection, list):
            return {} if limit == 1 else []
        result = select(collection, where, order, limit)
        if limit == 1 and not isinstance(limit, bool):
            return result[0] if result else {}
        return result

    @_scoped
    def _update_in(self, collection: Any, data: Any, where: Any) -> list[Any]:
        if not isinstance(collection, list) or not isinstance(data, Mapping):
            return []
        if not (isinstance(where, Mapping) or callable(where)):
            return []
        found = select(collection, where)
        for record in found:
            deep_merge(record, data)
        return found

    @_scoped
    def _delete_from(self, collection: Any, where: Any, limit: Any = 0) -> list[Any]:
        if not isinstance(collection, list):
            return []
        if not (isinstance(where, Mapping) or callable(where)):
            return []
        found = select(collection, where, None, limit)
        if not found:
            return []
        doomed = {id(record) for record in found}
        removed = [record for record in collection if id(record) in doomed]
        collection[:] = [record for record in collection if id(record) not in doomed]
        _logger.debug("%s removed %d record(s)", self.name, len(removed))
        return removed

    @_scoped
    def _delete_all_from(self, collection: Any) -> list[Any]:
        if not isinstance(collection, list):
            return []
        removed = list(collection)
        collection.clear()
        return removed
