"""In-memory canonical store.

The store is the system of record of a model: always registered first,
written last during reconciliation, and the only place reads are replayed
from. It owns its backing list exclusively; everything goes through the
capability methods below, all of which are synchronous.
"""

from __future__ import annotations

from typing import Any, ClassVar

from pymodelsync.adapters.base import Adapter
from pymodelsync.query import key_in, like_pattern


class StoreAdapter(Adapter):
    """List-backed adapter implementing the full capability catalog."""

    name: ClassVar[str] = "Store"

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self._records: list[Any] = []

    def __len__(self) -> int:
        return len(self._records)

    @property
    def records(self) -> tuple[Any, ...]:
        """Read-only view of the current records, in store order."""
        return tuple(self._records)

    # create

    def insert(self, data: Any) -> Any:
        size = self._insert_into(self._records, data)
        return {} if size is None else size

    def insert_or_update(self, data: Any) -> Any:
        return self._insert_or_update_into(self._records, data)

    # read

    def get(self, id: Any) -> Any:  # noqa: A002
        return self._select_from(self._records, self._id_where(id), None, 1)

    def get_where(self, where: Any = None, order: Any = None, limit: Any = 0) -> Any:
        return self._select_from(self._records, where, order, limit)

    def get_all(self, order: Any = None, limit: Any = 0) -> Any:
        return self.get_where({}, order, limit)

    # update

    def update(self, data: Any, id: Any) -> Any:  # noqa: A002
        found = self._update_in(self._records, data, self._id_where(id))
        return found[-1] if found else {}

    def update_where(self, data: Any, where: Any) -> list[Any]:
        return self._update_in(self._records, data, where)

    def update_where_in(self, data: Any, key: str, values: Any) -> list[Any]:
        if not isinstance(key, str) or not isinstance(values, (list, tuple, set, frozenset)):
            return []
        return self._update_in(self._records, data, key_in(key, values))

    # delete

    def delete(self, id: Any) -> Any:  # noqa: A002
        removed = self._delete_from(self._records, self._id_where(id), 1)
        return removed[-1] if removed else {}

    def delete_where(self, where: Any, limit: Any = 0) -> list[Any]:
        return self._delete_from(self._records, where, limit)

    def delete_where_in(self, key: str, values: Any) -> list[Any]:
        if not isinstance(key, str) or not isinstance(values, (list, tuple, set, frozenset)):
            return []
        return self._delete_from(self._records, key_in(key, values))

    def delete_all(self) -> list[Any]:
        return self._delete_all_from(self._records)

    # query

    def where_in(self, key: str, values: Any) -> list[Any]:
        if not isinstance(key, str) or not isinstance(values, (list, tuple, set, frozenset)):
            return []
        return self._select_from(self._records, key_in(key, values))

    def like(self, key: str, pattern: str) -> list[Any]:
        if not isinstance(key, str) or not isinstance(pattern, str):
            return []
        return self._select_from(self._records, like_pattern(key, pattern))
