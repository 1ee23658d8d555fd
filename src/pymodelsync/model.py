"""Model: one logical entity fanned out over several adapters.

Every capability of the catalog is an ``async`` method on :class:`Model`.
A call is issued against the canonical store and every other registered
adapter, the per-adapter results are joined, and the outcome is reconciled
according to the operation type:

* ``read``: results are merged by primary key, new records are written back
  to every adapter in reverse registration order (the store last), and the
  read is replayed against the store.
* ``delete``: the store's removal result is authoritative; evicted records
  get their ``on_remove`` hook.
* anything else: the per-adapter results are returned as a list, in
  registration order.

An adapter that fails never fails the call. Its contribution is logged and
treated as empty, so partial failures show up as fewer results rather than
as exceptions.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from collections.abc import Callable, Coroutine, Mapping, Sequence
from dataclasses import dataclass
from enum import StrEnum
from typing import Any

from pymodelsync.adapters.base import Adapter
from pymodelsync.adapters.store import StoreAdapter
from pymodelsync.capabilities import OperationDescriptor, OperationType
from pymodelsync.events import EventBus, ModelEvent, Observer
from pymodelsync.exceptions import AdapterFailure, ConfigError, ScopeError, UnsupportedOperation
from pymodelsync.merge import MergeFunction, merge_collections, reduce_collections
from pymodelsync.result import Result, is_result, wrap
from pymodelsync.settings import KeySettings

_logger = logging.getLogger(__name__)


class CallState(StrEnum):
    DISPATCHED = "dispatched"
    AWAITING_ADAPTERS = "awaiting_adapters"
    DIRECT_RESOLVE = "direct_resolve"
    RECONCILING = "reconciling"
    RESOLVED = "resolved"


@dataclass(slots=True, frozen=True)
class Ok:
    """An adapter's settled value."""

    adapter: Adapter
    value: Any


@dataclass(slots=True, frozen=True)
class Err:
    """An adapter's failure, collapsed to an empty result at the join."""

    adapter: Adapter
    failure: AdapterFailure


AdapterOutcome = Ok | Err


@dataclass(slots=True)
class _Call:
    """Progress of one logical operation."""

    descriptor: OperationDescriptor
    state: CallState = CallState.DISPATCHED

    def advance(self, state: CallState) -> None:
        _logger.debug("%s: %s -> %s", self.descriptor.name, self.state, state)
        self.state = state

    def resolve(self, value: Any) -> Any:
        if self.state is CallState.RESOLVED:
            raise RuntimeError(f"{self.descriptor.name} resolved twice")
        self.advance(CallState.RESOLVED)
        return value


def _as_collection(value: Any) -> list[Any]:
    if isinstance(value, list):
        return list(value)
    if isinstance(value, Mapping) and value:
        return [value]
    return []


class Model:
    """Reconciliation orchestrator over a canonical store and extra adapters.

    Usage::

        users = Model([RestfulAdapter(config)], keys=KeySettings(primary="user_id"))
        await users.insert([{"user_id": 1, "name": "Melvin"}])
        active = await users.get_where({"status": "active"}, "name asc")

    Parameters
    ----------
    adapters
        External adapters, in priority order. The store is always
        registered in front of them.
    keys
        Primary/foreign key names shared by every adapter.
    result_model
        :class:`Result` subclass records are wrapped into.
    merge
        Pairwise merge function used for reconciliation and
        ``insert_or_update``.
    """

    def __init__(
        self,
        adapters: Sequence[Adapter] = (),
        *,
        keys: KeySettings | Mapping[str, Any] | None = None,
        result_model: type[Result] = Result,
        merge: MergeFunction = merge_collections,
    ) -> None:
        if not (isinstance(result_model, type) and issubclass(result_model, Result)):
            raise ConfigError(f"result_model must be a Result subclass, got {result_model!r}")
        if isinstance(keys, Mapping):
            keys = KeySettings.model_validate(keys)
        self._keys = keys if keys is not None else KeySettings()
        self._result_model = result_model
        self._merge = merge
        self._events = EventBus()
        self._store = StoreAdapter()

        registered: list[Adapter] = [self._store]
        for adapter in adapters:
            if not isinstance(adapter, Adapter):
                raise ScopeError(f"adapter must be an instance of Adapter, got {type(adapter).__name__}")
            registered.append(adapter)
        for adapter in registered:
            adapter.set_settings(keys=self._keys, merge=self._merge)
            _logger.debug("Registered %r supporting %s", adapter, ", ".join(adapter.capabilities()))
        self._adapters: tuple[Adapter, ...] = tuple(registered)

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    @property
    def store(self) -> StoreAdapter:
        """The canonical store, for direct synchronous access."""
        return self._store

    @property
    def adapters(self) -> tuple[Adapter, ...]:
        return self._adapters

    @property
    def keys(self) -> KeySettings:
        return self._keys

    @property
    def result_model(self) -> type[Result]:
        return self._result_model

    # ------------------------------------------------------------------
    # Events
    # ------------------------------------------------------------------

    def on(self, kind: ModelEvent | str, observer: Observer) -> Callable[[], None]:
        """Subscribe to ``added``/``removed`` notifications."""
        return self._events.subscribe(kind, observer)

    def off(self, kind: ModelEvent | str, observer: Observer) -> bool:
        return self._events.unsubscribe(kind, observer)

    # ------------------------------------------------------------------
    # Capabilities
    # ------------------------------------------------------------------

    async def insert(self, data: Any) -> list[Any]:
        return await self._integrate("insert", data)

    async def insert_or_update(self, data: Any) -> list[Any]:
        return await self._integrate("insert_or_update", data)

    async def get(self, id: Any) -> Any:  # noqa: A002
        return await self._integrate("get", id)

    async def get_where(self, where: Any = None, order: Any = None, limit: Any = 0) -> Any:
        return await self._integrate("get_where", where, order, limit)

    async def get_all(self, order: Any = None, limit: Any = 0) -> Any:
        return await self._integrate("get_all", order, limit)

    async def update(self, data: Any, id: Any) -> list[Any]:  # noqa: A002
        return await self._integrate("update", data, id)

    async def update_where(self, data: Any, where: Any) -> list[Any]:
        return await self._integrate("update_where", data, where)

    async def update_where_in(self, data: Any, key: str, values: Any) -> list[Any]:
        return await self._integrate("update_where_in", data, key, values)

    async def delete(self, id: Any) -> Any:  # noqa: A002
        return await self._integrate("delete", id)

    async def delete_where(self, where: Any, limit: Any = 0) -> Any:
        return await self._integrate("delete_where", where, limit)

    async def delete_where_in(self, key: str, values: Any) -> Any:
        return await self._integrate("delete_where_in", key, values)

    async def delete_all(self) -> Any:
        return await self._integrate("delete_all")

    async def where_in(self, key: str, values: Any) -> list[Any]:
        return await self._integrate("where_in", key, values)

    async def like(self, key: str, pattern: str) -> list[Any]:
        return await self._integrate("like", key, pattern)

    async def prefetch(self) -> Any:
        """Pull every adapter's default selection into the store.

        Adapters exposing a ``prefetch()`` coroutine contribute their
        records, which are reconciled with the store's current contents.
        Resolves with all store records.
        """
        sources = [
            adapter
            for adapter in self._adapters[1:]
            if adapter.accepts(OperationType.READ) and callable(getattr(adapter, "prefetch", None))
        ]
        if not sources:
            return self._store.get_all()
        outcomes = await self._fan_out(sources, "prefetch", ())
        results = [self._store.get_all(), *(self._collapse(outcome, "prefetch") for outcome in outcomes)]
        return await self._reconcile([self._store, *sources], "get_all", (), results)

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------

    async def _integrate(self, operation: str, *args: Any) -> Any:
        call = _Call(OperationDescriptor.build(operation, args))
        kind = call.descriptor.type
        arguments = list(args)
        if kind is OperationType.CREATE and arguments:
            arguments[0] = self._wrap(arguments[0])

        adapters = self._participants(kind)
        call.advance(CallState.AWAITING_ADAPTERS)
        outcomes = await self._fan_out(adapters, operation, arguments)
        results = [self._collapse(outcome, operation) for outcome in outcomes]

        if kind is OperationType.READ:
            if len(adapters) == 1:
                call.advance(CallState.DIRECT_RESOLVE)
                return call.resolve(results[0])
            call.advance(CallState.RECONCILING)
            return call.resolve(await self._reconcile(adapters, operation, arguments, results))

        if kind is OperationType.DELETE:
            return call.resolve(self._evict(results[0]))

        if kind is OperationType.CREATE and arguments:
            self._admit(arguments[0])
        return call.resolve(results)

    def _participants(self, kind: OperationType) -> list[Adapter]:
        return [adapter for adapter in self._adapters if adapter is self._store or adapter.accepts(kind)]

    async def _fan_out(
        self,
        adapters: Sequence[Adapter],
        operation: str,
        args: Sequence[Any],
    ) -> list[AdapterOutcome]:
        """Invoke *operation* on every adapter in order, then join them all."""
        pending: list[Coroutine[Any, Any, AdapterOutcome]] = []
        try:
            for adapter in adapters:
                pending.append(self._invoke(adapter, operation, args))
        except ScopeError:
            for awaitable in pending:
                awaitable.close()
            raise
        return list(await asyncio.gather(*pending))

    def _invoke(self, adapter: Adapter, operation: str, args: Sequence[Any]) -> Coroutine[Any, Any, AdapterOutcome]:
        try:
            value = getattr(adapter, operation)(*args)
        except ScopeError:
            raise
        except Exception as exc:
            return self._settled(Err(adapter, self._failure(adapter, operation, exc)))
        return self._settle(adapter, operation, value)

    @staticmethod
    async def _settled(outcome: AdapterOutcome) -> AdapterOutcome:
        return outcome

    async def _settle(self, adapter: Adapter, operation: str, value: Any) -> AdapterOutcome:
        if not inspect.isawaitable(value):
            return Ok(adapter, value)
        try:
            return Ok(adapter, await value)
        except ScopeError:
            raise
        except Exception as exc:
            return Err(adapter, self._failure(adapter, operation, exc))

    @staticmethod
    def _failure(adapter: Adapter, operation: str, exc: Exception) -> AdapterFailure:
        failure = AdapterFailure(adapter, operation)
        failure.__cause__ = exc
        return failure

    @staticmethod
    def _collapse(outcome: AdapterOutcome, operation: str) -> Any:
        if isinstance(outcome, Ok):
            return outcome.value
        cause = outcome.failure.__cause__
        if isinstance(cause, UnsupportedOperation):
            _logger.debug("%s: %s", outcome.failure, cause)
        else:
            _logger.warning("%s; treating its %s result as empty", outcome.failure, operation, exc_info=cause)
        return []

    # ------------------------------------------------------------------
    # Reconciliation
    # ------------------------------------------------------------------

    async def _reconcile(
        self,
        adapters: Sequence[Adapter],
        operation: str,
        args: Sequence[Any],
        results: Sequence[Any],
    ) -> Any:
        collections = [_as_collection(result) for result in results]
        merged = reduce_collections(collections, self._keys, self._merge)
        stored = {id(record) for record in self._store.records}

        if all(id(record) in stored for record in merged):
            _logger.debug("%s: no new records from %d adapter(s), skipping write-back", operation, len(adapters) - 1)
            return self._replay(operation, args)

        records = self._wrap(merged)
        writers = [adapter for adapter in reversed(adapters) if adapter is self._store or adapter.accepts(OperationType.CREATE)]
        outcomes = await self._fan_out(writers, "insert_or_update", [records])
        for outcome in outcomes:
            self._collapse(outcome, "insert_or_update")
        self._admit(records)
        _logger.debug("%s: wrote back %d record(s) to %d adapter(s)", operation, len(records), len(writers))
        return self._replay(operation, args)

    def _replay(self, operation: str, args: Sequence[Any]) -> Any:
        return getattr(self._store, operation)(*args)

    # ------------------------------------------------------------------
    # Record lifecycle
    # ------------------------------------------------------------------

    def _wrap(self, data: Any) -> Any:
        if isinstance(data, list):
            return wrap(list(data), self._result_model)
        return wrap(data, self._result_model)

    def _admit(self, data: Any) -> None:
        """Fire admission for wrapped records that are now held by the store."""
        candidates = data if isinstance(data, list) else [data]
        stored = {id(record) for record in self._store.records}
        for record in candidates:
            if is_result(record) and id(record) in stored and record.admit():
                self._events.emit(ModelEvent.ADDED, record)

    def _evict(self, data: Any) -> Any:
        for record in _as_collection(data):
            if is_result(record):
                if record.evict():
                    self._events.emit(ModelEvent.REMOVED, record)
            elif isinstance(record, Mapping):
                self._events.emit(ModelEvent.REMOVED, record)
        return data


def model_factory(
    *,
    adapters: Sequence[Callable[[], Adapter]] = (),
    keys: KeySettings | Mapping[str, Any] | None = None,
    result_model: type[Result] = Result,
    merge: MergeFunction = merge_collections,
) -> Callable[[], Model]:
    """Return a callable building identically configured models.

    *adapters* are factories so every model owns its own adapter instances.
    """

    def _build() -> Model:
        return Model([factory() for factory in adapters], keys=keys, result_model=result_model, merge=merge)

    return _build
