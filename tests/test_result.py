from __future__ import annotations

import json

from pymodelsync.events import EventBus, ModelEvent
from pymodelsync.result import Result, is_result, wrap


class _User(Result):
    def __init__(self, *args: object, **kwargs: object) -> None:
        super().__init__(*args, **kwargs)
        self.loaded = 0
        self.removed = 0

    def on_load(self) -> None:
        self.loaded += 1

    def on_remove(self) -> None:
        self.removed += 1

    def greeting(self) -> str:
        return f"{self.fullname} says hello."


def test_result_exposes_fields_as_attributes() -> None:
    user = _User({"id": 1, "fullname": "Melvin Gallagher"})

    assert user.greeting() == "Melvin Gallagher says hello."
    assert user["id"] == 1
    assert not hasattr(user, "missing")


def test_instance_attributes_are_not_fields() -> None:
    user = _User({"id": 1})
    user.element = "<li>"

    assert user.value_of() == {"id": 1}
    assert json.loads(str(user)) == {"id": 1}


def test_lifecycle_hooks_fire_at_most_once() -> None:
    user = _User({"id": 1})

    assert user.admit() is True
    assert user.admit() is False
    assert user.evict() is True
    assert user.evict() is False
    assert (user.loaded, user.removed) == (1, 1)
    assert user.admitted and user.evicted


def test_wrap_is_idempotent() -> None:
    user = _User({"id": 1})
    batch = [user, {"id": 2}, "not-a-record"]

    wrapped = wrap(batch, _User)

    assert wrapped is batch
    assert wrapped[0] is user
    assert isinstance(wrapped[1], _User)
    assert wrapped[2] == "not-a-record"
    assert wrap(user) is user
    assert is_result(wrap({"id": 3}))
    assert wrap(None) is None


def test_value_of_is_a_plain_snapshot() -> None:
    user = Result({"id": 1, "tags": ["a"]})

    snapshot = user.value_of()
    snapshot["id"] = 2

    assert type(snapshot) is dict
    assert user["id"] == 1


def test_event_bus_delivers_in_subscription_order_and_unsubscribes() -> None:
    bus = EventBus()
    seen: list[str] = []

    unsubscribe = bus.subscribe(ModelEvent.ADDED, lambda record: seen.append(f"first:{record['id']}"))
    bus.subscribe("added", lambda record: seen.append(f"second:{record['id']}"))
    bus.emit(ModelEvent.ADDED, {"id": 1})
    unsubscribe()
    bus.emit(ModelEvent.ADDED, {"id": 2})
    bus.emit(ModelEvent.REMOVED, {"id": 3})

    assert seen == ["first:1", "second:1", "second:2"]


def test_event_bus_isolates_failing_observers() -> None:
    bus = EventBus()
    seen: list[int] = []

    def _broken(_record: object) -> None:
        raise RuntimeError("boom")

    bus.subscribe(ModelEvent.REMOVED, _broken)
    bus.subscribe(ModelEvent.REMOVED, lambda record: seen.append(record["id"]))
    bus.emit(ModelEvent.REMOVED, {"id": 4})

    assert seen == [4]
    assert bus.unsubscribe(ModelEvent.REMOVED, _broken) is True
    assert bus.unsubscribe(ModelEvent.REMOVED, _broken) is False
