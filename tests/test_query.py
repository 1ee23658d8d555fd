from __future__ import annotations

import pytest
from pydantic import ValidationError

from pymodelsync.capabilities import CAPABILITIES, OperationDescriptor, OperationType, operation_type
from pymodelsync.exceptions import UnsupportedOperation
from pymodelsync.query import key_in, like_pattern, matches, order_records, parse_order, select
from pymodelsync.settings import AdapterSettings, KeySettings


def test_every_catalog_operation_has_one_type() -> None:
    assert len(CAPABILITIES) == 14
    assert operation_type("insert_or_update") is OperationType.CREATE
    assert operation_type("get") is OperationType.READ
    assert operation_type("delete_all") is OperationType.DELETE
    assert operation_type("like") is OperationType.QUERY

    with pytest.raises(UnsupportedOperation):
        operation_type("truncate")


def test_operation_descriptor_is_immutable() -> None:
    descriptor = OperationDescriptor.build("get_where", [{"id": 1}, None, 0])

    assert descriptor.type is OperationType.READ
    assert descriptor.args == ({"id": 1}, None, 0)
    with pytest.raises(ValidationError):
        descriptor.name = "get"  # type: ignore[misc]


def test_adapter_settings_compose_and_gate() -> None:
    settings = AdapterSettings(name="api", io=frozenset({OperationType.READ}))

    assert settings.accepts(OperationType.READ)
    assert not settings.accepts(OperationType.CREATE)
    assert settings.compose(enabled=None) is settings

    composed = settings.compose(keys={"primary": "uid"}, enabled=False)
    assert composed.keys == KeySettings(primary="uid")
    assert not composed.accepts(OperationType.READ)
    assert settings.enabled

    with pytest.raises(ValidationError):
        KeySettings(primary="")


def test_mapping_predicates_use_loose_and_nested_matching() -> None:
    record = {"id": 1, "age": 32, "address": {"city": "Oslo", "zip": "0150"}}

    assert matches(record, {"id": "1"})
    assert matches(record, {"address": {"city": "Oslo"}})
    assert not matches(record, {"address": {"city": "Bergen"}})
    assert not matches(record, {"missing": None})
    assert matches(record, lambda item: item["age"] > 30)


def test_parse_order_reads_field_direction_pairs() -> None:
    assert parse_order("age desc, name") == [("age", True), ("name", False)]
    assert parse_order("name ASC,  ,id DESCENDING") == [("name", False), ("id", True)]
    assert parse_order(None) == []
    assert parse_order(["age"]) == []


def test_order_records_puts_missing_values_last() -> None:
    records = [{"id": 1, "age": 30}, {"id": 2}, {"id": 3, "age": 20}, {"id": 4, "age": None}]

    ascending = order_records(records, "age")
    descending = order_records(records, "age desc")

    assert [record["id"] for record in ascending] == [3, 1, 2, 4]
    assert [record["id"] for record in descending] == [1, 3, 2, 4]


def test_order_records_falls_back_to_text_for_mixed_types() -> None:
    records = [{"id": 1, "code": 10}, {"id": 2, "code": "9"}]

    assert [record["id"] for record in order_records(records, "code")] == [1, 2]


def test_select_tolerates_malformed_arguments() -> None:
    records = [{"id": 1}, {"id": 2}]

    assert select(records, "not a predicate", None, "3") == records
    assert select(records, {}, "id desc", 1) == [{"id": 2}]
    assert select(records, {}, None, True) == records


def test_key_in_and_like_predicates() -> None:
    records = [{"name": "Reagan"}, {"name": "Xena"}, {"name": None}, {"other": 1}]

    assert [r["name"] for r in records if key_in("name", ["xena", "Reagan"])(r)] == ["Reagan"]
    assert [r["name"] for r in records if like_pattern("name", "_ena")(r)] == ["Xena"]
    assert [r["name"] for r in records if like_pattern("name", "r%")(r)] == ["Reagan"]
