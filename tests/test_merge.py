from __future__ import annotations

from pymodelsync.merge import deep_merge, loose_equal, merge_collections, reduce_collections
from pymodelsync.settings import KeySettings

KEYS = KeySettings()


def _ids(records: list[dict[str, object]]) -> list[object]:
    return [record.get("id") for record in records]


def test_loose_equal_coerces_numbers_and_strings_but_not_bools() -> None:
    assert loose_equal(1, "1")
    assert loose_equal("1.5", 1.5)
    assert loose_equal(2, 2.0)
    assert not loose_equal("2.0", 2)
    assert loose_equal("abc", "abc")
    assert not loose_equal("abc", 1)
    assert not loose_equal(True, 1)
    assert not loose_equal(None, 0)
    assert loose_equal(None, None)


def test_same_type_keys_compare_exactly() -> None:
    big = 2**53

    assert not loose_equal(big, big + 1)
    assert not loose_equal(str(big), big + 1)
    assert loose_equal(str(big + 1), big + 1)
    assert not loose_equal("01234", "1234")
    assert not loose_equal("1_000", "1000")
    assert not loose_equal("1_000", 1000)
    assert not loose_equal("nan", float("nan"))


def test_large_integer_keys_stay_distinct() -> None:
    existing = [{"id": 1234567890123456788}]
    incoming = [{"id": 1234567890123456789}, {"id": 2**53 + 1}, {"id": 2**53}]

    merged = merge_collections(incoming, existing, KEYS)

    assert _ids(merged) == [1234567890123456788, 1234567890123456789, 2**53 + 1, 2**53]


def test_numeric_looking_string_keys_stay_distinct() -> None:
    existing = [{"id": "1234", "v": 1}]
    incoming = [{"id": "01234", "v": 2}, {"id": "1234.0"}]

    merged = merge_collections(incoming, existing, KEYS)

    assert _ids(merged) == ["1234", "01234", "1234.0"]
    assert merged[0]["v"] == 1


def test_deep_merge_nests_and_copies_values() -> None:
    target = {"id": 1, "profile": {"age": 32, "city": "Oslo"}, "tags": ["a"]}
    tags = ["b", "c"]

    deep_merge(target, {"profile": {"age": 33}, "tags": tags})
    tags.append("d")

    assert target == {"id": 1, "profile": {"age": 33, "city": "Oslo"}, "tags": ["b", "c"]}


def test_merging_with_itself_or_empty_is_idempotent() -> None:
    records = [{"id": 1, "v": 1}, {"id": 2, "v": 2}]
    snapshot = [dict(record) for record in records]

    assert merge_collections(records, records, KEYS) == snapshot
    assert merge_collections([], records, KEYS) == snapshot
    assert merge_collections(records, [], KEYS) == snapshot


def test_existing_record_keeps_identity_and_absorbs_fields() -> None:
    existing = [{"id": 1, "name": "A", "v": 1, "local": True}]
    incoming = [{"id": "1", "v": 2}, {"id": 2, "name": "B"}]

    merged = merge_collections(incoming, existing, KEYS)

    assert merged[0] is existing[0]
    assert merged[0] == {"id": 1, "name": "A", "v": 2, "local": True}
    assert merged[1] is incoming[1]
    assert _ids(merged) == [1, 2]


def test_inputs_lists_are_not_mutated() -> None:
    existing = [{"id": 1}]
    incoming = [{"id": 1, "x": 1}, {"id": 2}]

    merge_collections(incoming, existing, KEYS)

    assert len(existing) == 1
    assert len(incoming) == 2


def test_incoming_duplicates_collapse_into_one_record_per_key() -> None:
    existing = [{"id": 1, "a": 1}]
    incoming = [{"id": 2, "c": 3}, {"id": 2.0, "d": 4}, {"id": "1", "e": 5}]

    merged = merge_collections(incoming, existing, KEYS)

    assert _ids(merged) == [1, 2]
    assert merged[0] == {"id": 1, "a": 1, "e": 5}
    assert merged[1] == {"id": 2, "c": 3, "d": 4}


def test_existing_duplicates_are_left_alone() -> None:
    first, second = {"id": 1, "a": 1}, {"id": 1, "b": 2}
    existing = [first, second]

    merged = merge_collections([second, {"id": 2}], existing, KEYS)

    assert merged[0] is first
    assert merged[1] is second
    assert first == {"id": 1, "a": 1}
    assert _ids(merged) == [1, 1, 2]


def test_records_without_primary_key_pass_through() -> None:
    existing = [{"name": "anon"}, {"id": None, "name": "null"}]
    incoming = [{"name": "anon"}]

    merged = merge_collections(incoming, existing, KEYS)

    assert merged == [{"name": "anon"}, {"id": None, "name": "null"}, {"name": "anon"}]


def test_non_list_inputs_yield_empty_collection() -> None:
    assert merge_collections({"id": 1}, [], KEYS) == []
    assert merge_collections([], None, KEYS) == []


def test_custom_primary_key() -> None:
    keys = KeySettings(primary="user_id")
    existing = [{"user_id": 7, "id": 1}]

    merged = merge_collections([{"user_id": 7, "id": 2}], existing, keys)

    assert merged == [{"user_id": 7, "id": 2}]


def test_reduce_runs_right_to_left_and_first_collection_wins_identity() -> None:
    store = [{"id": 1, "v": 1}]
    middle = [{"id": 1, "v": 2}, {"id": 2, "v": 1}]
    last = [{"id": 2, "v": 5}, {"id": 3, "v": 1}]

    merged = reduce_collections([store, middle, last], KEYS)

    assert merged[0] is store[0]
    assert merged[1] is middle[1]
    assert merged == [{"id": 1, "v": 2}, {"id": 2, "v": 5}, {"id": 3, "v": 1}]


def test_reduce_edge_cases() -> None:
    only = [{"id": 1}]

    assert reduce_collections([], KEYS) == []
    assert reduce_collections([only], KEYS) is only


def test_reduce_uses_supplied_merge_function() -> None:
    calls: list[tuple[int, int]] = []

    def _concat(incoming: list[object], existing: list[object], _keys: KeySettings) -> list[object]:
        calls.append((len(incoming), len(existing)))
        return existing + incoming

    merged = reduce_collections([[1], [2, 3], [4]], KEYS, _concat)

    assert merged == [1, 2, 3, 4]
    assert calls == [(1, 2), (3, 1)]
