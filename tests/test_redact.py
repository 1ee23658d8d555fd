from __future__ import annotations

from pymodelsync._redact import redact_for_log


def test_redact_for_log_redacts_credentials() -> None:
    payload = {
        "id": 1,
        "Authorization": "Bearer abc",
        "user": {"name": "Melvin", "password": "pw", "apiKey": "k"},
    }

    redacted = redact_for_log(payload)
    assert redacted["id"] == 1
    assert redacted["Authorization"] == "<redacted>"
    assert redacted["user"]["name"] == "Melvin"
    assert redacted["user"]["password"] == "<redacted>"
    assert redacted["user"]["apiKey"] == "<redacted>"
    assert payload["Authorization"] == "Bearer abc"


def test_redact_for_log_truncates_long_strings() -> None:
    redacted = redact_for_log({"value": "x" * 600}, max_string=10)
    assert redacted["value"].startswith("x" * 10)
    assert "<truncated>" in redacted["value"]


def test_redact_for_log_cuts_long_collections() -> None:
    records = [{"id": index} for index in range(25)]

    redacted = redact_for_log(records, max_items=3)
    assert redacted == [{"id": 0}, {"id": 1}, {"id": 2}, "<+22 more>"]
