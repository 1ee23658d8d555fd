"""Key and adapter settings shared between a model and its adapters."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from pymodelsync._constants import DEFAULT_PRIMARY_KEY
from pymodelsync.capabilities import OperationType
from pymodelsync.merge import MergeFunction, merge_collections


class KeySettings(BaseModel):
    """Primary and foreign key names of a model's records.

    Foreign keys are tracked only; nothing enforces them yet.
    """

    model_config = ConfigDict(frozen=True, extra="forbid", str_strip_whitespace=True)

    primary: str = DEFAULT_PRIMARY_KEY
    foreign: tuple[str, ...] = ()

    @field_validator("primary")
    @classmethod
    def _non_empty(cls, value: str) -> str:
        if not value:
            raise ValueError("primary key name must be non-empty")
        return value


class AdapterSettings(BaseModel):
    """Per-adapter settings.

    ``keys`` and ``merge`` are pushed down by the owning model so every
    adapter shares the same key semantics. ``io`` restricts which operation
    types the adapter takes part in; disabled adapters are skipped entirely.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    name: str = ""
    enabled: bool = True
    io: frozenset[OperationType] = Field(default_factory=lambda: frozenset(OperationType))
    keys: KeySettings = Field(default_factory=KeySettings)
    merge: MergeFunction = merge_collections

    def accepts(self, kind: OperationType) -> bool:
        return self.enabled and kind in self.io

    def compose(self, **overrides: Any) -> AdapterSettings:
        """Return a copy with *overrides* applied on top of these settings."""
        values = {key: value for key, value in overrides.items() if value is not None}
        if not values:
            return self
        return self.model_validate({**self.model_dump(), **values})
