"""Capability catalog shared by every adapter and the model.

Each operation name is tagged with exactly one :class:`OperationType`. The
type, not the adapter executing the call, decides how the model reconciles
the per-adapter results.
"""

from __future__ import annotations

from enum import StrEnum
from types import MappingProxyType
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from pymodelsync.exceptions import UnsupportedOperation


class OperationType(StrEnum):
    CREATE = "create"
    READ = "read"
    UPDATE = "update"
    DELETE = "delete"
    QUERY = "query"


CAPABILITIES: MappingProxyType[str, OperationType] = MappingProxyType(
    {
        "insert": OperationType.CREATE,
        "insert_or_update": OperationType.CREATE,
        "get": OperationType.READ,
        "get_where": OperationType.READ,
        "get_all": OperationType.READ,
        "update": OperationType.UPDATE,
        "update_where": OperationType.UPDATE,
        "update_where_in": OperationType.UPDATE,
        "delete": OperationType.DELETE,
        "delete_where": OperationType.DELETE,
        "delete_where_in": OperationType.DELETE,
        "delete_all": OperationType.DELETE,
        "where_in": OperationType.QUERY,
        "like": OperationType.QUERY,
    }
)
"""Operation name -> operation type. Read-only."""


def operation_type(name: str) -> OperationType:
    """Return the type of catalog operation *name*.

    Raises :class:`UnsupportedOperation` for names outside the catalog.
    """
    try:
        return CAPABILITIES[name]
    except KeyError:
        raise UnsupportedOperation(name) from None


class OperationDescriptor(BaseModel):
    """One logical call issued through a model."""

    model_config = ConfigDict(frozen=True, extra="forbid", arbitrary_types_allowed=True)

    name: str
    type: OperationType
    args: tuple[Any, ...] = Field(default_factory=tuple)

    @classmethod
    def build(cls, name: str, args: tuple[Any, ...] | list[Any] = ()) -> OperationDescriptor:
        return cls(name=name, type=operation_type(name), args=tuple(args))
