"""Custom exception hierarchy for pymodelsync."""

from __future__ import annotations

from typing import Any


class ModelSyncError(Exception):
    """Base exception for all pymodelsync errors."""


class ConfigError(ModelSyncError):
    """Invalid or missing configuration."""


class ScopeError(ModelSyncError):
    """A capability was invoked without an adapter as its scope.

    This is a programming error and is always raised synchronously, it is
    never absorbed by the model's fan-out.
    """


class UnsupportedOperation(ModelSyncError):
    """The adapter does not implement the requested capability."""

    def __init__(self, operation: str, *, adapter: str = "") -> None:
        self.operation = operation
        self.adapter = adapter
        where = f" by adapter {adapter!r}" if adapter else ""
        super().__init__(f"Operation {operation!r} is not supported{where}")


class AdapterFailure(ModelSyncError):
    """One adapter's call failed during a model operation.

    The model logs these and treats the adapter's contribution as empty;
    the original exception is available as ``__cause__``.
    """

    def __init__(self, adapter: Any, operation: str, message: str = "") -> None:
        self.adapter = adapter
        self.operation = operation
        name = getattr(adapter, "name", "") or type(adapter).__name__
        super().__init__(message or f"Adapter {name!r} failed during {operation!r}")


class RestTransportError(ModelSyncError):
    """HTTP-level failure (network, non-2xx, invalid JSON)."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        url: str = "",
    ) -> None:
        self.status_code = status_code
        self.url = url
        super().__init__(message)
