"""Configuration for the RESTful adapter."""

from __future__ import annotations

import dataclasses
import os
from collections.abc import Mapping
from typing import Any

from pymodelsync._constants import (
    DEFAULT_LIMIT_PARAM,
    DEFAULT_ORDER_PARAM,
    DEFAULT_REST_TIMEOUT,
    DEFAULT_SORT_PARAM,
)
from pymodelsync.exceptions import ConfigError


def _env_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "y", "on"}:
        return True
    if normalized in {"0", "false", "no", "n", "off"}:
        return False
    return default


@dataclasses.dataclass(frozen=True)
class RestfulConfig:
    """RESTful adapter configuration.

    Parameters
    ----------
    endpoint : str
        Collection URL, e.g. ``"https://api.example.com/users"``. Record
        URLs are built as ``{endpoint}/{id}``.
    attribute : str or None
        Response key holding the records (``{"data": [...]}``). ``None``
        uses the response body as is.
    timeout : float
        Total timeout for one request, in seconds.
    headers : Mapping[str, str]
        Extra request headers (e.g. ``Authorization``).
    sort_param, order_param, limit_param : str
        Query parameter names used to pass an order string and a limit.
        The defaults match json-server (``_sort``, ``_order``, ``_limit``).
    params : Mapping[str, Any]
        Filter used by :meth:`RestfulAdapter.prefetch`.
    order : str or None
        Order string used by :meth:`RestfulAdapter.prefetch`.
    limit : int
        Limit used by :meth:`RestfulAdapter.prefetch` (``0`` for none).
    trace_enabled : bool
        Log every request and response body at DEBUG level (redacted).
    """

    endpoint: str
    attribute: str | None = None
    timeout: float = DEFAULT_REST_TIMEOUT
    headers: Mapping[str, str] = dataclasses.field(default_factory=dict)
    sort_param: str = DEFAULT_SORT_PARAM
    order_param: str = DEFAULT_ORDER_PARAM
    limit_param: str = DEFAULT_LIMIT_PARAM
    params: Mapping[str, Any] = dataclasses.field(default_factory=dict)
    order: str | None = None
    limit: int = 0
    trace_enabled: bool = False

    def __post_init__(self) -> None:
        if not isinstance(self.endpoint, str) or not self.endpoint.strip():
            raise ConfigError("RestfulConfig.endpoint must be a non-empty URL")
        if self.timeout <= 0:
            raise ConfigError(f"RestfulConfig.timeout must be positive, got {self.timeout}")

    def url_for(self, path: str = "") -> str:
        base = self.endpoint.rstrip("/")
        return f"{base}/{path.lstrip('/')}" if path else base

    @classmethod
    def from_env(cls, **overrides: Any) -> RestfulConfig:
        """Create configuration from environment variables.

        Reads ``MODELSYNC_ENDPOINT`` plus the optional ``MODELSYNC_*``
        variables below. Explicit keyword arguments override environment
        values.
        """
        env = os.environ

        _ENV_CONFIG_MAP = {
            "MODELSYNC_ENDPOINT": "endpoint",
            "MODELSYNC_ATTRIBUTE": "attribute",
            "MODELSYNC_SORT_PARAM": "sort_param",
            "MODELSYNC_ORDER_PARAM": "order_param",
            "MODELSYNC_LIMIT_PARAM": "limit_param",
            "MODELSYNC_ORDER": "order",
        }
        config_kwargs: dict[str, Any] = {}
        for env_key, field_name in _ENV_CONFIG_MAP.items():
            val = env.get(env_key)
            if val is not None:
                config_kwargs[field_name] = val

        timeout_env = env.get("MODELSYNC_TIMEOUT")
        if timeout_env is not None and "timeout" not in overrides:
            config_kwargs["timeout"] = float(timeout_env)

        limit_env = env.get("MODELSYNC_LIMIT")
        if limit_env is not None and "limit" not in overrides:
            config_kwargs["limit"] = int(limit_env)

        token = env.get("MODELSYNC_TOKEN")
        if token and "headers" not in overrides:
            config_kwargs["headers"] = {"Authorization": f"Bearer {token}"}

        if "trace_enabled" not in overrides:
            config_kwargs["trace_enabled"] = _env_bool(env.get("MODELSYNC_TRACE_ENABLED"), False)

        config_kwargs.update(overrides)

        if "endpoint" not in config_kwargs:
            raise ConfigError("MODELSYNC_ENDPOINT is not set")

        return cls(**config_kwargs)
