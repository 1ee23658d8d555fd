"""RESTful adapter over a JSON collection endpoint.

Records live at ``{endpoint}`` (collection) and ``{endpoint}/{id}``
(single record). Every capability returns a coroutine; transport errors
propagate as :class:`RestTransportError` and are absorbed by the model.

Usage::

    config = RestfulConfig(endpoint="https://api.example.com/users")
    async with RestfulAdapter(config) as users_api:
        model = Model([users_api])
        active = await model.get_where({"status": "active"})
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Mapping
from typing import Any, ClassVar

import aiohttp

from pymodelsync._transport import HttpTransport, Transport
from pymodelsync.adapters.base import Adapter
from pymodelsync.config import RestfulConfig
from pymodelsync.exceptions import ModelSyncError
from pymodelsync.query import parse_order

_logger = logging.getLogger(__name__)


class RestfulAdapter(Adapter):
    """External source adapter backed by a REST API."""

    name: ClassVar[str] = "RESTful"

    def __init__(
        self,
        config: RestfulConfig,
        *,
        transport: Transport | None = None,
        session: aiohttp.ClientSession | None = None,
        **settings: Any,
    ) -> None:
        super().__init__(**settings)
        self._config = config
        self._transport = transport
        self._http_session = session
        self._owns_session = False

    @property
    def config(self) -> RestfulConfig:
        return self._config

    # ------------------------------------------------------------------
    # Context manager lifecycle
    # ------------------------------------------------------------------

    async def __aenter__(self) -> RestfulAdapter:
        if self._transport is None:
            if self._http_session is None:
                self._http_session = aiohttp.ClientSession()
                self._owns_session = True
            self._transport = HttpTransport(self._config, self._http_session)
        return self

    async def __aexit__(self, *exc: Any) -> None:
        if self._owns_session and self._http_session is not None:
            await self._http_session.close()
            self._http_session = None
            self._transport = None
        self._owns_session = False

    def _require_transport(self) -> Transport:
        if self._transport is None:
            raise ModelSyncError("Adapter not initialized. Use 'async with RestfulAdapter(...) as adapter:'")
        return self._transport

    # ------------------------------------------------------------------
    # Request helpers
    # ------------------------------------------------------------------

    def _unwrap(self, body: Any) -> Any:
        attribute = self._config.attribute
        if attribute and isinstance(body, Mapping):
            return body.get(attribute)
        return body

    def _query_params(self, where: Any, order: Any, limit: Any) -> dict[str, Any]:
        """Translate a predicate, order string and limit into query parameters."""
        params: dict[str, Any] = {}
        if isinstance(where, Mapping):
            params.update({key: value for key, value in where.items() if value is not None})
        pairs = parse_order(order)
        if pairs:
            params[self._config.sort_param] = ",".join(field for field, _ in pairs)
            params[self._config.order_param] = ",".join("desc" if desc else "asc" for _, desc in pairs)
        if isinstance(limit, int) and not isinstance(limit, bool) and limit > 0:
            params[self._config.limit_param] = limit
        return params

    async def _request(self, method: str, path: str = "", **kwargs: Any) -> Any:
        transport = self._require_transport()
        return self._unwrap(await transport.request_json(method, path, **kwargs))

    # ------------------------------------------------------------------
    # Capabilities
    # ------------------------------------------------------------------

    async def get(self, id: Any) -> Any:  # noqa: A002
        record = await self._request("GET", str(id))
        return record if isinstance(record, Mapping) else {}

    async def get_where(self, where: Any = None, order: Any = None, limit: Any = 0) -> Any:
        if callable(where):
            # Callable predicates cannot be sent; filter client side.
            records = await self._request("GET", params=self._query_params(None, order, 0))
            if isinstance(records, Mapping):
                records = [records]
            elif not isinstance(records, list):
                records = []
            records = [record for record in records if where(record)]
            if isinstance(limit, int) and limit > 0:
                records = records[:limit]
        else:
            records = await self._request("GET", params=self._query_params(where, order, limit))
        if isinstance(records, Mapping):
            return [records]
        return records if isinstance(records, list) else []

    async def get_all(self, order: Any = None, limit: Any = 0) -> Any:
        return await self.get_where({}, order, limit)

    async def prefetch(self) -> Any:
        """Fetch the configured default selection (``params``, ``order``, ``limit``)."""
        return await self.get_where(dict(self._config.params), self._config.order, self._config.limit)

    async def insert(self, data: Any) -> Any:
        records = data if isinstance(data, list) else [data]
        payloads = [dict(record) for record in records if isinstance(record, Mapping)]
        created = await asyncio.gather(*(self._request("POST", payload=payload) for payload in payloads))
        _logger.debug("%s created %d record(s)", self._config.endpoint, len(created))
        return [record for record in created if isinstance(record, Mapping)]

    async def update(self, data: Any, id: Any) -> Any:  # noqa: A002
        if not isinstance(data, Mapping):
            return {}
        record = await self._request("PATCH", str(id), payload=dict(data))
        return record if isinstance(record, Mapping) else {}

    async def delete(self, id: Any) -> Any:  # noqa: A002
        await self._request("DELETE", str(id))
        return {self.keys.primary: id}
