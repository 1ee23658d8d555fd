"""JSON-over-HTTP transport used by the RESTful adapter."""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from typing import Any, Protocol

import aiohttp

from pymodelsync._constants import USER_AGENT
from pymodelsync._redact import redact_for_log
from pymodelsync.config import RestfulConfig
from pymodelsync.exceptions import RestTransportError

_logger = logging.getLogger(__name__)


class Transport(Protocol):
    """Structural transport interface used by the RESTful adapter.

    Having a protocol here makes it easy to pass test doubles while keeping
    the production implementation (:class:`HttpTransport`) concrete.
    """

    async def request_json(
        self,
        method: str,
        path: str = "",
        *,
        params: Mapping[str, Any] | None = None,
        payload: Any = None,
    ) -> Any:
        ...


class HttpTransport:
    """aiohttp-backed transport sending and receiving JSON."""

    def __init__(self, config: RestfulConfig, http_session: aiohttp.ClientSession) -> None:
        self._config = config
        self._http = http_session
        self._timeout = aiohttp.ClientTimeout(total=config.timeout)

    def _headers(self) -> dict[str, str]:
        headers: dict[str, str] = {
            "accept": "application/json",
            "user-agent": USER_AGENT,
        }
        headers.update(self._config.headers)
        return headers

    async def request_json(
        self,
        method: str,
        path: str = "",
        *,
        params: Mapping[str, Any] | None = None,
        payload: Any = None,
    ) -> Any:
        """Send one request and return the decoded JSON body.

        An empty body decodes to ``None``.
        """
        url = self._config.url_for(path)
        query = {key: str(value) for key, value in (params or {}).items() if value is not None}
        headers = self._headers()

        _logger.debug("%s %s params=%s", method.upper(), url, redact_for_log(query))
        if self._config.trace_enabled:
            _logger.debug("request headers=%s payload=%s", redact_for_log(headers), redact_for_log(payload))

        try:
            async with self._http.request(
                method.upper(),
                url,
                params=query or None,
                json=payload,
                headers=headers,
                timeout=self._timeout,
            ) as resp:
                text = await resp.text()
                if not 200 <= resp.status < 300:
                    raise RestTransportError(
                        f"HTTP {resp.status} from {url}: {text[:200]}",
                        status_code=resp.status,
                        url=url,
                    )
        except RestTransportError:
            raise
        except (aiohttp.ClientError, TimeoutError) as exc:
            raise RestTransportError(f"Request to {url} failed: {exc}", url=url) from exc

        if not text.strip():
            return None

        try:
            body = json.loads(text)
        except json.JSONDecodeError as exc:
            raise RestTransportError(f"Invalid JSON from {url}: {text[:200]}", url=url) from exc

        if self._config.trace_enabled:
            _logger.debug("response %s body=%s", url, redact_for_log(body))
        return body
