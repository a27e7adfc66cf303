"""HTTP ingestion log sink."""

import logging
import time
from typing import Any

import httpx

from logkit.core.encoding.ndjson import encode_record
from logkit.core.models import LogLevel, LogRecord

_logger = logging.getLogger(__name__)


class HttpSink:
    """Posts each record as JSON to a log ingestion endpoint.

    Delivery is best effort: a failed request is reported through this
    module's logger and the record is dropped.

    Example:
        ```python
        sink = HttpSink("https://logs.example.com/api/v2/logs/ingest", "token")
        logger = Logger.from_config(config, [sink])
        ```
    """

    def __init__(
        self,
        url: str,
        api_key: str = "",
        level: LogLevel | str = LogLevel.INFO,
        client: httpx.AsyncClient | None = None,
        timeout: float = 5.0,
    ) -> None:
        """Initialize the sink.

        Args:
            url: Ingestion endpoint.
            api_key: Token sent as ``Authorization: Api-Token <key>``.
            level: Minimum level posted.
            client: Shared client to post with. Without one, a short-lived
                client is opened per record.
            timeout: Request timeout in seconds for short-lived clients.
        """
        self.url = url
        self.level = LogLevel.parse(level)
        self._client = client
        self._timeout = timeout
        self._headers = {
            "Authorization": f"Api-Token {api_key}",
            "Content-Type": "application/json; charset=utf-8",
        }

    async def write(
        self, level: LogLevel, message: str, metadata: dict[str, Any]
    ) -> None:
        if not level.is_enabled_for(self.level):
            return
        body = encode_record(
            LogRecord(
                timestamp=time.time(), level=level, message=message, metadata=metadata
            )
        )
        try:
            if self._client is not None:
                await self._post(self._client, body)
            else:
                async with httpx.AsyncClient(timeout=self._timeout) as client:
                    await self._post(client, body)
        except httpx.HTTPError as exc:
            _logger.warning("Log ingestion to %s failed: %s", self.url, exc)

    async def _post(self, client: httpx.AsyncClient, body: str) -> None:
        response = await client.post(self.url, content=body, headers=self._headers)
        response.raise_for_status()
