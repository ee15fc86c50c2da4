"""Record sources that feed the DatasetIndex.

The index only needs something that yields a sequence of flat record
mappings. These sources cover the three ways the portal ships its pincode
directory: bundled in memory, as a JSON file, or behind a URL.

Both JSON sources accept either a top-level list of records or the
data.gov.in envelope ``{"records": [...]}``.

Retry strategy (HttpRecordSource only)
--------------------------------------
- Network errors (ConnectError, TimeoutException, ReadError) and 5xx
  responses trigger a tenacity retry with exponential backoff (1s → 10s),
  up to ``Settings.dataset_fetch_attempts`` attempts.
- 4xx responses fail immediately.
"""
from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Iterable, Mapping

import httpx
from tenacity import (
    AsyncRetrying,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from estateloc.config import Settings
from estateloc.location.errors import DatasetLoadError

logger = logging.getLogger(__name__)

RecordMapping = Mapping[str, Any]


def unwrap_records(payload: Any) -> list[RecordMapping]:
    """Return the record list from a decoded JSON payload.

    Raises:
        DatasetLoadError: If the payload is neither a list nor an envelope
            with a ``records`` list.
    """
    if isinstance(payload, Mapping):
        payload = payload.get("records")
    if not isinstance(payload, list):
        raise DatasetLoadError(
            "Dataset must be a JSON list of records or an object with a 'records' list"
        )
    return payload


class StaticRecordSource:
    """Serve records already held in memory."""

    def __init__(self, records: Iterable[RecordMapping]) -> None:
        self._records = list(records)

    def __call__(self) -> list[RecordMapping]:
        return list(self._records)


class JsonFileRecordSource:
    """Read records from a JSON file on disk."""

    def __init__(self, path: Path | str, encoding: str = "utf-8") -> None:
        self.path = Path(path)
        self.encoding = encoding

    def __call__(self) -> list[RecordMapping]:
        try:
            text = self.path.read_text(encoding=self.encoding)
        except OSError as exc:
            raise DatasetLoadError(f"Cannot read dataset file {self.path}: {exc}") from exc
        try:
            payload = json.loads(text)
        except json.JSONDecodeError as exc:
            raise DatasetLoadError(f"Dataset file {self.path} is not valid JSON: {exc}") from exc
        return unwrap_records(payload)


def _is_retryable(exc: BaseException) -> bool:
    if isinstance(exc, (httpx.ConnectError, httpx.TimeoutException, httpx.ReadError)):
        return True
    if isinstance(exc, httpx.HTTPStatusError):
        return exc.response.status_code >= 500
    return False


class HttpRecordSource:
    """Fetch records from a URL with an async httpx client.

    Usage::

        source = HttpRecordSource("https://example.org/pincodes.json", settings)
        index = DatasetIndex(source)
        await index.initialize()

    A ``transport`` may be injected for tests; respx mocks work without it.
    """

    def __init__(
        self,
        url: str,
        settings: Settings,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.url = url
        self._attempts = settings.dataset_fetch_attempts
        self._timeout = httpx.Timeout(
            connect=10.0, read=settings.dataset_fetch_timeout, write=10.0, pool=10.0
        )
        self._transport = transport

    async def _get(self, client: httpx.AsyncClient) -> httpx.Response:
        response = await client.get(self.url)
        response.raise_for_status()  # 5xx → retried, 4xx → not
        return response

    async def __call__(self) -> list[RecordMapping]:
        retrying = AsyncRetrying(
            stop=stop_after_attempt(self._attempts),
            wait=wait_exponential(multiplier=1, min=1, max=10),
            retry=retry_if_exception(_is_retryable),
            reraise=True,
        )
        try:
            async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                response = await retrying(self._get, client)
        except httpx.HTTPError as exc:
            raise DatasetLoadError(f"Cannot fetch dataset from {self.url}: {exc}") from exc

        try:
            payload = response.json()
        except ValueError as exc:
            raise DatasetLoadError(f"Dataset at {self.url} is not valid JSON: {exc}") from exc
        logger.debug("Fetched dataset from %s (%d bytes)", self.url, len(response.content))
        return unwrap_records(payload)


def source_from_settings(settings: Settings) -> HttpRecordSource | JsonFileRecordSource:
    """Build the record source named by *settings*; the URL wins over the path.

    Raises:
        DatasetLoadError: If neither a dataset URL nor a path is configured.
    """
    if settings.location_dataset_url:
        return HttpRecordSource(settings.location_dataset_url, settings)
    if settings.location_dataset_path is not None:
        return JsonFileRecordSource(settings.location_dataset_path)
    raise DatasetLoadError(
        "No dataset configured: set LOCATION_DATASET_URL or LOCATION_DATASET_PATH"
    )
