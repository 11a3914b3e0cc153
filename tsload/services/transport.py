"""
HTTP transport: push compressed batches to the TSDB write endpoint

Every batch is one PUT to a fixed URL. Failures are classified:
- retryable: timeouts, connection/protocol errors, 429 and 5xx
- terminal: any other non-2xx status

Retryable failures are retried with exponential backoff, re-sending the same
compressed payload; the batch is only dropped once retries are exhausted,
and then loudly via TransportError.
"""

import logging
import time
from typing import Callable, Dict, Optional

import httpx

from tsload.exceptions import TransportError
from tsload.models import CompressedBatch, PushResult
from tsload.protocols import SinkProtocol

logger = logging.getLogger(__name__)

CONTENT_TYPE = "application/flatbuffer"
ACCEPT = "application/json"

DEFAULT_TIMEOUT = 30.0
DEFAULT_MAX_RETRIES = 3
DEFAULT_BACKOFF_BASE = 1.0
DEFAULT_BACKOFF_MAX = 30.0
RETRY_STATUS_CODES = frozenset({429, 500, 502, 503, 504})


def classify_status(status_code: int) -> Optional[str]:
    """Map an HTTP status code to an error kind, or None on success."""
    if 200 <= status_code < 300:
        return None
    if status_code == 429:
        return "rate_limited"
    if 400 <= status_code < 500:
        return "client_error"
    if 500 <= status_code < 600:
        return "server_error"
    return f"http_{status_code}"


def classify_exception(exc: Exception) -> str:
    """Map a network-level exception to an error kind."""
    if isinstance(exc, httpx.TimeoutException):
        return "network_timeout"
    if isinstance(exc, httpx.ConnectError):
        return "network_connect"
    if isinstance(exc, (httpx.RemoteProtocolError, httpx.LocalProtocolError)):
        return "network_protocol"
    if isinstance(exc, httpx.HTTPError):
        return "network_error"
    return type(exc).__name__


def is_retryable_status(status_code: int) -> bool:
    return status_code in RETRY_STATUS_CODES or 500 <= status_code < 600


def backoff_delay(
    attempt: int,
    *,
    base: float = DEFAULT_BACKOFF_BASE,
    cap: float = DEFAULT_BACKOFF_MAX,
    retry_after: Optional[str] = None,
) -> float:
    """Compute back-off delay, honouring Retry-After header when present."""
    if retry_after is not None:
        try:
            return min(float(retry_after), cap)
        except ValueError:
            pass
    return min(base * (2 ** attempt), cap)


class HTTPPusher(SinkProtocol):
    """
    Blocking HTTP pusher for one generator instance

    Args:
        url: Write endpoint, e.g. http://localhost:9000/api/v1/write
        database: Value of the `db` query parameter
        timeout: Per-request timeout in seconds
        max_retries: Extra attempts for retryable failures
        backoff_base, backoff_max: Exponential backoff parameters in seconds
        client: Preconfigured httpx.Client (tests pass one with a MockTransport)
        sleep: Delay function between attempts
    """

    def __init__(
        self,
        url: str,
        database: str,
        *,
        timeout: float = DEFAULT_TIMEOUT,
        max_retries: int = DEFAULT_MAX_RETRIES,
        backoff_base: float = DEFAULT_BACKOFF_BASE,
        backoff_max: float = DEFAULT_BACKOFF_MAX,
        client: Optional[httpx.Client] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.url = url
        self.database = database
        self.max_retries = max_retries
        self.backoff_base = backoff_base
        self.backoff_max = backoff_max
        self.retries = 0
        self._sleep = sleep
        self._owns_client = client is None
        self._client = client or httpx.Client(timeout=httpx.Timeout(timeout))

    def headers(self, content_encoding: str) -> Dict[str, str]:
        return {
            "Accept": ACCEPT,
            "Content-Type": CONTENT_TYPE,
            "Content-Encoding": content_encoding,
        }

    def push(self, batch: CompressedBatch) -> PushResult:
        """
        Send one compressed batch

        Raises:
            TransportError: terminal failure, or retryable failure after
                max_retries extra attempts
        """
        headers = self.headers(batch.content_encoding)
        params = {"db": self.database}
        started = time.monotonic()

        for attempt in range(1 + self.max_retries):
            last_attempt = attempt == self.max_retries
            retry_after = None
            try:
                resp = self._client.put(self.url, content=batch.payload, headers=headers, params=params)
            except httpx.HTTPError as e:
                kind = classify_exception(e)
                if last_attempt:
                    raise TransportError(
                        f"push failed: {kind}: {e}",
                        batch.index, batch.row_count,
                        kind=kind, retryable=True, attempts=attempt + 1,
                    ) from e
                status = None
            else:
                kind = classify_status(resp.status_code)
                if kind is None:
                    logger.debug(
                        "batch %d pushed: %d rows, %d bytes, status %d",
                        batch.index, batch.row_count, batch.size, resp.status_code,
                    )
                    return PushResult(
                        batch_index=batch.index,
                        status_code=resp.status_code,
                        attempts=attempt + 1,
                        elapsed=time.monotonic() - started,
                    )
                status = resp.status_code
                retryable = is_retryable_status(status)
                if last_attempt or not retryable:
                    raise TransportError(
                        f"push rejected with HTTP {status}: {_snippet(resp)}",
                        batch.index, batch.row_count,
                        kind=kind, status_code=status, retryable=retryable, attempts=attempt + 1,
                    )
                retry_after = resp.headers.get("Retry-After")

            delay = backoff_delay(
                attempt, base=self.backoff_base, cap=self.backoff_max, retry_after=retry_after,
            )
            self.retries += 1
            logger.warning(
                "batch %d push failed (%s, status=%s), retry %d/%d in %.2fs",
                batch.index, kind, status, attempt + 1, self.max_retries, delay,
            )
            self._sleep(delay)

        # unreachable: the last attempt always returns or raises
        raise AssertionError("retry loop exited without a result")  # pragma: no cover

    def close(self):
        if self._owns_client:
            self._client.close()


def _snippet(resp: httpx.Response, limit: int = 200) -> str:
    text = resp.text.strip()
    return text[:limit] if text else resp.reason_phrase
