"""
Unit tests for the HTTP pusher: request shape, retry and error classification
"""

import httpx
import pytest

from tsload.exceptions import TransportError
from tsload.models import CompressedBatch
from tsload.services.transport import (
    DEFAULT_MAX_RETRIES,
    RETRY_STATUS_CODES,
    HTTPPusher,
    backoff_delay,
    classify_exception,
    classify_status,
)

URL = "http://tsdb:9000/api/v1/write"


def _batch(index: int = 0, rows: int = 3) -> CompressedBatch:
    return CompressedBatch(index=index, payload=b'\x1f\x8bcompressed', row_count=rows,
                           raw_size=120, content_encoding='gzip')


def _pusher(responses, delays=None, **kwargs):
    """Pusher whose requests are answered from a list of responses/exceptions"""
    requests = []
    queue = list(responses)

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        item = queue.pop(0)
        if isinstance(item, Exception):
            raise item
        return item

    client = httpx.Client(transport=httpx.MockTransport(handler))
    sleep = delays.append if delays is not None else (lambda _: None)
    pusher = HTTPPusher(URL, "_internal", client=client, sleep=sleep, **kwargs)
    return pusher, requests


class TestPushRequest:
    """Test the shape of the write request"""

    def test_put_with_headers_and_db_param(self):
        pusher, requests = _pusher([httpx.Response(204)])

        result = pusher.push(_batch())

        assert result.status_code == 204
        assert result.attempts == 1
        (req,) = requests
        assert req.method == "PUT"
        assert req.url.path == "/api/v1/write"
        assert req.url.params["db"] == "_internal"
        assert req.headers["Accept"] == "application/json"
        assert req.headers["Content-Type"] == "application/flatbuffer"
        assert req.headers["Content-Encoding"] == "gzip"
        assert req.content == b'\x1f\x8bcompressed'

    def test_content_encoding_follows_batch(self):
        pusher, requests = _pusher([httpx.Response(200)])
        batch = _batch()
        batch.content_encoding = 'zstd'

        pusher.push(batch)

        assert requests[0].headers["Content-Encoding"] == "zstd"

    @pytest.mark.parametrize("status", [200, 201, 204])
    def test_any_2xx_is_success(self, status):
        pusher, _ = _pusher([httpx.Response(status)])
        assert pusher.push(_batch()).status_code == status


class TestPushRetry:
    """Test bounded retry of retryable failures"""

    def test_server_error_is_retried_with_same_payload(self):
        delays = []
        pusher, requests = _pusher([httpx.Response(503), httpx.Response(500), httpx.Response(204)],
                                   delays=delays, backoff_base=0.5)

        result = pusher.push(_batch())

        assert result.attempts == 3
        assert len(requests) == 3
        assert {r.content for r in requests} == {b'\x1f\x8bcompressed'}
        assert delays == [0.5, 1.0]
        assert pusher.retries == 2

    def test_connection_error_is_retried(self):
        pusher, requests = _pusher([
            httpx.ConnectError("connection refused"),
            httpx.Response(204),
        ])

        assert pusher.push(_batch()).attempts == 2
        assert len(requests) == 2

    def test_retry_after_is_honoured(self):
        delays = []
        pusher, _ = _pusher([httpx.Response(429, headers={"Retry-After": "4"}), httpx.Response(204)],
                            delays=delays)

        pusher.push(_batch())

        assert delays == [4.0]

    def test_client_error_is_terminal(self):
        delays = []
        pusher, requests = _pusher([httpx.Response(400, text="bad row format")], delays=delays)

        with pytest.raises(TransportError) as exc_info:
            pusher.push(_batch(index=7, rows=101))

        err = exc_info.value
        assert err.status_code == 400
        assert err.kind == "client_error"
        assert not err.retryable
        assert (err.batch_index, err.row_count) == (7, 101)
        assert "bad row format" in str(err)
        assert len(requests) == 1
        assert delays == []

    def test_retries_exhausted(self):
        pusher, requests = _pusher([httpx.Response(502)] * 3, max_retries=2)

        with pytest.raises(TransportError) as exc_info:
            pusher.push(_batch(index=1))

        err = exc_info.value
        assert err.retryable
        assert err.attempts == 3
        assert err.kind == "server_error"
        assert len(requests) == 3

    def test_network_failure_exhausted(self):
        pusher, _ = _pusher([httpx.ReadTimeout("timed out")] * 2, max_retries=1)

        with pytest.raises(TransportError) as exc_info:
            pusher.push(_batch())

        assert exc_info.value.kind == "network_timeout"
        assert exc_info.value.status_code is None

    def test_no_retries_configured(self):
        pusher, requests = _pusher([httpx.Response(500)], max_retries=0)

        with pytest.raises(TransportError):
            pusher.push(_batch())
        assert len(requests) == 1


class TestClassification:
    """Test error kinds and backoff"""

    @pytest.mark.parametrize("status,expected", [
        (200, None),
        (204, None),
        (301, "http_301"),
        (400, "client_error"),
        (404, "client_error"),
        (429, "rate_limited"),
        (500, "server_error"),
        (503, "server_error"),
    ])
    def test_status_mapping(self, status, expected):
        assert classify_status(status) == expected

    def test_exception_mapping(self):
        assert classify_exception(httpx.ReadTimeout("t")) == "network_timeout"
        assert classify_exception(httpx.ConnectError("c")) == "network_connect"
        assert classify_exception(httpx.RemoteProtocolError("p")) == "network_protocol"
        assert classify_exception(httpx.DecodingError("d")) == "network_error"
        assert classify_exception(RuntimeError("x")) == "RuntimeError"

    def test_backoff_growth_and_cap(self):
        assert [backoff_delay(i, base=1.0, cap=30.0) for i in range(4)] == [1.0, 2.0, 4.0, 8.0]
        assert backoff_delay(10, base=1.0, cap=5.0) == 5.0

    def test_backoff_retry_after(self):
        assert backoff_delay(0, retry_after="7") == 7.0
        assert backoff_delay(0, base=1.0, retry_after="soon") == 1.0
        assert backoff_delay(0, cap=5.0, retry_after="60") == 5.0

    def test_defaults(self):
        assert DEFAULT_MAX_RETRIES == 3
        assert 429 in RETRY_STATUS_CODES
        assert 503 in RETRY_STATUS_CODES
