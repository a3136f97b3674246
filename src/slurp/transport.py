"""Fire-and-forget HTTP transport for the collection endpoint."""

import json
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Any

import requests
from loguru import logger

from slurp.config import REQUEST_TIMEOUT, SERVER_URL


class HttpTransport:
    """POST payloads to the collection endpoint on a background worker.

    The body is sent as plain JSON text without extra headers, which keeps
    the request "simple" for browsers and proxies alike. Failures are logged
    and swallowed: the returned future resolves to None.
    """

    def __init__(self, url: str = SERVER_URL, *, timeout: float = REQUEST_TIMEOUT) -> None:
        self.url = url
        self.timeout = timeout
        self.sess = requests.Session()
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="slurp-send")
        logger.debug("Transport ready: url {!r}, timeout {!r}", url, timeout)

    def send(self, payload: dict[str, Any]) -> "Future[dict[str, Any] | None]":
        """Queue a payload for sending and return immediately."""
        return self._executor.submit(self._post, json.dumps(payload))

    def _post(self, body: str) -> dict[str, Any] | None:
        try:
            r = self.sess.post(self.url, data=body.encode("utf-8"), timeout=self.timeout)
            r.raise_for_status()
        except requests.RequestException:
            logger.opt(exception=True).debug("Sending to {!r} failed", self.url)
            return None

        if not r.content:
            return None
        try:
            reply = r.json()
        except ValueError:
            logger.debug("Endpoint reply is not JSON: {!r}", r.text[:64])
            return None
        return reply if isinstance(reply, dict) else None

    def close(self, *, wait: bool = True) -> None:
        """Stop the worker, optionally waiting for queued payloads."""
        self._executor.shutdown(wait=wait)
        self.sess.close()


class LoggingTransport:
    """Transport that only logs payloads. Used for dry runs."""

    def __init__(self) -> None:
        self.sent: list[dict[str, Any]] = []

    def send(self, payload: dict[str, Any]) -> "Future[dict[str, Any] | None]":
        self.sent.append(payload)
        logger.info("dry-run: would send {}", json.dumps(payload, sort_keys=True))
        future: Future[dict[str, Any] | None] = Future()
        future.set_result(None)
        return future
