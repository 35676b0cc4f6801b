"""
Rate limiting module for Prefixle lookups.
Spaces outbound calls to the lookup service and retries failed ones.
"""

import time
import logging
import threading
from typing import Callable, Optional

import requests

from prefixle.config import API_DELAY_MS, API_TIMEOUT_MS, API_MAX_RETRIES, API_RETRY_BACKOFF_MS
from prefixle.monitoring import monitor as default_monitor, LookupMonitor

logger = logging.getLogger(__name__)


class LookupUnavailable(RuntimeError):
    """Raised when the lookup service could not be reached after all retries."""


class RateLimiter:
    """Minimum-spacing limiter with per-attempt timeout and linear backoff."""

    def __init__(self, delay_ms: int = API_DELAY_MS, timeout_ms: int = API_TIMEOUT_MS,
                 max_retries: int = API_MAX_RETRIES, backoff_ms: int = API_RETRY_BACKOFF_MS,
                 clock: Callable[[], float] = time.monotonic,
                 sleep: Callable[[float], None] = time.sleep,
                 monitor: Optional[LookupMonitor] = None):
        """
        Initialize the limiter.

        Args:
            delay_ms: Minimum spacing between permitted calls
            timeout_ms: Per-attempt timeout handed to the request
            max_retries: Retries after the first attempt before giving up
            backoff_ms: Backoff unit; retry n waits backoff_ms * n
            clock: Monotonic clock in seconds
            sleep: Blocking sleep in seconds
            monitor: Receives error and latency reports
        """
        self.delay = delay_ms / 1000.0
        self.timeout = timeout_ms / 1000.0
        self.max_retries = max_retries
        self.backoff = backoff_ms / 1000.0
        self._clock = clock
        self._sleep = sleep
        self.monitor = monitor or default_monitor

        self.last_call: Optional[float] = None
        self._lock = threading.Lock()

    def throttle(self) -> None:
        """Block until the minimum delay since the previous permitted call has passed."""
        with self._lock:
            now = self._clock()
            if self.last_call is not None:
                wait = self.delay - (now - self.last_call)
                if wait > 0:
                    self._sleep(wait)
                    now = self._clock()
            self.last_call = now

    def call_with_timeout_and_retry(self, request: Callable[[float], requests.Response],
                                    endpoint: str = "lookup") -> requests.Response:
        """
        Run a request with throttling, timeout and retries.

        Args:
            request: Callable taking the timeout in seconds and returning a response
            endpoint: Name used in logs and monitoring

        Returns:
            The first successful response

        Raises:
            LookupUnavailable: every attempt timed out, failed or returned a non-2xx status
        """
        last_error: Optional[Exception] = None
        for attempt in range(self.max_retries + 1):
            if attempt:
                wait = self.backoff * attempt
                logger.warning(f"Lookup '{endpoint}' failed (attempt {attempt}/{self.max_retries + 1}): "
                               f"{last_error}. Retrying in {wait:.1f}s...")
                self._sleep(wait)
            self.throttle()
            started = self._clock()
            try:
                response = request(self.timeout)
                response.raise_for_status()
            except requests.Timeout as e:
                self.monitor.track_error('Timeout')
                last_error = e
                continue
            except requests.RequestException as e:
                self.monitor.track_error(type(e).__name__)
                last_error = e
                continue
            self.monitor.track_api_latency(endpoint, (self._clock() - started) * 1000)
            return response
        self.monitor.track_error('RetriesExhausted')
        raise LookupUnavailable(
            f"Lookup '{endpoint}' failed after {self.max_retries + 1} attempts: {last_error}"
        )
