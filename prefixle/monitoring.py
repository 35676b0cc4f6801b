"""
Monitoring module for the Prefixle puzzle core.
Handles logging setup and in-process diagnostics for word lookups.
"""

import os
import time
import logging
import threading
from collections import defaultdict
from typing import Dict, List, Optional
from pathlib import Path

# Create logs directory if it doesn't exist
logs_dir = Path(__file__).parent.parent / 'logs'
logs_dir.mkdir(exist_ok=True)

# Configure logging (level controlled by LOG_LEVEL env; default INFO)
_log_level_name = os.getenv('LOG_LEVEL', 'INFO').strip().upper()
_log_level = getattr(logging, _log_level_name, logging.INFO)
logging.basicConfig(
    level=_log_level,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[
        logging.FileHandler(logs_dir / 'prefixle.log'),
        logging.StreamHandler()
    ],
)

logging.getLogger('prefixle').setLevel(_log_level)
logger = logging.getLogger(__name__)

# Keep at most this many latency samples per endpoint
MAX_LATENCY_SAMPLES = 500


class LookupMonitor:
    """Collects error counts and latency samples for calls to the lookup service."""

    def __init__(self):
        self.errors: Dict[str, int] = defaultdict(int)
        self.latencies: Dict[str, List[float]] = defaultdict(list)
        self.calls = 0
        self.last_error: Optional[str] = None
        self.last_error_at: Optional[float] = None
        self._lock = threading.Lock()

    def track_api_latency(self, endpoint: str, latency_ms: float) -> None:
        """
        Record the latency of a completed lookup attempt.

        Args:
            endpoint: Logical name of the lookup (e.g. 'exact', 'prefix')
            latency_ms: Wall time of the attempt in milliseconds
        """
        with self._lock:
            self.calls += 1
            samples = self.latencies[endpoint]
            samples.append(latency_ms)
            if len(samples) > MAX_LATENCY_SAMPLES:
                del samples[0]
        logger.debug(f"Lookup {endpoint} took {latency_ms:.1f} ms")

    def track_error(self, error_type: str) -> None:
        """Track error occurrence."""
        with self._lock:
            self.errors[error_type] += 1
            self.last_error = error_type
            self.last_error_at = time.time()
        logger.debug(f"Lookup error recorded: {error_type}")

    def get_status(self) -> Dict:
        """
        Get a summary of lookup health.

        Returns:
            Dict with call count, error counts and average latency per endpoint
        """
        with self._lock:
            avg_latency = {
                endpoint: sum(samples) / len(samples)
                for endpoint, samples in self.latencies.items() if samples
            }
            return {
                "calls": self.calls,
                "errors": dict(self.errors),
                "avg_latency_ms": avg_latency,
                "last_error": self.last_error,
                "last_error_at": self.last_error_at,
            }

    def reset(self) -> None:
        with self._lock:
            self.errors.clear()
            self.latencies.clear()
            self.calls = 0
            self.last_error = None
            self.last_error_at = None


# Global monitor instance
monitor = LookupMonitor()
