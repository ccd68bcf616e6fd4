"""Process-wide counters for retrieval activity."""

import threading
from dataclasses import dataclass, field
from typing import ClassVar

from linklens.errors import FetchErrorClass


@dataclass
class FetchMetrics:
    """Metrics for retrieval operations.

    Singleton shared by concurrent calls; every mutation takes the lock.
    Holds counters only, never per-call state.
    """

    http_requests_total: dict[int, int] = field(default_factory=dict)
    http_retry_total: int = 0
    http_failures_total: dict[str, int] = field(default_factory=dict)
    http_duration_ms_total: float = 0.0
    http_request_count: int = 0
    quality_retry_total: int = 0
    browser_escalations_total: int = 0
    browser_failures_total: int = 0
    platform_fallbacks_total: int = 0

    _instance: ClassVar["FetchMetrics | None"] = None
    _instance_lock: ClassVar[threading.Lock] = threading.Lock()

    def __post_init__(self) -> None:
        self._lock = threading.Lock()

    @classmethod
    def get_instance(cls) -> "FetchMetrics":
        """Get singleton metrics instance."""
        with cls._instance_lock:
            if cls._instance is None:
                cls._instance = cls()
            return cls._instance

    @classmethod
    def reset(cls) -> None:
        """Reset metrics (primarily for testing)."""
        with cls._instance_lock:
            cls._instance = None

    def record_request(self, status_code: int, duration_ms: float) -> None:
        """Record a completed HTTP request.

        Args:
            status_code: HTTP status code.
            duration_ms: Round-trip time in milliseconds.
        """
        with self._lock:
            self.http_requests_total[status_code] = (
                self.http_requests_total.get(status_code, 0) + 1
            )
            self.http_duration_ms_total += duration_ms
            self.http_request_count += 1

    def record_retry(self) -> None:
        """Record an inner retry."""
        with self._lock:
            self.http_retry_total += 1

    def record_failure(self, error_class: FetchErrorClass) -> None:
        """Record a transport failure."""
        with self._lock:
            key = error_class.value
            self.http_failures_total[key] = self.http_failures_total.get(key, 0) + 1

    def record_quality_retry(self) -> None:
        """Record an outer quality-loop retry."""
        with self._lock:
            self.quality_retry_total += 1

    def record_browser_escalation(self, succeeded: bool) -> None:
        """Record a headless browser escalation."""
        with self._lock:
            self.browser_escalations_total += 1
            if not succeeded:
                self.browser_failures_total += 1

    def record_platform_fallback(self) -> None:
        """Record a platform metadata lookup."""
        with self._lock:
            self.platform_fallbacks_total += 1

    def to_dict(self) -> dict[str, int | float | dict[str, int] | dict[int, int]]:
        """Convert metrics to dictionary."""
        with self._lock:
            return {
                "http_requests_total": dict(self.http_requests_total),
                "http_retry_total": self.http_retry_total,
                "http_failures_total": dict(self.http_failures_total),
                "http_duration_ms_total": self.http_duration_ms_total,
                "http_request_count": self.http_request_count,
                "quality_retry_total": self.quality_retry_total,
                "browser_escalations_total": self.browser_escalations_total,
                "browser_failures_total": self.browser_failures_total,
                "platform_fallbacks_total": self.platform_fallbacks_total,
            }
