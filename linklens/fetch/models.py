"""Data models for the HTTP fetch layer."""

import random
import threading
from dataclasses import dataclass, field
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, field_validator

from linklens.errors import RetrievalCancelledError
from linklens.fetch.constants import (
    DEFAULT_BASE_DELAY_MS,
    DEFAULT_JITTER_MS,
    DEFAULT_MAX_DELAY_MS,
    HTTP_STATUS_OK_MAX,
    HTTP_STATUS_OK_MIN,
)


class FetchAttemptResult(BaseModel):
    """Outcome of one physical HTTP or browser fetch.

    Header names are stored lower-cased so lookups are case-insensitive.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    status_code: int = Field(ge=100, le=999, description="HTTP status code")
    status_text: str = Field(default="", description="HTTP reason phrase")
    headers: dict[str, str] = Field(
        default_factory=dict, description="Response headers (lower-cased names)"
    )
    body_text: str = Field(default="", description="Decoded response body")
    elapsed_ms: float = Field(default=0.0, ge=0.0, description="Round-trip time")
    attempt: Annotated[int, Field(ge=1, description="1-based attempt index")] = 1
    final_url: Annotated[
        str, Field(min_length=1, description="Final URL after redirects")
    ]

    @field_validator("headers")
    @classmethod
    def lower_header_names(cls, v: dict[str, str]) -> dict[str, str]:
        """Normalize header names to lower case."""
        return {key.lower(): value for key, value in v.items()}

    @property
    def is_success(self) -> bool:
        """Check if the upstream status was 2xx."""
        return HTTP_STATUS_OK_MIN <= self.status_code < HTTP_STATUS_OK_MAX

    @property
    def content_type(self) -> str:
        """Get the declared content type, or an empty string."""
        return self.header("content-type") or ""

    def header(self, name: str) -> str | None:
        """Look up a response header by case-insensitive name."""
        return self.headers.get(name.lower())

    def with_body(self, body_text: str, **changes: object) -> "FetchAttemptResult":
        """Copy this result with a replaced body and optional field changes."""
        return self.model_copy(update={"body_text": body_text, **changes})


class RetryPolicy(BaseModel):
    """Configuration for retry behavior.

    Exponential backoff with additive jitter:
    delay(k) = min(base_delay_ms * 2^k, max_delay_ms) + U[0, jitter_ms)
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    max_retries: Annotated[int, Field(ge=1, le=10)] = 3
    base_delay_ms: Annotated[int, Field(ge=0, le=60000)] = DEFAULT_BASE_DELAY_MS
    max_delay_ms: Annotated[int, Field(ge=0, le=300000)] = DEFAULT_MAX_DELAY_MS
    jitter_ms: Annotated[int, Field(ge=0, le=10000)] = DEFAULT_JITTER_MS

    def get_delay_ms(self, attempt: int) -> int:
        """Calculate delay before the next attempt.

        Args:
            attempt: Index of the attempt that just finished (0-based).

        Returns:
            Delay in milliseconds.
        """
        delay = min(self.base_delay_ms * (2**attempt), self.max_delay_ms)
        jitter = self.jitter_ms * random.random()  # noqa: S311
        return int(delay + jitter)

    def is_last_attempt(self, attempt: int) -> bool:
        """Check if a 0-based attempt index is the final one."""
        return attempt >= self.max_retries - 1


@dataclass
class RetrievalSession:
    """Per-call retrieval state.

    Created fresh for every caller call and threaded through the retry and
    quality loops. Never shared between calls.
    """

    target_url: str
    resolved_url: str | None = None
    sticky_cookie: str = ""
    quality_attempt: int = 0
    total_attempts: int = 0
    cancel_event: threading.Event = field(default_factory=threading.Event)

    @property
    def effective_url(self) -> str:
        """URL the quality loop should fetch."""
        return self.resolved_url or self.target_url

    @property
    def cancelled(self) -> bool:
        """Check if the caller cancelled this call."""
        return self.cancel_event.is_set()

    def cancel(self) -> None:
        """Ask the pipeline to abandon this call at its next wait point."""
        self.cancel_event.set()

    def record_attempt(self) -> int:
        """Count one physical request and return the new total."""
        self.total_attempts += 1
        return self.total_attempts

    def check_cancelled(self) -> None:
        """Raise if the caller cancelled this call.

        Raises:
            RetrievalCancelledError: If cancelled.
        """
        if self.cancelled:
            raise RetrievalCancelledError(self.effective_url)

    def wait(self, delay_ms: int) -> None:
        """Wait for a backoff delay, waking early on cancellation.

        Args:
            delay_ms: Delay in milliseconds.

        Raises:
            RetrievalCancelledError: If cancelled before or during the wait.
        """
        if self.cancel_event.wait(delay_ms / 1000.0):
            raise RetrievalCancelledError(self.effective_url)
