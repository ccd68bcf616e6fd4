"""Retrying HTTP client with rotating identities and sticky cookies."""

import random
import time
from dataclasses import dataclass
from typing import Any

import httpx
import structlog

from linklens.errors import FetchErrorClass, TransportError
from linklens.extract.metadata import (
    extract_metadata,
    has_useful_metadata,
    looks_like_html,
)
from linklens.extract.urls import hostname_of
from linklens.fetch.config import FetchConfig
from linklens.fetch.constants import (
    BODY_METHODS,
    HARD_RETRY_DOMAINS,
    HTTP_STATUS_OK_MAX,
    HTTP_STATUS_OK_MIN,
    RETRYABLE_STATUS_CODES,
)
from linklens.fetch.identity import build_identity
from linklens.fetch.metrics import FetchMetrics
from linklens.fetch.models import FetchAttemptResult, RetrievalSession
from linklens.fetch.redact import redact_headers, redact_url_credentials
from linklens.quality.blocking import (
    looks_blocked,
    looks_blocked_text,
    looks_hard_blocked,
)


logger = structlog.get_logger()


def extract_sticky_cookie(set_cookie_values: list[str]) -> str:
    """Reduce Set-Cookie values to a Cookie header value.

    Attributes (Path, Expires, HttpOnly, ...) are dropped; only the
    name=value pairs survive.

    Args:
        set_cookie_values: Raw Set-Cookie header values.

    Returns:
        Cookie header value, or an empty string.
    """
    pairs = [value.split(";", 1)[0].strip() for value in set_cookie_values]
    return "; ".join(pair for pair in pairs if pair)


def is_hard_retry_domain(url: str) -> bool:
    """Check if a host is known to serve block pages with HTTP 200."""
    hostname = hostname_of(url)
    return any(
        hostname == domain or hostname.endswith(f".{domain}")
        for domain in HARD_RETRY_DOMAINS
    )


@dataclass(frozen=True)
class AttemptAssessment:
    """Acceptability signals for one HTTP response."""

    status_code: int
    upstream_ok: bool
    is_html: bool
    meta_ok: bool
    blocked_html: bool
    hard_blocked: bool

    @property
    def status_retryable(self) -> bool:
        """Check if the status alone justifies a retry."""
        return not self.upstream_ok and self.status_code in RETRYABLE_STATUS_CODES

    @property
    def should_retry(self) -> bool:
        """Check if the response warrants another attempt."""
        return (
            self.status_retryable
            or self.hard_blocked
            or (self.blocked_html and not self.meta_ok)
        )

    @property
    def retry_reason(self) -> str | None:
        """Name of the rule that triggered a retry, for logging."""
        if self.status_retryable:
            return "upstream_status"
        if self.hard_blocked:
            return "hard_block"
        if self.blocked_html and not self.meta_ok:
            return "blocked_html"
        return None


def assess_response(
    status_code: int,
    body: str,
    content_type: str | None,
    final_url: str,
) -> AttemptAssessment:
    """Evaluate whether a response is acceptable or worth retrying.

    Args:
        status_code: HTTP status.
        body: Decoded body.
        content_type: Declared Content-Type.
        final_url: URL after redirects.

    Returns:
        AttemptAssessment.
    """
    upstream_ok = HTTP_STATUS_OK_MIN <= status_code < HTTP_STATUS_OK_MAX
    is_html = looks_like_html(body, content_type)

    meta_ok = False
    if is_html:
        metadata = extract_metadata(body, final_url)
        meta_ok = has_useful_metadata(metadata) and not looks_blocked_text(
            metadata.title, metadata.description
        )

    blocked_html = is_html and looks_blocked(body)
    hard_blocked = (
        is_hard_retry_domain(final_url) and looks_hard_blocked(body) and not meta_ok
    )

    return AttemptAssessment(
        status_code=status_code,
        upstream_ok=upstream_ok,
        is_html=is_html,
        meta_ok=meta_ok,
        blocked_html=blocked_html,
        hard_blocked=hard_blocked,
    )


def classify_transport_error(error: httpx.RequestError) -> FetchErrorClass:
    """Map an httpx request error to a FetchErrorClass."""
    if isinstance(error, httpx.TimeoutException):
        return FetchErrorClass.NETWORK_TIMEOUT
    if isinstance(error, httpx.ConnectError):
        return FetchErrorClass.CONNECTION_ERROR
    if isinstance(error, httpx.TooManyRedirects):
        return FetchErrorClass.TOO_MANY_REDIRECTS
    return FetchErrorClass.UNKNOWN


class RetryingFetcher:
    """Issues one logical HTTP request with up to N physical attempts.

    Every attempt:
    - Uses a fresh randomized browser identity
    - Carries the cookies the previous attempt received
    - Is judged on status, bot-block tokens and extractable metadata

    All statuses are returned as data; only exhausted transport failures raise.
    """

    def __init__(
        self,
        config: FetchConfig,
        transport: httpx.BaseTransport | None = None,
        rng: random.Random | None = None,
    ) -> None:
        """Initialize the fetcher.

        Args:
            config: Fetch configuration (read-only, shared across calls).
            transport: Optional httpx transport (tests use httpx.MockTransport).
            rng: Optional random source for identity selection.
        """
        self._config = config
        self._transport = transport
        self._rng = rng
        self._metrics = FetchMetrics.get_instance()

    @property
    def config(self) -> FetchConfig:
        """Get the fetch configuration."""
        return self._config

    def build_headers(
        self,
        url: str,
        extra_headers: dict[str, str] | None,
        sticky_cookie: str,
    ) -> httpx.Headers:
        """Merge request headers.

        Priority, lowest first: generated identity, domain profile, caller
        headers, sticky cookie.

        Args:
            url: Target URL.
            extra_headers: Caller-supplied headers.
            sticky_cookie: Cookie captured from the previous attempt.

        Returns:
            Case-insensitive merged headers.
        """
        identity = build_identity(url, self._rng)
        headers = httpx.Headers(identity.headers)
        headers.update(self._config.get_headers_for_domain(hostname_of(url)))
        if extra_headers:
            headers.update(extra_headers)
        if sticky_cookie:
            headers["Cookie"] = sticky_cookie
        return headers

    def fetch(
        self,
        url: str,
        session: RetrievalSession,
        method: str = "GET",
        extra_headers: dict[str, str] | None = None,
        body: Any = None,
    ) -> FetchAttemptResult:
        """Fetch a URL, retrying blocked or failed attempts.

        Args:
            url: URL to fetch.
            session: Per-call state (sticky cookie, attempt counter, cancel).
            method: HTTP method.
            extra_headers: Caller-supplied headers.
            body: Request body, sent only for POST/PUT/PATCH.

        Returns:
            The accepted attempt, or the last one if all were rejected.

        Raises:
            TransportError: If every attempt failed at the transport level.
            RetrievalCancelledError: If the caller cancelled the call.
        """
        method = method.upper()
        policy = self._config.retry_policy
        log = logger.bind(
            component="fetch",
            url=redact_url_credentials(url),
            method=method,
        )

        for attempt in range(policy.max_retries):
            session.check_cancelled()
            is_last = policy.is_last_attempt(attempt)

            try:
                result = self._execute_single(
                    url, session, method, extra_headers, body, attempt, log
                )
            except httpx.RequestError as e:
                error_class = classify_transport_error(e)
                self._metrics.record_failure(error_class)
                log.warning(
                    "fetch_transport_error",
                    attempt=attempt + 1,
                    max_retries=policy.max_retries,
                    error_class=error_class.value,
                    error=str(e),
                )
                if is_last:
                    raise TransportError(
                        message=str(e) or error_class.value,
                        url=url,
                        fetch_error_class=error_class,
                        attempts=attempt + 1,
                    ) from e
                self._backoff(session, attempt, "transport_error", log)
                continue

            assessment = assess_response(
                result.status_code,
                result.body_text,
                result.content_type,
                result.final_url,
            )
            if is_last or not assessment.should_retry:
                log.info(
                    "fetch_accepted",
                    attempt=result.attempt,
                    status_code=result.status_code,
                    meta_ok=assessment.meta_ok,
                    blocked_html=assessment.blocked_html,
                    exhausted=assessment.should_retry,
                )
                return result

            self._backoff(session, attempt, assessment.retry_reason, log)

        # max_retries >= 1, so the loop always returns or raises
        msg = "retry loop exited without a result"
        raise AssertionError(msg)

    def _backoff(
        self,
        session: RetrievalSession,
        attempt: int,
        reason: str | None,
        log: structlog.stdlib.BoundLogger,
    ) -> None:
        delay_ms = self._config.retry_policy.get_delay_ms(attempt)
        self._metrics.record_retry()
        log.info(
            "retry_scheduled",
            attempt=attempt + 1,
            reason=reason,
            delay_ms=delay_ms,
        )
        session.wait(delay_ms)

    def _execute_single(
        self,
        url: str,
        session: RetrievalSession,
        method: str,
        extra_headers: dict[str, str] | None,
        body: Any,
        attempt: int,
        log: structlog.stdlib.BoundLogger,
    ) -> FetchAttemptResult:
        """Execute one physical request.

        Raises:
            httpx.RequestError: On transport failure.
        """
        headers = self.build_headers(url, extra_headers, session.sticky_cookie)
        request_kwargs: dict[str, Any] = {}
        if body is not None and method in BODY_METHODS:
            if isinstance(body, (dict, list)):
                request_kwargs["json"] = body
            else:
                request_kwargs["content"] = body

        total = session.record_attempt()
        log.debug(
            "fetch_attempt",
            attempt=attempt + 1,
            total_attempts=total,
            headers=redact_headers(dict(headers)),
        )

        timeout = self._config.get_timeout_for_domain(hostname_of(url))
        start_ns = time.perf_counter_ns()
        with httpx.Client(
            timeout=timeout,
            follow_redirects=True,
            max_redirects=self._config.max_redirects,
            transport=self._transport,
        ) as client:
            response = client.request(method, url, headers=headers, **request_kwargs)
            body_text = response.text
        elapsed_ms = (time.perf_counter_ns() - start_ns) / 1_000_000

        self._metrics.record_request(response.status_code, elapsed_ms)

        cookie = extract_sticky_cookie(response.headers.get_list("set-cookie"))
        if cookie:
            session.sticky_cookie = cookie

        log.info(
            "fetch_response",
            attempt=attempt + 1,
            status_code=response.status_code,
            elapsed_ms=round(elapsed_ms, 2),
            final_url=redact_url_credentials(str(response.url)),
            sticky_cookie=bool(session.sticky_cookie),
        )

        return FetchAttemptResult(
            status_code=response.status_code,
            status_text=response.reason_phrase,
            headers=dict(response.headers),
            body_text=body_text,
            elapsed_ms=elapsed_ms,
            attempt=attempt + 1,
            final_url=str(response.url),
        )
