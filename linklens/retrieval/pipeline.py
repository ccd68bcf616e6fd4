"""Quality-gated retrieval loop.

Wraps the retry orchestrator in an outer loop because a successful HTTP
exchange can still return unusable content, such as an anti-bot shell page
served with status 200. Each quality attempt may escalate to a headless
browser and enrich generic metadata from a platform endpoint.
"""

import httpx
import structlog

from linklens.browser.fetcher import (
    BrowserFetcher,
    UnavailableBrowserFetcher,
    create_browser_fetcher,
    needs_browser_fetch,
)
from linklens.errors import LinkLensError
from linklens.extract.metadata import (
    ExtractedMetadata,
    extract_metadata,
    has_useful_metadata,
    looks_like_html,
)
from linklens.extract.urls import site_root
from linklens.fetch.client import RetryingFetcher
from linklens.fetch.config import FetchConfig
from linklens.fetch.metrics import FetchMetrics
from linklens.fetch.models import FetchAttemptResult, RetrievalSession
from linklens.fetch.redact import redact_url_credentials
from linklens.fetch.shortener import is_shortener_url, resolve_final_url
from linklens.platform.client import PlatformMetadataClient
from linklens.quality.blocking import looks_blocked
from linklens.quality.validators import (
    PRODUCT_VALIDATORS,
    ProductPageValidator,
    find_product_validator,
)
from linklens.retrieval.models import RetrievalOutcome, RetrievalRequest
from linklens.retrieval.state_machine import RetrievalStateMachine
from linklens.settings import AppSettings


logger = structlog.get_logger()


class LinkRetriever:
    """Fetches a URL until its metadata is usable or attempts run out.

    Per quality attempt:
    1. Fetch through the retry orchestrator
    2. Extract metadata if the body is HTML-like
    3. Escalate to the browser when static metadata is unusable
    4. Enrich generic metadata from the platform resolver
    5. Backfill the favicon and judge the final result
    """

    def __init__(
        self,
        config: FetchConfig,
        fetcher: RetryingFetcher | None = None,
        browser: BrowserFetcher | None = None,
        platform_client: PlatformMetadataClient | None = None,
        validators: tuple[ProductPageValidator, ...] = PRODUCT_VALIDATORS,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        """Initialize the retriever.

        Args:
            config: Fetch configuration.
            fetcher: Retry orchestrator (built from config if None).
            browser: Browser escalation capability (unavailable if None).
            platform_client: Platform metadata client (built from config if None).
            validators: Product page validators.
            transport: Optional httpx transport for the default collaborators.
        """
        self._config = config
        self._transport = transport
        self._fetcher = fetcher or RetryingFetcher(config, transport=transport)
        self._browser = browser or UnavailableBrowserFetcher()
        self._platform = platform_client or PlatformMetadataClient(
            timeout_seconds=config.platform_timeout_seconds,
            transport=transport,
        )
        self._validators = validators
        self._metrics = FetchMetrics.get_instance()

    @classmethod
    def from_settings(cls, settings: AppSettings) -> "LinkRetriever":
        """Build a retriever with production collaborators.

        Args:
            settings: Loaded application settings.

        Returns:
            LinkRetriever instance.
        """
        return cls(
            config=FetchConfig.from_settings(settings),
            browser=create_browser_fetcher(settings.browser_fetch_enabled),
        )

    @property
    def config(self) -> FetchConfig:
        """Get the fetch configuration."""
        return self._config

    def retrieve(
        self,
        request: RetrievalRequest,
        session: RetrievalSession | None = None,
    ) -> RetrievalOutcome:
        """Run the quality-gated loop for one request.

        Args:
            request: Caller request.
            session: Per-call state; created fresh if None.

        Returns:
            RetrievalOutcome for the last quality attempt.

        Raises:
            TransportError: If a quality attempt exhausted its transport retries.
            RetrievalCancelledError: If the caller cancelled the call.
        """
        session = session or RetrievalSession(target_url=request.url)
        machine = RetrievalStateMachine(redact_url_credentials(request.url))
        log = logger.bind(
            component="retrieval",
            url=redact_url_credentials(request.url),
            method=request.method,
        )

        try:
            return self._run(request, session, machine, log)
        except LinkLensError:
            machine.to_failed()
            raise

    def _run(
        self,
        request: RetrievalRequest,
        session: RetrievalSession,
        machine: RetrievalStateMachine,
        log: structlog.stdlib.BoundLogger,
    ) -> RetrievalOutcome:
        if is_shortener_url(request.url):
            resolved = resolve_final_url(request.url, self._config, self._transport)
            if resolved != request.url:
                session.resolved_url = resolved
                log.info("target_resolved", resolved_url=redact_url_credentials(resolved))

        target_url = session.effective_url
        max_quality = self._config.quality_attempts

        result: FetchAttemptResult | None = None
        metadata: ExtractedMetadata | None = None
        effective_url = target_url
        escalated = False
        accepted = False

        for quality_attempt in range(max_quality):
            session.quality_attempt = quality_attempt
            session.check_cancelled()
            machine.to_fetching()

            result = self._fetcher.fetch(
                target_url,
                session,
                method=request.method,
                extra_headers=request.headers,
                body=request.body,
            )
            effective_url = result.final_url or target_url
            metadata = None
            escalated = False

            if not looks_like_html(result.body_text, result.content_type):
                log.info(
                    "non_html_response",
                    quality_attempt=quality_attempt + 1,
                    content_type=result.content_type,
                )
                machine.to_done()
                break

            machine.to_extracting()
            metadata = extract_metadata(result.body_text, effective_url)
            validator = find_product_validator(effective_url, self._validators)

            if self._should_escalate(effective_url, result.body_text, metadata, validator):
                machine.to_escalating()
                rendered = self._escalate(effective_url, result, session, log)
                if rendered is not None:
                    result = rendered
                    escalated = True
                    metadata = extract_metadata(result.body_text, effective_url)

            if self._platform.needs_fallback(effective_url, metadata):
                machine.to_enriching()
                metadata = self._platform.enrich(effective_url, metadata)

            # Usefulness is judged before the synthetic favicon is added
            useful = has_useful_metadata(metadata)
            metadata = self._backfill_favicon(metadata, effective_url)

            if validator is not None:
                accepted = validator.is_ok(metadata, result.body_text)
            else:
                blocked = looks_blocked(result.body_text)
                accepted = useful and not (blocked and not useful)

            log.info(
                "quality_evaluated",
                quality_attempt=quality_attempt + 1,
                accepted=accepted,
                escalated=escalated,
                status_code=result.status_code,
                has_title=bool(metadata and metadata.title),
                has_primary_image=bool(metadata and metadata.images.primary_image),
            )

            if accepted or quality_attempt >= max_quality - 1:
                machine.to_done()
                break

            delay_ms = self._config.retry_policy.get_delay_ms(quality_attempt)
            self._metrics.record_quality_retry()
            log.info(
                "quality_retry_scheduled",
                quality_attempt=quality_attempt + 1,
                delay_ms=delay_ms,
            )
            session.wait(delay_ms)

        # quality_attempts >= 1, so at least one fetch ran
        if result is None:
            msg = "quality loop exited without a result"
            raise AssertionError(msg)

        return RetrievalOutcome(
            result=result,
            effective_url=effective_url,
            metadata=metadata,
            total_attempts=max(session.total_attempts, 1),
            quality_attempts=session.quality_attempt + 1,
            escalated=escalated,
            accepted=accepted,
        )

    def _should_escalate(
        self,
        url: str,
        body: str,
        metadata: ExtractedMetadata,
        validator: ProductPageValidator | None,
    ) -> bool:
        if validator is not None and not validator.is_ok(metadata, body):
            return True
        if has_useful_metadata(metadata):
            return False
        return looks_blocked(body) or needs_browser_fetch(url)

    def _escalate(
        self,
        url: str,
        result: FetchAttemptResult,
        session: RetrievalSession,
        log: structlog.stdlib.BoundLogger,
    ) -> FetchAttemptResult | None:
        """Re-fetch a page in the browser.

        Returns:
            The working result with the rendered body, or None if the browser
            is unavailable or produced nothing.
        """
        if not self._browser.available:
            log.info("browser_escalation_skipped", reason="unavailable")
            return None

        session.record_attempt()
        log.info("browser_escalation", attempt=result.attempt + 1)
        rendered = self._browser.fetch(url, session)
        succeeded = rendered is not None and bool(rendered.body_text)
        self._metrics.record_browser_escalation(succeeded)

        if not succeeded:
            log.warning("browser_escalation_empty")
            return None

        return result.with_body(
            rendered.body_text,
            status_code=rendered.status_code,
            status_text=rendered.status_text,
            headers=rendered.headers,
            attempt=result.attempt + 1,
        )

    @staticmethod
    def _backfill_favicon(
        metadata: ExtractedMetadata | None, url: str
    ) -> ExtractedMetadata | None:
        if metadata is None or metadata.images.favicon:
            return metadata
        root = site_root(url)
        if root is None:
            return metadata
        return metadata.with_favicon(f"{root}/favicon.ico")
