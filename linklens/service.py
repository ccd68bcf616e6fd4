"""Caller-facing fetch-and-extract operation.

Validates the request, runs the quality-gated retrieval loop, classifies the
page and wraps everything in the response envelope API clients consume.
"""

import uuid
from datetime import UTC, datetime
from typing import Any
from urllib.parse import urlsplit

import httpx
import structlog
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from linklens.classifier import LinkType, classify_link
from linklens.errors import InputError, LinkLensError
from linklens.extract.metadata import (
    MetadataImages,
    has_useful_metadata,
    is_html_content_type,
)
from linklens.extract.urls import hostname_of
from linklens.fetch.constants import ALLOWED_METHODS
from linklens.fetch.models import RetrievalSession
from linklens.fetch.redact import redact_url_credentials
from linklens.observability import bind_request_context, clear_request_context
from linklens.quality.blocking import looks_blocked
from linklens.retrieval import LinkRetriever, RetrievalOutcome, RetrievalRequest
from linklens.settings import get_settings


logger = structlog.get_logger()

MISSING_URL_MESSAGE = "Missing required parameter: url"
INVALID_METHOD_MESSAGE = "Invalid HTTP method"
INVALID_URL_MESSAGE = "Invalid URL: expected an absolute http(s) URL"
REQUEST_FAILED_MESSAGE = "Request execution failed"

HTTP_STATUS_BAD_REQUEST = 400
HTTP_STATUS_INTERNAL_ERROR = 500


class ExecuteParams(BaseModel):
    """Raw caller parameters, before validation."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    url: str | None = None
    method: str | None = "GET"
    headers: dict[str, str] = Field(default_factory=dict)
    data: Any = None


class ResponseMetadata(BaseModel):
    """Transport details of the final attempt."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    domain: str = ""
    status_code: int = Field(alias="statusCode")
    status_text: str = Field(default="", alias="statusText")
    method: str
    content_type: str = Field(default="", alias="contentType")
    response_time: float = Field(default=0.0, alias="responseTime")
    attempt: int


class LinkPreview(BaseModel):
    """Successful retrieval payload."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    url: str
    resolved_url: str | None = Field(default=None, alias="resolvedUrl")
    method: str
    status: int
    status_text: str = Field(default="", alias="statusText")
    link_type: LinkType = Field(alias="linkType")
    metadata: ResponseMetadata
    images: MetadataImages | None = None
    title: str | None = None
    description: str | None = None


class ExecuteResponse(BaseModel):
    """Response envelope for one call.

    http_status is the status a transport surface should answer with; it is
    not part of the serialized body.
    """

    model_config = ConfigDict(frozen=True)

    success: bool
    http_status: int = Field(exclude=True)
    data: LinkPreview | dict[str, Any]
    attempt: int = Field(ge=0)
    timestamp: str = Field(
        default_factory=lambda: datetime.now(UTC).isoformat().replace("+00:00", "Z")
    )

    def to_payload(self) -> dict[str, Any]:
        """Serialize with wire field names, omitting absent values."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


def is_fetchable_url(url: str) -> bool:
    """Check if a URL parses as an absolute http(s) URL with a host.

    Both httpx and urllib must accept it, since both parse it downstream.
    """
    try:
        parsed = httpx.URL(url)
        hostname = urlsplit(url).hostname
    except (httpx.InvalidURL, ValueError):
        return False
    return parsed.scheme in ("http", "https") and bool(parsed.host and hostname)


def validate_params(params: ExecuteParams) -> RetrievalRequest:
    """Turn raw parameters into a retrieval request.

    Args:
        params: Caller parameters.

    Returns:
        Validated RetrievalRequest.

    Raises:
        InputError: If the url is missing or unparseable, or the method is not
            allowed.
    """
    url = (params.url or "").strip()
    if not url:
        raise InputError(MISSING_URL_MESSAGE, field="url")
    if not is_fetchable_url(url):
        raise InputError(INVALID_URL_MESSAGE, field="url")

    method = (params.method or "GET").strip().upper()
    if method not in ALLOWED_METHODS:
        raise InputError(INVALID_METHOD_MESSAGE, field="method")

    try:
        return RetrievalRequest(
            url=url,
            method=method,
            headers=params.headers,
            body=params.data,
        )
    except ValidationError as e:
        raise InputError(str(e)) from e


def build_preview(request: RetrievalRequest, outcome: RetrievalOutcome) -> LinkPreview:
    """Assemble the success payload for a finished retrieval."""
    result = outcome.result
    metadata = outcome.metadata
    html = result.body_text if is_html_content_type(result.content_type) else ""

    link_type = classify_link(
        outcome.effective_url,
        (metadata.title if metadata else None) or "",
        (metadata.description if metadata else None) or "",
        html,
    )

    return LinkPreview(
        url=request.url,
        resolved_url=(
            outcome.effective_url if outcome.effective_url != request.url else None
        ),
        method=request.method,
        status=result.status_code,
        status_text=result.status_text,
        link_type=link_type,
        metadata=ResponseMetadata(
            domain=hostname_of(outcome.effective_url),
            status_code=result.status_code,
            status_text=result.status_text,
            method=request.method,
            content_type=result.content_type,
            response_time=round(result.elapsed_ms, 2),
            attempt=outcome.total_attempts,
        ),
        images=metadata.images if metadata else None,
        title=metadata.title if metadata else None,
        description=metadata.description if metadata else None,
    )


def is_client_success(outcome: RetrievalOutcome) -> bool:
    """Decide whether the caller sees a successful response.

    Success when the upstream status was 2xx or useful content was obtained,
    as long as the page does not look like an error or block page.
    """
    result = outcome.result
    metadata = outcome.metadata
    upstream_ok = result.is_success
    useful = has_useful_metadata(metadata) or is_html_content_type(result.content_type)
    title = ((metadata.title if metadata else None) or "").lower()
    looks_error = (looks_blocked(result.body_text) and not useful) or "error" in title
    return (upstream_ok and not looks_error) or (useful and not looks_error)


def execute_request(
    params: ExecuteParams,
    retriever: LinkRetriever | None = None,
    session: RetrievalSession | None = None,
) -> ExecuteResponse:
    """Fetch a URL and extract its metadata.

    Args:
        params: Caller parameters.
        retriever: Retrieval pipeline (built from settings if None).
        session: Per-call state; pass one to be able to cancel the call.

    Returns:
        ExecuteResponse. Input problems yield status 400 and pipeline
        failures status 500; neither raises.
    """
    try:
        request = validate_params(params)
    except InputError as e:
        logger.warning("invalid_request", error=e.message, field=e.field)
        return ExecuteResponse(
            success=False,
            http_status=HTTP_STATUS_BAD_REQUEST,
            data={"error": e.message},
            attempt=0,
        )

    bind_request_context(uuid.uuid4().hex[:12])
    try:
        return _execute(request, retriever, session)
    finally:
        clear_request_context()


def _execute(
    request: RetrievalRequest,
    retriever: LinkRetriever | None,
    session: RetrievalSession | None,
) -> ExecuteResponse:
    retriever = retriever or LinkRetriever.from_settings(get_settings())
    session = session or RetrievalSession(target_url=request.url)
    log = logger.bind(
        component="service",
        url=redact_url_credentials(request.url),
        method=request.method,
    )
    log.info("request_started")

    try:
        outcome = retriever.retrieve(request, session)
    except LinkLensError as e:
        log.error("request_failed", **e.to_dict())
        return ExecuteResponse(
            success=False,
            http_status=HTTP_STATUS_INTERNAL_ERROR,
            data={
                "error": REQUEST_FAILED_MESSAGE,
                "details": e.message,
                "url": request.url,
            },
            attempt=session.total_attempts,
        )
    except Exception as e:  # noqa: BLE001
        log.exception("request_failed_unexpected", error=str(e))
        return ExecuteResponse(
            success=False,
            http_status=HTTP_STATUS_INTERNAL_ERROR,
            data={
                "error": REQUEST_FAILED_MESSAGE,
                "details": str(e),
                "url": request.url,
            },
            attempt=session.total_attempts,
        )

    preview = build_preview(request, outcome)
    success = is_client_success(outcome)
    log.info(
        "request_complete",
        success=success,
        status_code=outcome.result.status_code,
        link_type=preview.link_type.value,
        attempts=outcome.total_attempts,
        escalated=outcome.escalated,
    )
    return ExecuteResponse(
        success=success,
        http_status=200 if success else outcome.result.status_code,
        data=preview,
        attempt=outcome.total_attempts,
    )
