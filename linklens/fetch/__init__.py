"""HTTP fetch layer with identity rotation, retries and sticky cookies.

This module provides the retry orchestrator used by the retrieval loop:
- Randomized, internally consistent browser identities per attempt
- Retry decisions driven by status, bot-block tokens and metadata
- Exponential backoff with jitter, interruptible by cancellation
- Cookie stickiness between attempts of one call
- Header redaction for logging
"""

from linklens.fetch.client import (
    AttemptAssessment,
    RetryingFetcher,
    assess_response,
    extract_sticky_cookie,
)
from linklens.fetch.config import DomainProfile, FetchConfig
from linklens.fetch.constants import (
    ALLOWED_METHODS,
    BODY_METHODS,
    RETRYABLE_STATUS_CODES,
    SHORTENER_HOSTS,
)
from linklens.fetch.identity import BrowserIdentity, build_identity, random_user_agent
from linklens.fetch.metrics import FetchMetrics
from linklens.fetch.models import FetchAttemptResult, RetrievalSession, RetryPolicy
from linklens.fetch.redact import redact_headers, redact_url_credentials
from linklens.fetch.shortener import is_shortener_url, resolve_final_url


__all__ = [
    # Client
    "RetryingFetcher",
    "AttemptAssessment",
    "assess_response",
    "extract_sticky_cookie",
    # Config
    "FetchConfig",
    "DomainProfile",
    # Models
    "FetchAttemptResult",
    "RetrievalSession",
    "RetryPolicy",
    # Identity
    "BrowserIdentity",
    "build_identity",
    "random_user_agent",
    # Constants
    "ALLOWED_METHODS",
    "BODY_METHODS",
    "RETRYABLE_STATUS_CODES",
    "SHORTENER_HOSTS",
    # Metrics
    "FetchMetrics",
    # Redaction
    "redact_headers",
    "redact_url_credentials",
    # Shorteners
    "is_shortener_url",
    "resolve_final_url",
]
