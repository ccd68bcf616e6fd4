"""HTTP constants for the fetch layer.

Centralizes HTTP-related constants and hostname tables shared by the
retry orchestrator and the retrieval loop.
"""

# HTTP Status Code Ranges
HTTP_STATUS_OK_MIN = 200
HTTP_STATUS_OK_MAX = 300
HTTP_STATUS_FORBIDDEN = 403
HTTP_STATUS_METHOD_NOT_ALLOWED = 405
HTTP_STATUS_TOO_MANY_REQUESTS = 429
HTTP_STATUS_SERVICE_UNAVAILABLE = 503

# Statuses that make an attempt eligible for retry
RETRYABLE_STATUS_CODES = frozenset(
    {
        HTTP_STATUS_FORBIDDEN,
        HTTP_STATUS_TOO_MANY_REQUESTS,
        HTTP_STATUS_SERVICE_UNAVAILABLE,
    }
)

ALLOWED_METHODS = ("GET", "POST", "PUT", "DELETE", "PATCH", "HEAD")
BODY_METHODS = frozenset({"POST", "PUT", "PATCH"})

MAX_REDIRECTS = 10

# Backoff defaults (milliseconds)
DEFAULT_BASE_DELAY_MS = 1000
DEFAULT_MAX_DELAY_MS = 10000
DEFAULT_JITTER_MS = 1000

# Hosts whose bodies force a retry when they carry block tokens
HARD_RETRY_DOMAINS = ("blinkit.com",)

# Hosts that only redirect to the real destination
SHORTENER_HOSTS = frozenset(
    {
        "amzn.in",
        "amzn.to",
        "bit.ly",
        "t.co",
        "tinyurl.com",
        "goo.gl",
        "rebrand.ly",
        "cutt.ly",
        "is.gd",
        "rb.gy",
        "buff.ly",
        "lnkd.in",
    }
)
