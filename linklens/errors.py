"""Error types for link retrieval.

Only input validation errors and exhausted transport retries surface to the
caller. Upstream HTTP statuses are data, and extraction problems degrade to
empty metadata instead of raising.
"""

from enum import Enum


class ErrorClass(str, Enum):
    """Classification of retrieval errors.

    - INPUT: Missing or invalid request parameters
    - TRANSPORT: DNS/connection/timeout failures after all retries
    - CANCELLED: The caller abandoned the call
    - ESCALATION: Headless browser missing or failed
    """

    INPUT = "INPUT"
    TRANSPORT = "TRANSPORT"
    CANCELLED = "CANCELLED"
    ESCALATION = "ESCALATION"


class FetchErrorClass(str, Enum):
    """Classification of transport-level fetch failures.

    - NETWORK_TIMEOUT: Request timed out
    - CONNECTION_ERROR: Could not establish connection (includes DNS)
    - TOO_MANY_REDIRECTS: Redirect hop limit exceeded
    - UNKNOWN: Unclassified transport error
    """

    NETWORK_TIMEOUT = "NETWORK_TIMEOUT"
    CONNECTION_ERROR = "CONNECTION_ERROR"
    TOO_MANY_REDIRECTS = "TOO_MANY_REDIRECTS"
    UNKNOWN = "UNKNOWN"


class LinkLensError(Exception):
    """Base exception for retrieval errors.

    Provides structured error information for logging and the failure envelope.
    """

    def __init__(
        self,
        error_class: ErrorClass,
        message: str,
        url: str | None = None,
        details: dict[str, str | int | bool | None] | None = None,
    ) -> None:
        """Initialize the error.

        Args:
            error_class: Classification of the error.
            message: Human-readable error message.
            url: URL being retrieved when the error happened.
            details: Additional structured error details.
        """
        super().__init__(message)
        self.error_class = error_class
        self.message = message
        self.url = url
        self.details = details or {}

    def to_dict(
        self,
    ) -> dict[str, str | int | bool | None | dict[str, str | int | bool | None]]:
        """Convert error to dictionary for logging/serialization.

        Returns:
            Dictionary representation of the error.
        """
        return {
            "error_class": self.error_class.value,
            "message": self.message,
            "url": self.url,
            "details": self.details,
        }


class InputError(LinkLensError):
    """Missing or invalid request parameter. Never retried."""

    def __init__(self, message: str, field: str | None = None) -> None:
        """Initialize the input error.

        Args:
            message: Human-readable error message.
            field: Name of the offending parameter.
        """
        super().__init__(
            error_class=ErrorClass.INPUT,
            message=message,
            details={"field": field} if field else None,
        )
        self.field = field


class TransportError(LinkLensError):
    """Transport failure that persisted through every retry attempt."""

    def __init__(
        self,
        message: str,
        url: str,
        fetch_error_class: FetchErrorClass,
        attempts: int,
    ) -> None:
        """Initialize the transport error.

        Args:
            message: Description of the last underlying failure.
            url: Requested URL.
            fetch_error_class: Classification of the last failure.
            attempts: Number of physical attempts made.
        """
        super().__init__(
            error_class=ErrorClass.TRANSPORT,
            message=message,
            url=url,
            details={
                "fetch_error_class": fetch_error_class.value,
                "attempts": attempts,
            },
        )
        self.fetch_error_class = fetch_error_class
        self.attempts = attempts


class RetrievalCancelledError(LinkLensError):
    """Raised at a wait point when the caller cancelled the call."""

    def __init__(self, url: str | None = None) -> None:
        """Initialize the cancellation error.

        Args:
            url: URL being retrieved.
        """
        super().__init__(
            error_class=ErrorClass.CANCELLED,
            message="Retrieval cancelled by caller",
            url=url,
        )


class EscalationUnavailableError(LinkLensError):
    """Headless browser dependency missing or its fetch failed."""

    def __init__(self, message: str, url: str | None = None) -> None:
        """Initialize the escalation error.

        Args:
            message: Human-readable error message.
            url: URL the browser was asked to render.
        """
        super().__init__(
            error_class=ErrorClass.ESCALATION,
            message=message,
            url=url,
        )
