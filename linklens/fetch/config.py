"""Configuration models for the HTTP fetch layer."""

import re
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, field_validator

from linklens.fetch.constants import MAX_REDIRECTS
from linklens.fetch.models import RetryPolicy
from linklens.settings import AppSettings


class DomainProfile(BaseModel):
    """Per-domain request customization.

    Profile headers sit between the generated browser identity and the
    caller's own headers.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    domain_pattern: Annotated[
        str, Field(min_length=1, description="Regex pattern for matching hostnames")
    ]
    headers: dict[str, str] = Field(
        default_factory=dict, description="Headers to add for this domain"
    )
    timeout_seconds: float | None = Field(default=None, ge=1.0, le=300.0)

    @field_validator("domain_pattern")
    @classmethod
    def validate_regex(cls, v: str) -> str:
        """Validate that domain_pattern is a valid regex."""
        try:
            re.compile(v)
        except re.error as e:
            msg = f"Invalid regex pattern: {e}"
            raise ValueError(msg) from e
        return v

    @field_validator("headers")
    @classmethod
    def validate_no_session_headers(cls, v: dict[str, str]) -> dict[str, str]:
        """Keep Cookie/Authorization out of static config."""
        forbidden = {"authorization", "cookie"}
        for key in v:
            if key.lower() in forbidden:
                msg = f"Header '{key}' must not be stored in a domain profile"
                raise ValueError(msg)
        return v

    def matches(self, hostname: str) -> bool:
        """Check if this profile matches a hostname."""
        return bool(re.search(self.domain_pattern, hostname))


DEFAULT_DOMAIN_PROFILES = (
    DomainProfile(
        domain_pattern=r"(^|\.)blinkit\.com$",
        headers={"Accept-Language": "en-IN,hi;q=0.8,en-US;q=0.7,en;q=0.6"},
    ),
)


class FetchConfig(BaseModel):
    """Configuration for the retry orchestrator.

    Built once at startup and shared read-only by every call.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    default_timeout_seconds: Annotated[float, Field(ge=0.1, le=300.0)] = 30.0
    max_redirects: Annotated[int, Field(ge=0, le=30)] = MAX_REDIRECTS
    retry_policy: RetryPolicy = Field(default_factory=RetryPolicy)
    quality_attempts: Annotated[int, Field(ge=1, le=10)] = 3
    platform_timeout_seconds: Annotated[float, Field(ge=0.1, le=60.0)] = 8.0
    domain_profiles: tuple[DomainProfile, ...] = DEFAULT_DOMAIN_PROFILES

    @classmethod
    def from_settings(cls, settings: AppSettings) -> "FetchConfig":
        """Build the fetch configuration from environment settings.

        Args:
            settings: Loaded application settings.

        Returns:
            FetchConfig instance.
        """
        return cls(
            default_timeout_seconds=settings.request_timeout_ms / 1000.0,
            retry_policy=RetryPolicy(max_retries=settings.max_retries),
            quality_attempts=settings.quality_attempts,
            platform_timeout_seconds=settings.platform_timeout_ms / 1000.0,
        )

    def get_profile_for_domain(self, hostname: str) -> DomainProfile | None:
        """Get the first domain profile matching a hostname."""
        for profile in self.domain_profiles:
            if profile.matches(hostname):
                return profile
        return None

    def get_timeout_for_domain(self, hostname: str) -> float:
        """Get the request timeout in seconds for a hostname."""
        profile = self.get_profile_for_domain(hostname)
        if profile and profile.timeout_seconds is not None:
            return profile.timeout_seconds
        return self.default_timeout_seconds

    def get_headers_for_domain(self, hostname: str) -> dict[str, str]:
        """Get profile headers for a hostname."""
        profile = self.get_profile_for_domain(hostname)
        if profile:
            return dict(profile.headers)
        return {}
