"""Data models for the quality-gated retrieval loop."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from linklens.extract.metadata import ExtractedMetadata
from linklens.fetch.constants import ALLOWED_METHODS
from linklens.fetch.models import FetchAttemptResult


class RetrievalRequest(BaseModel):
    """One caller request to fetch and extract a URL."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    url: str = Field(min_length=1)
    method: str = "GET"
    headers: dict[str, str] = Field(default_factory=dict)
    body: Any = None

    @field_validator("method")
    @classmethod
    def normalize_method(cls, v: str) -> str:
        """Upper-case the method and reject unsupported ones."""
        method = v.upper()
        if method not in ALLOWED_METHODS:
            msg = f"Unsupported HTTP method: {v}"
            raise ValueError(msg)
        return method


class RetrievalOutcome(BaseModel):
    """Final state of a retrieval call."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    result: FetchAttemptResult
    effective_url: str
    metadata: ExtractedMetadata | None = None
    total_attempts: int = Field(ge=1)
    quality_attempts: int = Field(default=1, ge=1)
    escalated: bool = False
    accepted: bool = False

    @property
    def is_html(self) -> bool:
        """Check if the final result was treated as HTML."""
        return self.metadata is not None
