"""Quality-gated retrieval loop."""

from linklens.retrieval.models import RetrievalOutcome, RetrievalRequest
from linklens.retrieval.pipeline import LinkRetriever
from linklens.retrieval.state_machine import (
    RetrievalState,
    RetrievalStateError,
    RetrievalStateMachine,
)


__all__ = [
    "LinkRetriever",
    "RetrievalOutcome",
    "RetrievalRequest",
    "RetrievalState",
    "RetrievalStateError",
    "RetrievalStateMachine",
]
