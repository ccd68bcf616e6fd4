"""Link retrieval and preview extraction with anti-bot retries."""

__version__ = "0.1.0"
