"""Token heuristics for anti-bot and access-denied responses."""

# Body-level tokens; intentionally broad, callers pair them with metadata checks
BLOCK_TOKENS = ("access denied", "forbidden", "blocked", "captcha", "error")

# Stricter variant for hosts known to serve block pages with HTTP 200
HARD_BLOCK_TOKENS = ("access denied", "forbidden", "blocked", "captcha")

# Checked against extracted title/description only
BLOCKED_TEXT_TOKENS = ("403", "forbidden", "blocked", "captcha", "error")


def _contains_any(text: str, tokens: tuple[str, ...]) -> bool:
    lowered = text.lower()
    return any(token in lowered for token in tokens)


def looks_blocked(body: str | None) -> bool:
    """Check if a response body looks like an anti-bot or error page.

    Args:
        body: Response body.

    Returns:
        True if any block token is present.
    """
    if not body:
        return False
    return _contains_any(body, BLOCK_TOKENS)


def looks_hard_blocked(body: str | None) -> bool:
    """Check a body for block tokens, ignoring the generic 'error'."""
    if not body:
        return False
    return _contains_any(body, HARD_BLOCK_TOKENS)


def looks_blocked_text(title: str | None, description: str | None) -> bool:
    """Title-scoped check used to reject block pages with plausible metadata.

    Args:
        title: Extracted title.
        description: Extracted description.

    Returns:
        True if either field carries a block token.
    """
    return _contains_any(title or "", BLOCKED_TEXT_TOKENS) or _contains_any(
        description or "", BLOCKED_TEXT_TOKENS
    )
