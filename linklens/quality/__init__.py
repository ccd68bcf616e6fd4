"""Response quality heuristics: bot-block detection and product page checks."""

from linklens.quality.blocking import (
    BLOCK_TOKENS,
    looks_blocked,
    looks_blocked_text,
    looks_hard_blocked,
)
from linklens.quality.validators import (
    PRODUCT_VALIDATORS,
    AmazonProductValidator,
    ProductPageValidator,
    find_product_validator,
)


__all__ = [
    "BLOCK_TOKENS",
    "PRODUCT_VALIDATORS",
    "AmazonProductValidator",
    "ProductPageValidator",
    "find_product_validator",
    "looks_blocked",
    "looks_blocked_text",
    "looks_hard_blocked",
]
