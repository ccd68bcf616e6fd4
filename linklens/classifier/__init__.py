"""Link type classification from domain, path, text and HTML signals."""

from linklens.classifier.classifier import classify_by_domain, classify_link
from linklens.classifier.constants import LinkType


__all__ = ["LinkType", "classify_by_domain", "classify_link"]
