"""Global contact search adapters."""

from .client import HttpContactSearchClient

__all__ = ["HttpContactSearchClient"]
