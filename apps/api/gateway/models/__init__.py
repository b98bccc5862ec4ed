"""Expose ORM models."""
from .api_usage import ApiUsage

__all__ = [
    "ApiUsage",
]
