"""Infomaniak REST API access."""

from .client import (
    ApiUnreachableError,
    InfomaniakApiClient,
    InfomaniakApiError,
)

__all__ = [
    "ApiUnreachableError",
    "InfomaniakApiClient",
    "InfomaniakApiError",
]
