from __future__ import annotations

from .client import BaseHttpClient
from .errors import (
    ProviderCapabilityError,
    ProviderError,
    ProviderMalformedResponse,
    ProviderMappingError,
    ProviderRateLimited,
    ProviderRequestError,
    ProviderResponseError,
    ProviderTimeout,
    ProviderUnavailable,
)
from .extractor import SourceExtractor
from .registry import ExtractorRegistry
from .types import ExtractedRecord, ExtractResult

__all__ = [
    "BaseHttpClient",
    "ExtractResult",
    "ExtractedRecord",
    "ExtractorRegistry",
    "ProviderCapabilityError",
    "ProviderError",
    "ProviderMalformedResponse",
    "ProviderMappingError",
    "ProviderRateLimited",
    "ProviderRequestError",
    "ProviderResponseError",
    "ProviderTimeout",
    "ProviderUnavailable",
    "SourceExtractor",
]
