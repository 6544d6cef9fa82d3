from __future__ import annotations

from typing import Callable

from .errors import ProviderCapabilityError
from .extractor import SourceExtractor

ExtractorFactory = Callable[[], SourceExtractor]


class ExtractorRegistry:
    def __init__(self) -> None:
        self._factories: dict[str, ExtractorFactory] = {}

    def register(self, source_code: str, factory: ExtractorFactory) -> None:
        if source_code in self._factories:
            raise ValueError(f"Duplicate extractor registration: {source_code}")
        self._factories[source_code] = factory

    def supports(self, source_code: str) -> bool:
        return source_code in self._factories

    def registered_codes(self) -> list[str]:
        return list(self._factories)

    def get(self, source_code: str) -> SourceExtractor:
        factory = self._factories.get(source_code)
        if factory is None:
            raise ProviderCapabilityError(f"No extractor registered for source={source_code}")
        return factory()
