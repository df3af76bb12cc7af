from __future__ import annotations

from abc import ABC, abstractmethod

from facility_sources.core.models import FacilityRecord, SourceRequest


class FacilitySourceAdapter(ABC):
    name: str

    def supports(self, request: SourceRequest) -> bool:
        return True

    @abstractmethod
    async def fetch(self, request: SourceRequest) -> list[FacilityRecord]:
        """Return normalized records, or raise an ``UpstreamError`` subclass."""
        raise NotImplementedError
