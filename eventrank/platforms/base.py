"""Abstract base class for event sources."""

from abc import ABC, abstractmethod

from eventrank.core.schemas import ScrapingResult


class EventSource(ABC):
    """Base class that every event source must implement."""

    @property
    @abstractmethod
    def platform_id(self) -> str:
        """Identifier used when this source's fetch fails (e.g. 'instagram')."""

    @abstractmethod
    async def fetch(self, query: str, location: str) -> list[ScrapingResult]:
        """Return one envelope per platform the source covers.

        Raising is allowed: the collector turns it into a failed envelope.
        """
