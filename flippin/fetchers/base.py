"""Base fetcher class."""

from abc import ABC, abstractmethod

from ..config import Language


class BaseFetcher(ABC):
    """
    Abstract base class for speech audio fetchers.

    Provides lifecycle management and async context manager support.
    Subclasses implement fetch() and optionally override close().
    """

    name: str = ""

    @abstractmethod
    async def fetch(self, source: str, output_path: str, language: Language) -> bool:
        """
        Produce speech audio for a text and save it to a path.

        Args:
            source: Text to speak
            output_path: Path where to save the MP3
            language: Language of the text

        Returns:
            True if successful, False otherwise
        """

    async def close(self) -> None:
        """Close any open resources (sessions, connections, etc.)."""

    async def __aenter__(self) -> "BaseFetcher":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()
