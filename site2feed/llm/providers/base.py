"""Abstract interface for LLM-driven structured extraction."""

from __future__ import annotations

from abc import ABC, abstractmethod


class ExtractionProvider(ABC):
    """Provider interface for turning sanitized page content into model text."""

    @abstractmethod
    async def extract(self, url: str, content: str) -> str:
        """Return the raw model text for the extraction prompt.

        Raises:
            ExtractionError: If the endpoint fails or cannot be reached
        """
        raise NotImplementedError
