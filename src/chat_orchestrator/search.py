"""Search provider capability used by the web_search tool."""

from __future__ import annotations

from abc import ABC, abstractmethod


class SearchProvider(ABC):
    """Anything that can turn a query into text the model can read."""

    @abstractmethod
    async def search(self, query: str) -> str:
        ...


class StubSearchProvider(SearchProvider):
    """Placeholder search: echoes the query with a pointer to official BGSU sites.

    Performs no retrieval and never fails.
    """

    async def search(self, query: str) -> str:
        return (
            f'Searching BGSU websites for: "{query}".\n\n'
            "Note: In production, this would perform an actual web search of BGSU websites. "
            "For now, please provide the most relevant information you have about BGSU, "
            "and remind students to verify current information on official BGSU websites at bgsu.edu."
        )
