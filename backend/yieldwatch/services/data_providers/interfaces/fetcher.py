"""
DocumentFetcher interface.

The only outbound capability the pipeline consumes: fetch the raw text
of a URL with a given header set.
"""

from typing import Protocol, Dict, Optional


class DocumentFetcher(Protocol):
    """
    Protocol for document fetchers.

    Implementations must:
    - Be async
    - Return the full body as text for 2xx responses
    - Raise TransportError (or ProviderTimeoutError) otherwise
    """

    async def fetch(self, url: str, headers: Optional[Dict[str, str]] = None) -> str:
        ...

    async def close(self) -> None:
        ...
