"""Transport interface for fetching raw template source."""
from typing import Protocol, runtime_checkable


@runtime_checkable
class Transport(Protocol):
    """Fetches the body of a URL as text."""

    async def get_async(self, url: str) -> str:
        """Non-blocking fetch of the response body."""
        ...

    def get_sync(self, url: str) -> str:
        """Blocking fetch of the response body."""
        ...
