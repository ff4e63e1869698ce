from typing import Protocol


class LinkProbe(Protocol):
    async def check(self, url: str) -> int | str:
        """Return the HTTP status for *url*, or a description of why it could not be fetched."""
        ...

    async def close(self) -> None: ...
