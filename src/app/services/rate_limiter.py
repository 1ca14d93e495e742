from abc import ABC, abstractmethod
from typing import Tuple


class IRateLimiter(ABC):
    """
    Request counter per client key.

    Both methods return (requests counted in the current window,
    seconds until the oldest counted request leaves the window).
    """

    @abstractmethod
    async def count(self, key: str, window_seconds: int) -> Tuple[int, int]:
        """Current usage without recording a request"""
        pass

    @abstractmethod
    async def hit(self, key: str, window_seconds: int) -> Tuple[int, int]:
        """Record a request and return the usage including it"""
        pass

    @abstractmethod
    async def close(self) -> None:
        """Release backend resources"""
        pass
