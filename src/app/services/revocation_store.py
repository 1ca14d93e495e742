from abc import ABC, abstractmethod


class ITokenRevocationStore(ABC):
    """
    Access-token revocation set.

    Entries are keyed by token digest and live only as long as the token
    itself would, so the set never needs an explicit sweep.
    """

    @abstractmethod
    async def add(self, token_digest: str, ttl_seconds: int) -> None:
        """Mark a token as revoked for ttl_seconds"""
        pass

    @abstractmethod
    async def contains(self, token_digest: str) -> bool:
        """Check whether a token is revoked"""
        pass

    @abstractmethod
    async def close(self) -> None:
        """Release backend resources"""
        pass
