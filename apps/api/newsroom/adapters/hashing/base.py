"""Credential hashing interface."""

from abc import ABC, abstractmethod


class CredentialHasher(ABC):
    @abstractmethod
    def hash(self, secret: str) -> str:
        """Return a salted digest for ``secret``."""

    @abstractmethod
    def compare(self, secret: str, digest: str) -> bool:
        """Return whether ``secret`` matches a digest produced by ``hash``."""


__all__ = ["CredentialHasher"]
