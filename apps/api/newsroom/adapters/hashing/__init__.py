"""Credential hashing adapters."""

from .base import CredentialHasher
from .bcrypt_hasher import BcryptCredentialHasher

__all__ = ["BcryptCredentialHasher", "CredentialHasher"]
