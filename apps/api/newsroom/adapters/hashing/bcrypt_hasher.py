"""bcrypt credential hasher."""

import bcrypt

from newsroom.adapters.hashing.base import CredentialHasher


class BcryptCredentialHasher(CredentialHasher):
    def __init__(self, rounds: int = 12) -> None:
        self._rounds = rounds

    def hash(self, secret: str) -> str:
        digest = bcrypt.hashpw(secret.encode("utf-8"), bcrypt.gensalt(rounds=self._rounds))
        return digest.decode("utf-8")

    def compare(self, secret: str, digest: str) -> bool:
        try:
            return bcrypt.checkpw(secret.encode("utf-8"), digest.encode("utf-8"))
        except ValueError:
            # Malformed stored digest or over-long secret never matches.
            return False


__all__ = ["BcryptCredentialHasher"]
