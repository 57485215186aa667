"""Placeholder credential generation and hashing.

Each tenant's connection config carries a freshly generated credential that
is only ever stored in hashed form. The hash is a self-describing string:

    pbkdf2_sha256$<iterations>$<salt, urlsafe b64>$<digest, urlsafe b64>

Example:
    >>> hasher = PBKDF2CredentialHasher(iterations=1_000)
    >>> secret = generate_credential()
    >>> encoded = hasher.hash(secret)
    >>> hasher.verify(secret, encoded)
    True
"""

from __future__ import annotations

import base64
import os
import secrets
from typing import Protocol, runtime_checkable

from cryptography.exceptions import InvalidKey
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC


ALGORITHM = "pbkdf2_sha256"


@runtime_checkable
class CredentialHasher(Protocol):
    """Protocol for one-way credential hashers."""

    def hash(self, credential: str) -> str:
        """Hash a credential into a storable string."""
        ...

    def verify(self, credential: str, encoded: str) -> bool:
        """Check a credential against a stored hash."""
        ...


class PBKDF2CredentialHasher:
    """PBKDF2-HMAC-SHA256 hasher backed by ``cryptography``."""

    SALT_SIZE = 16
    KEY_LENGTH = 32
    ITERATIONS = 600_000  # OWASP recommended minimum for PBKDF2-SHA256

    def __init__(self, iterations: int = ITERATIONS) -> None:
        self.iterations = iterations

    def _kdf(self, salt: bytes, iterations: int) -> PBKDF2HMAC:
        return PBKDF2HMAC(
            algorithm=hashes.SHA256(),
            length=self.KEY_LENGTH,
            salt=salt,
            iterations=iterations,
        )

    def hash(self, credential: str) -> str:
        salt = os.urandom(self.SALT_SIZE)
        digest = self._kdf(salt, self.iterations).derive(credential.encode("utf-8"))
        return "$".join((
            ALGORITHM,
            str(self.iterations),
            base64.urlsafe_b64encode(salt).decode("ascii"),
            base64.urlsafe_b64encode(digest).decode("ascii"),
        ))

    def verify(self, credential: str, encoded: str) -> bool:
        """Verify a credential, using the iteration count stored in the hash."""
        try:
            algorithm, iterations, salt_b64, digest_b64 = encoded.split("$")
        except ValueError:
            return False
        if algorithm != ALGORITHM:
            return False

        try:
            salt = base64.urlsafe_b64decode(salt_b64)
            digest = base64.urlsafe_b64decode(digest_b64)
            rounds = int(iterations)
        except ValueError:
            return False
        try:
            self._kdf(salt, rounds).verify(credential.encode("utf-8"), digest)
        except InvalidKey:
            return False
        return True


def generate_credential(length: int = 32) -> str:
    """Generate a random, URL-safe credential.

    Args:
        length: Bytes of entropy.

    Returns:
        The credential text (longer than ``length`` because of encoding).
    """
    return secrets.token_urlsafe(length)
