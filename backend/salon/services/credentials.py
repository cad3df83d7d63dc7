"""
Salon Booking Backend — Password Hashing & Token Issuing
===========================================================

What:  PasswordHasher (bcrypt) and TokenIssuer (random hex bearer tokens).
Who:   Built once by create_app() and handed to the router factory; the
       registration and login handlers are the only callers.

PasswordHasher:
    hash()   → bcrypt with a fresh salt per call, so equal passwords hash differently
    verify() → False for a wrong password or a malformed stored hash
    bcrypt is CPU-bound; route handlers call both through run_in_threadpool.

TokenIssuer:
    issue() → secrets.token_hex(n); n is at least 16 bytes (128 bits).
    Tokens never expire and are never rotated.
"""

import hashlib
import logging
import secrets

import bcrypt

logger = logging.getLogger(__name__)


class PasswordHasher:
    """Salted bcrypt hashing with a configurable work factor."""

    def __init__(self, rounds: int = 10):
        self.rounds = rounds
        # Verified against when the email is unknown, so both login failure
        # paths spend the same bcrypt time.
        self._dummy_hash = self.hash(secrets.token_hex(8))

    def hash(self, plaintext: str) -> str:
        salt = bcrypt.gensalt(rounds=self.rounds)
        return bcrypt.hashpw(plaintext.encode("utf-8"), salt).decode("utf-8")

    def verify(self, plaintext: str, hashed: str) -> bool:
        try:
            return bcrypt.checkpw(plaintext.encode("utf-8"), hashed.encode("utf-8"))
        except ValueError:
            # Malformed hash, or a plaintext over bcrypt's 72-byte input limit
            logger.warning("Password verification failed on malformed input")
            return False

    def verify_dummy(self, plaintext: str) -> bool:
        """Burns one verification against the dummy hash; always False."""
        self.verify(plaintext, self._dummy_hash)
        return False


class TokenIssuer:
    """Issues opaque bearer tokens."""

    def __init__(self, nbytes: int = 32):
        if nbytes < 16:
            raise ValueError("Access tokens need at least 16 random bytes")
        self.nbytes = nbytes

    def issue(self) -> str:
        return secrets.token_hex(self.nbytes)


def token_digest(token: str) -> str:
    """SHA-256 hex digest used as the lookup key for access tokens."""
    return hashlib.sha256(token.encode("utf-8")).hexdigest()
