"""
Password hashing and verification.

Stored hashes are tagged with their scheme:

- bcrypt:         ``$2b$<cost>$<salt+digest>`` (``$2a$`` / ``$2y$`` accepted)
- PBKDF2-SHA256:  ``pbkdf2_sha256$<salt>$<derived_hex>``

New passwords are always hashed with bcrypt. Verification fails closed: an
empty hash, an unknown scheme or a malformed hash never verifies and never
raises.
"""

import asyncio
import hashlib
import hmac
import logging
import secrets

import bcrypt

logger = logging.getLogger(__name__)

PBKDF2_SCHEME = "pbkdf2_sha256"
PBKDF2_ITERATIONS = 100_000
PBKDF2_KEY_LENGTH = 32
BCRYPT_PREFIXES = ("$2a$", "$2b$", "$2y$")
DEFAULT_BCRYPT_ROUNDS = 12


class PasswordHasher:
    """
    Hashes new passwords and verifies stored hashes of any supported scheme.

    bcrypt is deliberately slow, so every call runs in a worker thread and the
    event loop stays free for other requests and for backend timeouts.
    """

    def __init__(self, rounds: int = DEFAULT_BCRYPT_ROUNDS):
        self.rounds = rounds
        # Verified against when an account does not exist, so unknown emails
        # cost the same as a wrong password
        self._dummy_hash = hash_bcrypt("dummy_password", rounds)

    async def hash(self, password: str) -> str:
        return await asyncio.to_thread(hash_bcrypt, password, self.rounds)

    async def verify(self, password: str, stored_hash: str) -> bool:
        return await asyncio.to_thread(verify_password, password, stored_hash)

    async def burn(self, password: str) -> None:
        await asyncio.to_thread(verify_password, password, self._dummy_hash)


def hash_bcrypt(password: str, rounds: int = DEFAULT_BCRYPT_ROUNDS) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(rounds)).decode("utf-8")


def hash_pbkdf2(password: str, salt: str = None) -> str:
    if salt is None:
        salt = secrets.token_hex(16)
    derived = _pbkdf2(password, salt)
    return f"{PBKDF2_SCHEME}${salt}${derived.hex()}"


def verify_password(password: str, stored_hash: str) -> bool:
    """
    Verify a plaintext password against a tagged hash.

    Args:
        password: Plaintext password
        stored_hash: Hash string as persisted

    Returns:
        True only if the scheme is supported and the password matches
    """
    if not stored_hash or password is None:
        return False

    if stored_hash.startswith(BCRYPT_PREFIXES):
        try:
            return bcrypt.checkpw(password.encode("utf-8"), stored_hash.encode("utf-8"))
        except ValueError:
            logger.warning("Malformed bcrypt hash encountered")
            return False

    scheme, _, body = stored_hash.partition("$")
    if scheme != PBKDF2_SCHEME:
        return False

    salt, sep, expected_hex = body.partition("$")
    if not sep or not salt or not expected_hex:
        return False
    try:
        expected = bytes.fromhex(expected_hex)
    except ValueError:
        return False

    computed = _pbkdf2(password, salt)
    return hmac.compare_digest(computed, expected)


def _pbkdf2(password: str, salt: str) -> bytes:
    return hashlib.pbkdf2_hmac(
        "sha256",
        password.encode("utf-8"),
        salt.encode("utf-8"),
        PBKDF2_ITERATIONS,
        dklen=PBKDF2_KEY_LENGTH,
    )
