"""
Cryptographic primitives for timeotp.

HMAC            : HMAC-SHA1 / HMAC-SHA256 / HMAC-SHA512
Secret padding  : RFC 6238 "pad by repetition" to the digest size
Random secrets  : CSPRNG bytes sized to the algorithm

The keyed hash and random source come from a :class:`CryptoBackend` chosen
once per process (``TIMEOTP_BACKEND``).
"""

import hmac
import logging
import secrets
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from functools import lru_cache
from typing import Optional, Union

from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives import hmac as crypto_hmac

from timeotp.config import DEFAULT_ALGORITHM, get_settings
from timeotp.errors import TypeMismatch, UnsupportedAlgorithm

logger = logging.getLogger(__name__)


class Algorithm(str, Enum):
    """Supported HMAC hash algorithms."""

    SHA1 = "SHA-1"
    SHA256 = "SHA-256"
    SHA512 = "SHA-512"

    @classmethod
    def parse(cls, value: Union["Algorithm", str]) -> "Algorithm":
        """Return the member for ``value`` or raise :class:`UnsupportedAlgorithm`."""
        try:
            return cls(value)
        except ValueError:
            raise UnsupportedAlgorithm(value) from None


# ── Constants ────────────────────────────────────────────────────────────────

DEFAULT_SECRET_SIZE = 20

# Secrets are padded to the digest size by repeating them
MIN_SECRET_SIZE: dict[Algorithm, int] = {
    Algorithm.SHA1: 20,
    Algorithm.SHA256: 32,
    Algorithm.SHA512: 64,
}

_HASHLIB_NAMES: dict[Algorithm, str] = {
    Algorithm.SHA1: "sha1",
    Algorithm.SHA256: "sha256",
    Algorithm.SHA512: "sha512",
}

_CRYPTOGRAPHY_HASHES = {
    Algorithm.SHA1: hashes.SHA1,
    Algorithm.SHA256: hashes.SHA256,
    Algorithm.SHA512: hashes.SHA512,
}


# ── Backends ─────────────────────────────────────────────────────────────────

class CryptoBackend(ABC):
    """Keyed-hash and random source used by every timeotp operation."""

    name = ""

    @abstractmethod
    def sign(self, algorithm: Algorithm, key: bytes, data: bytes) -> bytes:
        """Return HMAC-``algorithm`` of ``data`` under ``key``."""

    @abstractmethod
    def random_bytes(self, size: int) -> bytes:
        """Return ``size`` cryptographically strong random bytes."""


class CryptographyBackend(CryptoBackend):
    """Backend built on ``cryptography``'s HMAC primitive."""

    name = "cryptography"

    def sign(self, algorithm: Algorithm, key: bytes, data: bytes) -> bytes:
        h = crypto_hmac.HMAC(key, _CRYPTOGRAPHY_HASHES[algorithm]())
        h.update(data)
        return h.finalize()

    def random_bytes(self, size: int) -> bytes:
        return secrets.token_bytes(size)


class HashlibBackend(CryptoBackend):
    """Backend built on the standard library ``hmac`` / ``secrets`` modules."""

    name = "hashlib"

    def sign(self, algorithm: Algorithm, key: bytes, data: bytes) -> bytes:
        return hmac.new(key, data, _HASHLIB_NAMES[algorithm]).digest()

    def random_bytes(self, size: int) -> bytes:
        return secrets.token_bytes(size)


BACKENDS: dict[str, type] = {
    CryptographyBackend.name: CryptographyBackend,
    HashlibBackend.name: HashlibBackend,
}


def load_backend(name: str) -> CryptoBackend:
    """
    Instantiate the backend registered under ``name``.

    Raises:
        ValueError: If no backend is registered under that name.
    """
    try:
        backend_cls = BACKENDS[name]
    except KeyError:
        raise ValueError(
            f"Unknown crypto backend '{name}'. Expected one of: {', '.join(BACKENDS)}."
        ) from None
    return backend_cls()


@lru_cache(maxsize=None)
def get_backend() -> CryptoBackend:
    """Return the process-wide backend selected by configuration."""
    backend = load_backend(get_settings().backend)
    logger.info("Using '%s' crypto backend.", backend.name)
    return backend


# ── Secret generation ────────────────────────────────────────────────────────

@dataclass
class GeneratedSecret:
    """Freshly generated secret and the algorithm it was sized for."""

    secret: bytes
    algorithm: Algorithm


def generate_secret(
    algorithm: Optional[Union[Algorithm, str]] = None,
) -> GeneratedSecret:
    """
    Generate a random TOTP secret.

    Args:
        algorithm: Size the secret for this algorithm's digest. Defaults to
                   SHA-1 (20 bytes).

    Returns:
        :class:`GeneratedSecret` holding the raw bytes.

    Raises:
        UnsupportedAlgorithm: For names outside SHA-1 / SHA-256 / SHA-512.
    """
    if algorithm is None:
        alg = Algorithm(DEFAULT_ALGORITHM)
        size = DEFAULT_SECRET_SIZE
    else:
        alg = Algorithm.parse(algorithm)
        size = MIN_SECRET_SIZE[alg]
    return GeneratedSecret(secret=get_backend().random_bytes(size), algorithm=alg)


# ── HMAC ─────────────────────────────────────────────────────────────────────

def pad_secret(algorithm: Union[Algorithm, str], secret: bytes) -> bytes:
    """
    Pad ``secret`` to the digest size of ``algorithm`` (RFC 6238).

    Short secrets are repeated cyclically, the last repetition truncated, until
    they fill exactly ``MIN_SECRET_SIZE`` bytes. Secrets already that long are
    returned unchanged, never truncated.

    Example::

        >>> pad_secret("SHA-1", b"abc")
        b'abcabcabcabcabcabcab'
    """
    if not isinstance(secret, (bytes, bytearray)):
        raise TypeMismatch('"secret" must be bytes.')
    min_size = MIN_SECRET_SIZE[Algorithm.parse(algorithm)]
    secret = bytes(secret)
    if not secret:
        raise TypeMismatch('"secret" must not be empty.')
    if len(secret) >= min_size:
        return secret
    repeats = -(-min_size // len(secret))
    return (secret * repeats)[:min_size]


def hmac_sign(
    algorithm: Union[Algorithm, str],
    secret: bytes,
    data: Union[bytes, str],
) -> bytes:
    """
    Sign ``data`` with HMAC-``algorithm`` under the padded ``secret``.

    Args:
        algorithm: Hash algorithm.
        secret:    Raw secret bytes (padded per call, never mutated).
        data:      Message; ``str`` is UTF-8 encoded.

    Returns:
        Digest bytes.

    Raises:
        UnsupportedAlgorithm: For names outside SHA-1 / SHA-256 / SHA-512.
    """
    alg = Algorithm.parse(algorithm)
    if isinstance(data, str):
        data = data.encode("utf-8")
    return get_backend().sign(alg, pad_secret(alg, secret), bytes(data))
