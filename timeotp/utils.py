"""
Utility helpers for timeotp.
"""

import base64
import binascii
import re
from typing import Union

from timeotp.config import MAX_DELTA, MAX_DIGITS
from timeotp.errors import RangeViolation, TypeMismatch

SecretLike = Union[bytes, bytearray, str]

_SECRET_TYPE_MESSAGE = '"secret" must be bytes or base32-encoded string.'


# ── Base32 ────────────────────────────────────────────────────────────────────

def normalize_secret(secret: str) -> str:
    """
    Normalise a base32 secret: strip spaces, uppercase, add padding.

    Args:
        secret: Raw user-supplied secret string.

    Returns:
        Uppercase base32 string with correct padding.

    Raises:
        TypeMismatch: If the string contains invalid base32 characters.
    """
    secret = secret.strip().upper().replace(" ", "").replace("-", "").rstrip("=")
    # Base32 alphabet: A-Z and 2-7
    if not re.fullmatch(r"[A-Z2-7]*", secret):
        raise TypeMismatch("Secret contains invalid base32 characters.")
    # Pad to multiple of 8
    pad = (8 - len(secret) % 8) % 8
    return secret + "=" * pad


def decode_secret(secret: str) -> bytes:
    """
    Decode a base32-encoded secret string to raw bytes.

    Raises:
        TypeMismatch: On invalid base32 input.
    """
    try:
        return base64.b32decode(normalize_secret(secret))
    except binascii.Error as exc:
        raise TypeMismatch(f"Invalid base32 secret: {exc}") from exc


def encode_secret(raw: bytes) -> str:
    """Encode raw bytes as a base32 string (no padding)."""
    return base64.b32encode(bytes(raw)).decode("ascii").rstrip("=")


def coerce_secret(secret: SecretLike) -> bytes:
    """
    Return the raw bytes of a secret given as bytes or base32 text.

    Raises:
        TypeMismatch: For any other type, bad base32, or an empty secret.
    """
    if isinstance(secret, str):
        raw = decode_secret(secret)
    elif isinstance(secret, (bytes, bytearray)):
        raw = bytes(secret)
    else:
        raise TypeMismatch(_SECRET_TYPE_MESSAGE)
    if not raw:
        raise TypeMismatch('"secret" must not be empty.')
    return raw


# ── Validation ────────────────────────────────────────────────────────────────

def _is_int(value: object) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def validate_digits(digits: int) -> None:
    if not (_is_int(digits) and 0 < digits <= MAX_DIGITS):
        raise RangeViolation(f'"digits" must be an integer > 0 and <= {MAX_DIGITS}.')


def validate_delta(delta: int) -> None:
    if not (_is_int(delta) and 0 <= delta <= MAX_DELTA):
        raise RangeViolation(f'"delta" must be an integer >= 0 and <= {MAX_DELTA}.')


def validate_token(token: str) -> None:
    if not isinstance(token, str):
        raise TypeMismatch('"token" must be a string.')
    if not 0 < len(token) <= MAX_DIGITS:
        raise RangeViolation(f'"token" length must be > 0 and <= {MAX_DIGITS}.')
