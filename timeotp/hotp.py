"""
HOTP (HMAC-based One-Time Password) derivation following RFC 4226.

Only the counter-to-token step lives here; counters come from the TOTP step
clock and are never stored.
"""

import struct
from typing import Union

from timeotp.crypto import Algorithm, hmac_sign


def counter_bytes(counter: int) -> bytes:
    """Encode ``counter`` as the 8-byte big-endian HOTP moving factor."""
    return struct.pack(">Q", counter)


def dynamic_truncation(digest: bytes) -> int:
    """
    Return the 31-bit "dynamic binary code" of ``digest`` (RFC 4226 §5.3).

    The low nibble of the last byte selects a 4-byte window; its top bit is
    cleared before the window is read as a big-endian integer. ``digest`` is
    copied, not modified.
    """
    window = bytearray(digest)
    offset = window[-1] & 0x0F
    # offset <= 15 and the shortest digest is 20 bytes, so the window fits
    window[offset] &= 0x7F
    return int.from_bytes(window[offset : offset + 4], "big")


def hotp_token(
    secret_bytes: bytes,
    counter: int,
    digits: int = 6,
    algorithm: Union[Algorithm, str] = Algorithm.SHA1,
) -> str:
    """
    Generate an HOTP code.

    Args:
        secret_bytes: Raw decoded secret bytes.
        counter:      Moving factor (the TOTP step).
        digits:       Number of OTP digits (1-10).
        algorithm:    HMAC algorithm.

    Returns:
        The last ``digits`` characters of the code written as a zero-padded
        10-digit decimal.
    """
    digest = hmac_sign(algorithm, secret_bytes, counter_bytes(counter))
    code = str(dynamic_truncation(digest)).zfill(10)
    return code[len(code) - digits :]
