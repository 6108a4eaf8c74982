"""
TOTP (Time-based One-Time Password) implementation following RFC 6238.

Times are Unix timestamps in milliseconds. Produces codes identical to
Google Authenticator for the default parameters.
"""

import hmac
import logging
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Optional, Union

from timeotp.config import (
    DEFAULT_ALGORITHM,
    DEFAULT_DELTA,
    DEFAULT_DIGITS,
    DEFAULT_PERIOD,
    get_settings,
)
from timeotp.crypto import Algorithm, hmac_sign
from timeotp.errors import RangeViolation
from timeotp.hotp import hotp_token
from timeotp.utils import (
    SecretLike,
    coerce_secret,
    validate_delta,
    validate_digits,
    validate_token,
)

logger = logging.getLogger(__name__)


@dataclass
class TokenResult:
    """A generated token with the parameters that produced it."""

    token: str
    algorithm: Algorithm
    digits: int
    period: int


def _now_millis() -> int:
    return int(time.time() * 1000)


# ── Step clock ────────────────────────────────────────────────────────────────

def current_steps(now: float, period: int) -> int:
    """Return the number of whole ``period``-second steps since the epoch."""
    secs = int(now // 1000)
    return secs // period


def remaining_seconds(period: int = DEFAULT_PERIOD, now: Optional[float] = None) -> int:
    """Return seconds until the current TOTP step expires."""
    t = _now_millis() if now is None else now
    return period - (int(t // 1000) % period)


# ── Generation ────────────────────────────────────────────────────────────────

def generate_token(
    secret: SecretLike,
    algorithm: Union[Algorithm, str] = DEFAULT_ALGORITHM,
    digits: int = DEFAULT_DIGITS,
    period: int = DEFAULT_PERIOD,
    now: Optional[float] = None,
) -> TokenResult:
    """
    Generate a TOTP token.

    Args:
        secret:    Raw secret bytes or a base32 string.
        algorithm: HMAC algorithm (default SHA-1 for GA compatibility).
        digits:    Number of digits in the token, 1-10 (default 6).
        period:    Time step in seconds (default 30).
        now:       Override Unix time in milliseconds; meant for tests.

    Returns:
        :class:`TokenResult` carrying the token and the effective parameters.

    Raises:
        RangeViolation:       If ``digits`` is out of range or ``now`` is before
                              the epoch.
        TypeMismatch:         If ``secret`` is not bytes or base32 text.
        UnsupportedAlgorithm: For an unknown ``algorithm``.
    """
    validate_digits(digits)
    secret_bytes = coerce_secret(secret)
    alg = Algorithm.parse(algorithm)

    steps = current_steps(_now_millis() if now is None else now, period)
    if steps < 0:
        raise RangeViolation('"now" must not be before the Unix epoch.')
    token = hotp_token(secret_bytes, steps, digits, alg)
    return TokenResult(token=token, algorithm=alg, digits=digits, period=period)


# ── Verification ──────────────────────────────────────────────────────────────

def _verify_value(
    secret_bytes: bytes, steps: int, digits: int, algorithm: Algorithm
) -> bytes:
    # HMAC of the candidate token, so comparison never touches the token text
    token = hotp_token(secret_bytes, steps, digits, algorithm)
    return hmac_sign(algorithm, secret_bytes, token)


def verify(
    token: str,
    secret: SecretLike,
    algorithm: Union[Algorithm, str] = DEFAULT_ALGORITHM,
    period: int = DEFAULT_PERIOD,
    delta: int = DEFAULT_DELTA,
    now: Optional[float] = None,
) -> bool:
    """
    Verify a TOTP token within ±``delta`` time steps.

    The supplied token and every candidate token are HMAC'd under the secret
    and the resulting digests compared, which keeps the comparison from
    leaking how many leading digits matched. All candidates are evaluated;
    there is no early exit.

    Args:
        token:     Token to verify; its length sets the digit count.
        secret:    Raw secret bytes or a base32 string.
        algorithm: HMAC algorithm.
        period:    Time step in seconds.
        delta:     Allowed skew in steps, 0-10 (default 1).
        now:       Override Unix time in milliseconds; meant for tests.

    Returns:
        True if any step in the window produces ``token``.

    Raises:
        TypeMismatch:         If ``token`` is not a string or ``secret`` is invalid.
        RangeViolation:       If the token length or ``delta`` is out of range.
        UnsupportedAlgorithm: For an unknown ``algorithm``.
    """
    validate_token(token)
    validate_delta(delta)
    secret_bytes = coerce_secret(secret)
    alg = Algorithm.parse(algorithm)
    digits = len(token)

    verify_value = hmac_sign(alg, secret_bytes, token)

    current = current_steps(_now_millis() if now is None else now, period)
    # note: candidates are not shuffled; steps before the epoch do not exist
    window = [s for s in range(current - delta, current + delta + 1) if s >= 0]

    def candidate(steps: int) -> bytes:
        return _verify_value(secret_bytes, steps, digits, alg)

    workers = get_settings().verify_workers
    if workers > 1 and len(window) > 1:
        with ThreadPoolExecutor(max_workers=min(workers, len(window))) as pool:
            candidates = list(pool.map(candidate, window))
    else:
        candidates = list(map(candidate, window))

    matches = [hmac.compare_digest(c, verify_value) for c in candidates]
    result = any(matches)
    logger.debug(
        "Verified %s token against %d step(s): %s",
        alg.value, len(window), "match" if result else "no match",
    )
    return result
