"""
Encode and decode otpauth:// URIs as defined by the Google Authenticator
Key URI Format.

Reference: https://github.com/google/google-authenticator/wiki/Key-Uri-Format
"""

import urllib.parse
from dataclasses import dataclass
from typing import Optional, Union

from timeotp.config import DEFAULT_ALGORITHM, DEFAULT_DIGITS, DEFAULT_PERIOD
from timeotp.crypto import Algorithm
from timeotp.errors import (
    TypeMismatch,
    UnknownUriProtocol,
    UnknownUriType,
    UnsupportedAlgorithm,
)
from timeotp.utils import encode_secret

SCHEME = "otpauth"
OTP_TYPE = "totp"

# Characters JavaScript's encodeURIComponent leaves alone besides [A-Za-z0-9_.-]
_URI_COMPONENT_SAFE = "!~*'()"


@dataclass
class KeyUri:
    """Parsed representation of an otpauth:// URI."""

    type: str                 # always "totp"
    label: str                # raw label (issuer:accountname or accountname)
    issuer: Optional[str]     # issuer query parameter
    accountname: str          # percent-decoded account name from the label
    secret: str               # base32 secret, as found in the URI
    algorithm: str            # "SHA-1" / "SHA-256" / "SHA-512"
    period: int
    digits: int


def _encode_component(value: str) -> str:
    return urllib.parse.quote(value, safe=_URI_COMPONENT_SAFE)


def _algorithm_name(algorithm: Union[Algorithm, str]) -> str:
    return algorithm.value if isinstance(algorithm, Algorithm) else algorithm


def to_key_uri(
    accountname: str,
    secret: Union[bytes, bytearray, str],
    issuer: Optional[str] = None,
    algorithm: Union[Algorithm, str] = DEFAULT_ALGORITHM,
    period: int = DEFAULT_PERIOD,
    digits: int = DEFAULT_DIGITS,
) -> str:
    """
    Build an otpauth://totp URI.

    Parameters equal to their defaults are left out of the query string.

    Args:
        accountname: Account the secret belongs to (non-empty).
        secret:      Raw secret bytes or base32 text.
        issuer:      Provider name; prefixes the label and is repeated as a
                     query parameter.
        algorithm:   HMAC algorithm.
        period:      Time step in seconds.
        digits:      Token length.

    Returns:
        The provisioning URI.

    Raises:
        TypeMismatch: If ``accountname`` is empty or ``secret`` has the wrong type.
    """
    if not (isinstance(accountname, str) and accountname):
        raise TypeMismatch('"accountname" must be a non-empty string.')
    if not isinstance(secret, (str, bytes, bytearray)):
        raise TypeMismatch('"secret" must be bytes or base32-encoded string.')
    if issuer is not None and not isinstance(issuer, str):
        raise TypeMismatch('"issuer" must be a string.')

    label_issuer = issuer
    if issuer and ":" in issuer:
        label_issuer = _encode_component(issuer)
    if ":" in accountname:
        accountname = _encode_component(accountname)
    label = f"{label_issuer}:{accountname}" if issuer else accountname

    if not isinstance(secret, str):
        secret = encode_secret(secret)

    params: dict = {"secret": secret}
    algorithm = _algorithm_name(algorithm)
    if algorithm != DEFAULT_ALGORITHM:
        params["algorithm"] = algorithm.replace("-", "")
    if period != DEFAULT_PERIOD:
        params["period"] = str(period)
    if digits != DEFAULT_DIGITS:
        params["digits"] = str(digits)
    if issuer:
        params["issuer"] = issuer

    query = urllib.parse.urlencode(params)
    return f"{SCHEME}://{OTP_TYPE}/{label}?{query}"


def _parse_int(params: dict, name: str, default: int) -> int:
    raw = params.get(name)
    if raw is None:
        return default
    try:
        return int(raw, 10)
    except ValueError:
        raise TypeMismatch(f'"{name}" must be an integer.')


def from_key_uri(uri: str) -> KeyUri:
    """
    Parse and validate an ``otpauth://totp`` URI.

    Args:
        uri: Full otpauth URI string.

    Returns:
        Populated :class:`KeyUri` dataclass.

    Raises:
        TypeMismatch:         If ``uri`` is not a string, the account name or
                              secret is missing, or period/digits are not integers.
        UnknownUriProtocol:   If the scheme is not ``otpauth``.
        UnknownUriType:       If the type is not ``totp``.
        UnsupportedAlgorithm: If the algorithm is not a SHA variant.
    """
    if not isinstance(uri, str):
        raise TypeMismatch('"uri" must be a string.')

    parsed = urllib.parse.urlsplit(uri.strip())
    if parsed.scheme != SCHEME:
        raise UnknownUriProtocol(f'Unknown protocol "{parsed.scheme}:".')
    if parsed.netloc != OTP_TYPE:
        raise UnknownUriType(f'Unknown supported type "{parsed.netloc}".')

    # Label is the path component (strip leading slash)
    label = parsed.path[1:]
    params = dict(urllib.parse.parse_qsl(parsed.query, keep_blank_values=True))

    algorithm = params.get("algorithm", "SHA1")
    if not algorithm.startswith("SHA"):
        raise UnsupportedAlgorithm(algorithm)

    # "Issuer:AccountName" or just "AccountName"
    issuer_prefix, sep, accountname = label.partition(":")
    if not sep:
        accountname = issuer_prefix
    accountname = urllib.parse.unquote(accountname)
    if not accountname:
        raise TypeMismatch("Missing account name in otpauth URI label.")

    secret = params.get("secret")
    if not secret:
        raise TypeMismatch("Missing 'secret' parameter in otpauth URI.")

    return KeyUri(
        type=OTP_TYPE,
        label=label,
        issuer=params.get("issuer"),
        accountname=accountname,
        secret=secret,
        algorithm=f"SHA-{algorithm[3:]}",
        period=_parse_int(params, "period", DEFAULT_PERIOD),
        digits=_parse_int(params, "digits", DEFAULT_DIGITS),
    )
