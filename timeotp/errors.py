"""
Error types raised by timeotp and keyuri.

Every error is raised synchronously on bad caller input; none of them is
transient, so nothing here is ever retried.
"""


class TOTPError(Exception):
    """Base class for all timeotp errors."""


class TypeMismatch(TOTPError, TypeError):
    """Wrong type or shape for a secret, accountname, token or URI."""


class RangeViolation(TOTPError, ValueError):
    """Digits, delta or token length outside the allowed range."""


class UnsupportedAlgorithm(TOTPError, ValueError):
    """Hash algorithm outside SHA-1 / SHA-256 / SHA-512."""

    def __init__(self, algorithm: object) -> None:
        super().__init__(f'Unsupported hash algorithm "{algorithm}".')
        self.algorithm = algorithm


class UnknownUriType(TOTPError, ValueError):
    """Key URI whose type (host) is not ``totp``."""


class UnknownUriProtocol(TOTPError, ValueError):
    """Key URI whose scheme is not ``otpauth:``."""
