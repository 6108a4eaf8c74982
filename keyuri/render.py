"""
QR code rendering for provisioning URIs.

Authenticator apps scan the otpauth:// URI from a QR code; these helpers
build that code with ``qrcode`` after checking the URI parses.
"""

import io

import qrcode
from qrcode.image.svg import SvgPathImage

from keyuri.parser import from_key_uri


def _build_qr(uri: str) -> qrcode.QRCode:
    from_key_uri(uri)
    qr = qrcode.QRCode(
        version=None,
        error_correction=qrcode.constants.ERROR_CORRECT_M,
        box_size=8,
        border=4,
    )
    qr.add_data(uri)
    qr.make(fit=True)
    return qr


def key_uri_matrix(uri: str) -> list[list[bool]]:
    """Return the QR module matrix for ``uri``, quiet-zone border included."""
    return _build_qr(uri).get_matrix()


def key_uri_svg(uri: str) -> str:
    """Return ``uri`` encoded as a QR code SVG document."""
    img = _build_qr(uri).make_image(image_factory=SvgPathImage)
    buf = io.BytesIO()
    img.save(buf)
    return buf.getvalue().decode("utf-8")
