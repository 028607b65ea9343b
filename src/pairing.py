"""
Pairing - Show QR pairing challenges to the operator.

The protocol client emits a QR payload in connection.update whenever the
session needs to be linked to a phone. The payload is rendered as text so
it can be scanned straight from the terminal.
"""

import io
import logging
import sys
from typing import Optional, TextIO

import qrcode

logger = logging.getLogger(__name__)


def render_qr(payload: str) -> str:
    """Return the QR code for payload as terminal text."""
    qr = qrcode.QRCode(border=1)
    qr.add_data(payload)
    qr.make(fit=True)

    buffer = io.StringIO()
    qr.print_ascii(out=buffer, invert=True)
    return buffer.getvalue()


def show_pairing_qr(payload: str, stream: Optional[TextIO] = None) -> str:
    """
    Print a pairing QR code for the operator.

    Args:
        payload: QR payload from the protocol client.
        stream: Output stream. Defaults to stdout.

    Returns:
        The rendered QR text.
    """
    stream = stream or sys.stdout
    rendered = render_qr(payload)

    logger.info("Pairing required - QR code printed to terminal")
    stream.write("Scan this QR code with your WhatsApp app to link your device:\n")
    stream.write(rendered)
    stream.flush()
    return rendered
