"""
Tests for QR pairing output.
"""

import io

from src.pairing import render_qr, show_pairing_qr


def test_render_qr_produces_block_text():
    rendered = render_qr("2@abcdef,ghijkl")

    lines = rendered.splitlines()
    assert len(lines) > 5
    assert any(ch in rendered for ch in "█▀▄")


def test_show_pairing_qr_writes_instructions():
    stream = io.StringIO()

    rendered = show_pairing_qr("2@abcdef,ghijkl", stream=stream)

    output = stream.getvalue()
    assert output.startswith("Scan this QR code")
    assert output.endswith(rendered)
