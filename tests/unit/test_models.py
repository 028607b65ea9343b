"""
Tests for InboundMessage and text extraction.
"""

import pytest

from src.errors import MalformedMessageError
from src.models import (
    STATUS_BROADCAST_JID,
    DisconnectReason,
    InboundMessage,
    MessageKey,
    extract_text,
)


class TestExtractText:
    """Text extraction order."""

    def test_conversation_preferred(self):
        body = {"conversation": "plain", "extended_text_message": {"text": "extended"}}
        assert extract_text(body) == "plain"

    def test_extended_text_fallback(self):
        assert extract_text({"extended_text_message": {"text": "quoted"}}) == "quoted"

    def test_image_caption_fallback(self):
        assert extract_text({"image_message": {"caption": "!sticker"}}) == "!sticker"

    @pytest.mark.parametrize("body", [None, {}, {"extended_text_message": {}}, {"image_message": {}}])
    def test_defaults_to_empty(self, body):
        assert extract_text(body) == ""

    @pytest.mark.parametrize("body", [
        "not a dict",
        {"conversation": 42},
        {"extended_text_message": "oops"},
        {"extended_text_message": {"text": ["a"]}},
        {"image_message": "oops"},
        {"image_message": {"caption": None}},
    ])
    def test_wrong_types_count_as_missing(self, body):
        assert extract_text(body) == ""

    def test_falls_through_bad_field_to_caption(self):
        body = {"extended_text_message": "oops", "image_message": {"caption": "!sticker"}}
        assert extract_text(body) == "!sticker"


class TestInboundMessage:
    """InboundMessage.from_raw validation."""

    def test_from_raw(self, make_message):
        msg = InboundMessage.from_raw(make_message("Hello", participant="p@s.whatsapp.net"))

        assert msg.remote_id == "94770000000@s.whatsapp.net"
        assert msg.text == "Hello"
        assert msg.normalized_text == "hello"
        assert msg.sender_is_self is False
        assert msg.is_status_broadcast is False
        assert msg.has_payload is True
        assert msg.has_image_attachment is False
        assert msg.participant == "p@s.whatsapp.net"

    def test_self_sent(self, make_message):
        assert InboundMessage.from_raw(make_message("x", from_me=True)).sender_is_self is True

    def test_status_broadcast(self, make_message):
        msg = InboundMessage.from_raw(make_message("x", jid=STATUS_BROADCAST_JID))
        assert msg.is_status_broadcast is True

    def test_image_attachment(self, make_message):
        msg = InboundMessage.from_raw(make_message("!sticker", image=True))
        assert msg.has_image_attachment is True
        assert msg.text == "!sticker"

    def test_non_dict_image_is_not_an_attachment(self, make_message):
        raw = make_message("!sticker")
        raw["message"]["image_message"] = "oops"
        assert InboundMessage.from_raw(raw).has_image_attachment is False

    def test_null_body(self, make_message):
        msg = InboundMessage.from_raw(make_message(None))
        assert msg.has_payload is False
        assert msg.text == ""

    @pytest.mark.parametrize("raw", [
        None,
        "text",
        {},
        {"key": None},
        {"key": {"from_me": False}},
        {"key": {"remote_jid": ""}},
        {"key": {"remote_jid": 94770000000}},
    ])
    def test_malformed(self, raw):
        with pytest.raises(MalformedMessageError):
            InboundMessage.from_raw(raw)


class TestMessageKey:

    def test_to_dict_round_trips_raw_key(self, make_message):
        raw = make_message("x")
        assert MessageKey.from_raw(raw["key"]).to_dict() == raw["key"]


def test_logged_out_code():
    assert DisconnectReason.LOGGED_OUT == 401


def test_timed_out_aliases_connection_lost():
    assert DisconnectReason(408) is DisconnectReason.CONNECTION_LOST
    assert DisconnectReason.TIMED_OUT is DisconnectReason.CONNECTION_LOST
