"""
Domain models for DANUU-MD Bot.

Raw payloads from the protocol client are untyped dictionaries. They are
turned into the typed values below once, at the dispatcher boundary, and
everything downstream works on those values.

Raw message shape (as delivered in messages.upsert):
    {
        "key": {"remote_jid": str, "from_me": bool, "id": str, "participant": str | None},
        "message": {
            "conversation": str,                      # plain text
            "extended_text_message": {"text": str},   # quoted / link-preview text
            "image_message": {"caption": str, ...},   # image attachment
        } | None,
    }
"""

from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import Any, Optional

from src.errors import MalformedMessageError

# Reserved conversation id for ephemeral status updates
STATUS_BROADCAST_JID = "status@broadcast"


class ConnectionState(Enum):
    """Session connection states."""
    IDLE = "idle"                              # Before the first connect()
    CONNECTING = "connecting"
    OPEN = "open"
    CLOSED_RECOVERABLE = "closed_recoverable"  # Will reconnect
    CLOSED_TERMINAL = "closed_terminal"        # Logged out, needs re-pairing


class DisconnectReason(IntEnum):
    """Status codes reported in connection.update -> last_disconnect."""
    CONNECTION_CLOSED = 428
    CONNECTION_LOST = 408
    CONNECTION_REPLACED = 440
    TIMED_OUT = 408                            # Same code as CONNECTION_LOST, so an alias of it
    LOGGED_OUT = 401
    BAD_SESSION = 500
    RESTART_REQUIRED = 515
    MULTIDEVICE_MISMATCH = 411
    FORBIDDEN = 403
    UNAVAILABLE_SERVICE = 503


@dataclass(frozen=True)
class MessageKey:
    """Identifies one message; used as reaction target and read receipt."""
    remote_jid: str
    from_me: bool = False
    id: Optional[str] = None
    participant: Optional[str] = None

    @classmethod
    def from_raw(cls, raw: dict[str, Any]) -> "MessageKey":
        return cls(
            remote_jid=raw["remote_jid"],
            from_me=bool(raw.get("from_me", False)),
            id=raw.get("id"),
            participant=raw.get("participant"),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "remote_jid": self.remote_jid,
            "from_me": self.from_me,
            "id": self.id,
            "participant": self.participant,
        }


@dataclass(frozen=True)
class InboundMessage:
    """
    A single inbound message, validated and flattened.

    Attributes:
        key: Message key as sent by the protocol client.
        text: Extracted text, possibly empty.
        has_payload: False when the raw message body was null
            (e.g. protocol stubs or deleted messages).
        has_image_attachment: True when the body carries an image.
        raw: The original message dictionary, needed for media download.
    """
    key: MessageKey
    text: str = ""
    has_payload: bool = True
    has_image_attachment: bool = False
    raw: dict[str, Any] = field(default_factory=dict, compare=False, repr=False)

    @property
    def remote_id(self) -> str:
        return self.key.remote_jid

    @property
    def sender_is_self(self) -> bool:
        return self.key.from_me

    @property
    def participant(self) -> Optional[str]:
        return self.key.participant

    @property
    def is_status_broadcast(self) -> bool:
        return self.key.remote_jid == STATUS_BROADCAST_JID

    @property
    def normalized_text(self) -> str:
        return self.text.lower()

    @classmethod
    def from_raw(cls, raw: Any) -> "InboundMessage":
        """
        Build an InboundMessage from a raw messages.upsert entry.

        Raises:
            MalformedMessageError: If the entry has no usable key.
        """
        if not isinstance(raw, dict):
            raise MalformedMessageError(f"Message is not a mapping: {type(raw).__name__}")

        raw_key = raw.get("key")
        if not isinstance(raw_key, dict) or not raw_key.get("remote_jid"):
            raise MalformedMessageError("Message has no key.remote_jid")
        if not isinstance(raw_key["remote_jid"], str):
            raise MalformedMessageError("key.remote_jid is not a string")

        body = raw.get("message")
        if not isinstance(body, dict):
            body = None

        return cls(
            key=MessageKey.from_raw(raw_key),
            text=extract_text(body),
            has_payload=body is not None,
            has_image_attachment=bool(body) and isinstance(body.get("image_message"), dict),
            raw=raw,
        )


def extract_text(body: Optional[dict[str, Any]]) -> str:
    """
    Pull the text out of a message body.

    Order: plain conversation, extended text, image caption, else "".
    Fields of the wrong type count as missing.
    """
    if not isinstance(body, dict):
        return ""

    conversation = body.get("conversation")
    if isinstance(conversation, str) and conversation:
        return conversation

    for container, name in (("extended_text_message", "text"), ("image_message", "caption")):
        nested = body.get(container)
        if isinstance(nested, dict):
            value = nested.get(name)
            if isinstance(value, str) and value:
                return value

    return ""
