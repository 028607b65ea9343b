"""
DANUU-MD Bot - WhatsApp auto-reply bot with keyword commands.

The bot listens to a WhatsApp session provided by an external protocol
client and answers with canned text, stickers or reactions.

Architecture:
    Two components:
    1. Session Supervisor: connection lifecycle, pairing, reconnects
    2. Message Dispatcher: auto-view, auto-react, auto-reply, commands

Modules:
    bot: Main orchestrator that wires all components
    supervisor: Connection state machine and reconnect task
    reconnect: Backoff policy for reconnects
    dispatcher: Inbound message routing
    commands: !command table and quote bank
    models: Typed views of protocol payloads
    protocol: Interface expected from the protocol client
    auth_state: Session credential persistence
    pairing: QR code rendering
    alerts / telegram_client: Operator notifications

Entry Point:
    python -m src.bot
"""

__version__ = "1.0.0"
