"""Client bridge adapter.

A QR-paired WhatsApp client runs as a separate process and forwards each
incoming chat as `{"sender": ..., "text": ...}`. The reply goes back in the
HTTP response body, which the bridge delivers itself.
"""
from __future__ import annotations

from typing import Any, Dict, Optional

from app.adapters.base_channel_adapter import ChannelAdapter
from app.models.unified_message import MessageType, UnifiedMessage


class BridgeAdapter(ChannelAdapter):
    """Adapter for the QR-paired client bridge."""

    channel = "bridge"

    async def parse_incoming(self, raw: Dict[str, Any]) -> Optional[UnifiedMessage]:
        sender = raw.get("sender")
        text = raw.get("text")
        if not sender or not isinstance(text, str):
            return None

        return UnifiedMessage(
            channel=self.channel,
            user_id=str(sender),
            message_type=MessageType.TEXT,
            content=text,
            message_id=raw.get("message_id"),
            metadata={"is_group": bool(raw.get("is_group", False))},
        )

    async def send_outgoing(self, user_id: str, message: str) -> bool:
        # Delivered by the bridge from the HTTP response
        return True
