"""WhatsApp Cloud API channel adapter.

Maps Graph webhook payloads (`entry[].changes[].value.messages[]`) into
UnifiedMessage and sends replies through `app.whatsapp_client`.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from app import whatsapp_client
from app.adapters.base_channel_adapter import ChannelAdapter
from app.models.unified_message import MessageType, UnifiedMessage

logger = logging.getLogger(__name__)


def _first_change_value(raw: Dict[str, Any]) -> Dict[str, Any]:
    entries = raw.get("entry") or []
    if not entries:
        return {}
    changes = entries[0].get("changes") or []
    if not changes:
        return {}
    return changes[0].get("value") or {}


class WhatsAppCloudAdapter(ChannelAdapter):
    """Adapter for WhatsApp via the Meta Cloud API."""

    channel = "whatsapp"

    async def parse_incoming(self, raw: Dict[str, Any]) -> Optional[UnifiedMessage]:
        value = _first_change_value(raw)
        messages = value.get("messages") or []
        if not messages:
            # Status callbacks (sent/delivered/read) carry no messages
            return None

        message = messages[0]
        sender = message.get("from")
        if not sender:
            return None

        msg_type = message.get("type", "text")
        try:
            message_type = MessageType(msg_type)
        except ValueError:
            message_type = MessageType.OTHER

        text = ""
        if message_type == MessageType.TEXT:
            text = (message.get("text") or {}).get("body") or ""

        contacts = value.get("contacts") or []
        profile_name = (contacts[0].get("profile") or {}).get("name") if contacts else None

        return UnifiedMessage(
            channel=self.channel,
            user_id=sender,
            message_type=message_type,
            content=text,
            message_id=message.get("id"),
            metadata={"profile_name": profile_name, "timestamp": message.get("timestamp")},
        )

    async def send_outgoing(self, user_id: str, message: str) -> bool:
        result = await whatsapp_client.send_text_message(user_id, message)
        return result is not None
