"""Unified message model and enums for channel-agnostic processing.

This module defines the `MessageType` enum and the `UnifiedMessage` dataclass
used by channel adapters to normalize incoming payloads for the answer pipeline.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional


class MessageType(Enum):
    """Supported message types across channels."""
    TEXT = "text"
    IMAGE = "image"
    AUDIO = "audio"
    DOCUMENT = "document"
    VIDEO = "video"
    OTHER = "other"


@dataclass
class UnifiedMessage:
    """Normalized message container used by the answer pipeline.

    Attributes:
        channel: Logical channel identifier ('whatsapp' or 'bridge').
        user_id: Sender identifier for the channel (e.g., wa_id / phone number).
        message_type: One of MessageType values describing the content.
        content: Text content (empty string for media messages).
        message_id: Optional provider message id, used for logging.
        metadata: Channel-specific metadata preserved for downstream needs.
    """
    channel: str
    user_id: str
    message_type: MessageType
    content: str
    message_id: Optional[str] = None
    metadata: Optional[Dict[str, Any]] = None
