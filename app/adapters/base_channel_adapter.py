"""Abstract base interface for channel adapters.

Adapters normalize provider-specific payloads to the unified message model
and provide a uniform API for sending replies back through that channel.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

from app.models.unified_message import UnifiedMessage


class ChannelAdapter(ABC):
    """Base adapter contract for all channels."""

    channel: str = ""

    @abstractmethod
    async def parse_incoming(self, raw: Dict[str, Any]) -> Optional[UnifiedMessage]:
        """Parse channel-specific payload into a `UnifiedMessage`.

        Return None to ignore payloads that are not actionable (e.g., delivery receipts).
        """
        raise NotImplementedError

    @abstractmethod
    async def send_outgoing(self, user_id: str, message: str) -> bool:
        """Send a text reply back to the user via the channel.

        Returns:
            True if accepted by the channel, False otherwise.
        """
        raise NotImplementedError
