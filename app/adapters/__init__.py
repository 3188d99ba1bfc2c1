"""Adapters package entry.

Provides a factory to obtain adapters by channel string.
"""
from typing import Dict

from app.adapters.base_channel_adapter import ChannelAdapter
from app.adapters.bridge_adapter import BridgeAdapter
from app.adapters.whatsapp_cloud_adapter import WhatsAppCloudAdapter


_ADAPTERS: Dict[str, ChannelAdapter] = {
    "whatsapp": WhatsAppCloudAdapter(),
    "bridge": BridgeAdapter(),
}


def get_adapter_for_channel(channel: str) -> ChannelAdapter:
    """Return a singleton adapter instance for the given channel."""
    adapter = _ADAPTERS.get(channel)
    if adapter is None:
        raise ValueError(f"No adapter for channel: {channel}")
    return adapter
