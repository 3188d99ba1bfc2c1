"""WhatsApp Cloud API client.

Sends text replies through the Graph API messages endpoint. Follows the
raise_for_status / log / return None pattern: delivery failures are logged
and reported as None, never raised into the answer pipeline.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import httpx

from app import config
from app.utils.message_splitter import needs_splitting, split_message

logger = logging.getLogger(__name__)


def _messages_url() -> str:
    return f"{config.GRAPH_API_URL}/{config.GRAPH_API_VERSION}/{config.PHONE_NUMBER_ID}/messages"


async def _post_text(client: httpx.AsyncClient, to: str, text: str) -> Optional[Dict[str, Any]]:
    headers = {
        "Authorization": f"Bearer {config.WHATSAPP_TOKEN}",
        "Content-Type": "application/json",
    }
    payload = {
        "messaging_product": "whatsapp",
        "to": to,
        "type": "text",
        "text": {"body": text},
    }
    try:
        response = await client.post(_messages_url(), json=payload, headers=headers)
        response.raise_for_status()
        logger.info(f"[WA] Text sent to {to}: {response.status_code}")
        return response.json()
    except httpx.HTTPStatusError as e:
        logger.error(f"[WA] Error sending text to {to}: {e.response.status_code} {e.response.text}")
        return None
    except httpx.HTTPError as e:
        logger.error(f"[WA] Transport error sending text to {to}: {e}")
        return None


async def send_text_message(to: str, text: str) -> Optional[Dict[str, Any]]:
    """Send a text reply, split into several messages when it is too long.

    Returns:
        The API response of the last part, or None if any part failed.
    """
    parts = split_message(text) if needs_splitting(text) else [text]
    result: Optional[Dict[str, Any]] = None
    async with httpx.AsyncClient() as client:
        for part in parts:
            result = await _post_text(client, to, part)
            if result is None:
                return None
    return result
