"""Transport-neutral handling of one inbound chat message.

Both the Cloud API webhook and the client bridge end up here: log the
question, answer it, log and send the reply.
"""
import logging

from app import conversation_log
from app.adapters.base_channel_adapter import ChannelAdapter
from app.answer_service import AnswerService
from app.models.unified_message import UnifiedMessage

logger = logging.getLogger(__name__)


async def handle_incoming(message: UnifiedMessage, adapter: ChannelAdapter, service: AnswerService) -> str:
    """Answer a text message and deliver the reply through the adapter.

    Returns:
        The reply text, whether or not the channel accepted it.
    """
    logger.info(f"[HANDLER] Message from {message.user_id} via {message.channel}: {message.content!r}")
    conversation_log.log_message(message.user_id, "user", message.content, message.channel)

    reply = await service.answer(message.content)

    conversation_log.log_message(message.user_id, "assistant", reply, message.channel)
    delivered = await adapter.send_outgoing(message.user_id, reply)
    if not delivered:
        logger.error(f"[HANDLER] Reply to {message.user_id} via {message.channel} was not accepted")
    return reply
