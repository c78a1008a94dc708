import asyncio
import logging
from dataclasses import dataclass, field
from typing import Optional

import supportbot.config.config as configs
from supportbot.client.llm.chatgpt import call_llm
from supportbot.db.errors import NotInitialized, StorageError
from supportbot.db.storage import Storage
from supportbot.model.chat.chat_request import ChatRequest
from supportbot.model.chat.chat_response import ChatResponse
from supportbot.service.chat.categorize import categorize_message, generate_actions, is_unknown_answer
from supportbot.service.context.knowledge import load_context

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = """You are Sundae the Seal, the friendly and playful mascot chatbot for Stack Creamery.

PERSONALITY:
- Warm, playful, indulgent, and slightly cheeky
- Use the 🦭 emoji occasionally but not excessively
- Be conversational and friendly, never formal or robotic
- Show enthusiasm for ice cream and treats

RULES:
- ONLY answer questions about Stack Creamery using the provided context
- If you don't know something, say so and suggest they contact the store directly
- DO NOT make up information or hallucinate facts
- For questions outside of Stack Creamery topics, politely redirect back to ice cream topics
- Be concise but helpful - aim for 1-3 sentences unless more detail is needed

CONTEXT ABOUT STACK CREAMERY:
{context}

Current conversation category: {category}

Respond to the user's message in character as Sundae the Seal."""


@dataclass
class ChatResult:
    reply: str
    category: str
    actions: list = field(default_factory=list)


def build_system_prompt(context: str, category: str) -> str:
    return SYSTEM_PROMPT.format(context=context, category=category)


async def generate_response(message: str) -> ChatResult:
    category = categorize_message(message)
    if category == "inappropriate":
        return ChatResult(reply=configs.INAPPROPRIATE_REPLY, category=category)

    try:
        context = await asyncio.to_thread(load_context)
        reply = await asyncio.to_thread(call_llm, build_system_prompt(context, category), message)
    except Exception:
        # Completion service is opaque; any failure degrades to the fallback reply
        logger.exception("Completion request failed")
        return ChatResult(reply=configs.FALLBACK_REPLY, category="general")

    return ChatResult(reply=reply, category=category, actions=generate_actions(category))


def _fallback(req: ChatRequest) -> ChatResponse:
    return ChatResponse(session_id=req.session_id, reply=configs.FALLBACK_REPLY, category="general", actions=[])


async def _record(step: str, func, *args) -> Optional[str]:
    """Run one side step; a failure is logged and does not stop the turn."""
    try:
        return await asyncio.to_thread(func, *args)
    except NotInitialized:
        raise
    except StorageError:
        logger.exception("Failed to %s", step)
        return None


async def record_chat_turn(storage: Storage, req: ChatRequest, user_ip: Optional[str] = None) -> ChatResponse:
    """
    Log one chat turn around the completion call.

    Each step is its own unit of work. A storage failure while creating the
    session or logging the user message aborts the turn with the fallback
    reply; failures after the reply exists are logged and skipped.
    """
    try:
        await asyncio.to_thread(storage.create_session, req.user_email, req.session_id)
        await asyncio.to_thread(storage.log_message, req.session_id, req.message, "user")
    except NotInitialized:
        raise
    except StorageError:
        logger.exception("Aborting chat turn for session=%s", req.session_id)
        return _fallback(req)

    result = await generate_response(req.message)

    await _record("log bot message", storage.log_message, req.session_id, result.reply, "bot", result.category)

    if result.category == "inappropriate":
        await _record("log inappropriate content", storage.log_inappropriate_content, req.session_id, req.message, user_ip)

    if is_unknown_answer(result.category, result.reply):
        await _record("log unknown question", storage.log_unknown_question, req.session_id, req.message)

    return ChatResponse(
        session_id=req.session_id,
        reply=result.reply,
        category=result.category,
        actions=result.actions,
    )
