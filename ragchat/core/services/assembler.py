"""Conversation assembler - builds the exact message list sent to the LLM."""

import logging
from typing import Optional

from ..models.chat import USER, SYSTEM, ChatHistory, ChatMessage, Message

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = """You are a helpful AI assistant with access to a knowledge base of uploaded documents and web search capabilities.

Your role:
- Answer questions based on the provided context from the documents or web search results
- If the context doesn't contain enough information, say so clearly
- Cite the source document or URL when referencing specific information
- Be concise but thorough
- When using web search results, cite the source URLs
- Prioritize information from uploaded documents over web search when both are available

Always format your response clearly and cite sources when possible."""


class ConversationAssembler:
    """System message + bounded chronological history + current turn."""

    def __init__(self, system_prompt: str = SYSTEM_PROMPT, history_limit: int = 5):
        """Initialize assembler.

        Args:
            system_prompt: Base instruction placed first in the system message.
            history_limit: Maximum prior messages carried forward.
        """
        self._system_prompt = system_prompt
        self._history_limit = history_limit

    @property
    def history_limit(self) -> int:
        return self._history_limit

    def assemble(
        self,
        fused_context: str,
        recent_history: list[Message],
        current_user_message: Optional[str] = None,
    ) -> list[dict]:
        """Assemble LLM messages.

        Args:
            fused_context: Output of the fusion engine.
            recent_history: Newest-first messages as returned by the store.
            current_user_message: Appended as the last turn unless the
                history already ends with it.

        Returns:
            ``[{"role", "content"}]`` with the system message first and
            history oldest-to-newest.
        """
        history = ChatHistory(max_messages=self._history_limit)
        # Store returns newest first; take the newest N, then restore order.
        for message in reversed(recent_history[: self._history_limit]):
            history.add(ChatMessage(role=message.role, content=message.content))

        if current_user_message is not None:
            last = history.messages[-1] if history.messages else None
            if last is None or last.role != USER or last.content != current_user_message:
                history.messages.append(ChatMessage(role=USER, content=current_user_message))

        system = ChatMessage(
            role=SYSTEM, content=f"{self._system_prompt}\n\n{fused_context}"
        )
        messages = [system.to_dict()] + history.to_list()

        logger.debug(f"Assembled {len(messages)} messages ({len(history.messages)} history)")
        return messages
