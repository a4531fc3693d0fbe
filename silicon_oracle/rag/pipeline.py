"""
Chat pipeline: retrieve lore, compose the persona prompt, generate a reply.
"""

from __future__ import annotations

import logging

from silicon_oracle.llm.client import LLMClient
from silicon_oracle.rag.prompt import (
    DEFAULT_PERSONA,
    ConversationTurnContext,
    PersonaRules,
    PromptPayload,
    build_prompt_payload,
)
from silicon_oracle.rag.retriever import Retriever

logger = logging.getLogger(__name__)

FALLBACK_REPLY = "Un silenzio statico è l'unica risposta che i miei circuiti riescono a formulare..."


class ChatService:
    """One conversation turn: retrieval, prompt composition, generation."""

    def __init__(
        self,
        retriever: Retriever,
        llm_client: LLMClient,
        persona: PersonaRules = DEFAULT_PERSONA,
        logger_: logging.Logger | None = None,
    ) -> None:
        self.retriever = retriever
        self.llm_client = llm_client
        self.persona = persona
        self.logger = logger_ or logging.getLogger(__name__)

    async def prepare(self, turn: ConversationTurnContext) -> PromptPayload:
        retrieved_text = await self.retriever.retrieve_and_augment(turn.query)
        payload = build_prompt_payload(self.persona, turn, retrieved_text)
        self.logger.info(
            "Prompt composed",
            extra={
                "first_message": turn.is_first_message,
                "history": len(turn.history),
                "has_context": bool(retrieved_text.strip()),
            },
        )
        return payload

    async def reply(self, turn: ConversationTurnContext) -> str:
        """Generate the persona reply; ``GenerationServiceError`` propagates."""
        payload = await self.prepare(turn)
        answer = await self.llm_client.chat(payload.as_messages())
        if not answer.strip():
            self.logger.warning("Empty completion, using fallback reply")
            return FALLBACK_REPLY
        return answer


__all__ = ["ChatService", "FALLBACK_REPLY"]
