from __future__ import annotations

from .errors import ValidationFailure
from .models import ChatMessage, Prompt, RetrievalContext


class PromptBuilder:
    """
    Builds the message sequence sent to the chat model.

    Order is fixed: retrieved context (only when there is any), then the
    instruction prompt, then the user's question last.
    """

    def build(self, system_prompt: str, context: RetrievalContext, question: str) -> Prompt:
        if not system_prompt:
            raise ValidationFailure("System prompt must not be empty")
        if not question:
            raise ValidationFailure("Question must not be empty")

        messages = []
        if not context.is_empty:
            messages.append(ChatMessage(role="system", content=context.render()))
        messages.append(ChatMessage(role="system", content=system_prompt))
        messages.append(ChatMessage(role="user", content=question))
        return Prompt(messages=tuple(messages))


__all__ = ["PromptBuilder"]
