"""Conversation assembly and Claude-powered answer generation."""

from __future__ import annotations

from typing import Any

from anthropic import Anthropic
from anthropic.types import TextBlock

from podcast_rag.retrieval.models import Message, MessageRole, RetrievedDocument


def build_conversation(
    base_prompt: str,
    documents: list[RetrievedDocument],
    question: str,
) -> list[Message]:
    """Combine the base prompt, retrieved segments and the user's question.

    Produces one system message for the prompt, one system message per
    segment in the order received, and a final user message holding the
    question verbatim. Nothing is truncated, deduplicated or reordered.
    """
    messages = [Message(MessageRole.SYSTEM, base_prompt)]
    messages.extend(Message(MessageRole.SYSTEM, doc.content) for doc in documents)
    messages.append(Message(MessageRole.USER, question))
    return messages


def generate_answer(
    client: Anthropic,
    messages: list[Message],
    model: str,
    temperature: float = 0.6,
    max_tokens: int = 300,
) -> dict[str, Any]:
    """Generate a completion for an assembled conversation.

    System-role messages become the request's ``system`` text blocks (in
    order); user-role messages are sent as the conversation turns. Blank
    system messages are dropped, as the Messages API rejects empty text blocks.

    Returns:
        Dictionary with answer, model, and usage info.
    """
    system = [
        {"type": "text", "text": m.content}
        for m in messages
        if m.role is MessageRole.SYSTEM and m.content.strip()
    ]
    turns = [
        {"role": m.role.value, "content": m.content}
        for m in messages
        if m.role is not MessageRole.SYSTEM
    ]
    if not turns:
        raise ValueError("conversation has no user message")

    response = client.messages.create(
        model=model,
        max_tokens=max_tokens,
        temperature=temperature,
        system=system,  # type: ignore[arg-type]
        messages=turns,  # type: ignore[arg-type]
    )

    # response.content[0] is a union of block types; we only ask for text.
    block = response.content[0]
    if not isinstance(block, TextBlock):
        raise ValueError(f"Expected TextBlock from Claude, got {type(block).__name__}")

    return {
        "answer": block.text,
        "model": response.model,
        "usage": {
            "input_tokens": response.usage.input_tokens,
            "output_tokens": response.usage.output_tokens,
        },
    }
