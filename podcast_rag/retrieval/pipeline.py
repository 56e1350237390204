"""Query pipeline: embed question -> retrieve -> assemble -> generate."""

from __future__ import annotations

import logging
import time
from typing import Any

from podcast_rag.clients import ServiceClients
from podcast_rag.config import DEFAULT_BASE_PROMPT
from podcast_rag.ingestion.embeddings import get_query_embedding
from podcast_rag.pipeline_config import PipelineConfig
from podcast_rag.retrieval.generation import build_conversation, generate_answer
from podcast_rag.retrieval.search import retrieve

logger = logging.getLogger(__name__)


def answer_question(
    clients: ServiceClients,
    question: str,
    config: PipelineConfig | None = None,
    embedding_model: str = "text-embedding-3-small",
    llm_model: str = "claude-sonnet-4-20250514",
    base_prompt: str = DEFAULT_BASE_PROMPT,
) -> dict[str, Any]:
    """Answer *question* grounded in retrieved podcast segments.

    Returns:
        Dictionary with the question, answer, sources (``"title - link"`` of
        the primary hits), segments (composite keys of every context
        segment, in conversation order), model, and usage info.
    """
    config = config or PipelineConfig()

    query_vector = get_query_embedding(clients.openai, question, model=embedding_model)
    hits, neighbors = retrieve(clients.index, query_vector, config)
    context = hits + neighbors

    conversation = build_conversation(base_prompt, context, question)

    started = time.monotonic()
    result = generate_answer(
        clients.anthropic,
        conversation,
        model=llm_model,
        temperature=config.temperature,
        max_tokens=config.max_tokens,
    )
    logger.info(
        "Included %d segments, took %.2fs to generate a response",
        len(context),
        time.monotonic() - started,
    )

    return {
        "question": question,
        "answer": result["answer"],
        "sources": [doc.source for doc in hits],
        "segments": [doc.key for doc in context],
        "model": result.get("model"),
        "usage": result.get("usage"),
    }
