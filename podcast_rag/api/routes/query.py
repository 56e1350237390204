"""Query endpoint: retrieve podcast context and generate an answer."""

from __future__ import annotations

import logging
from typing import Annotated

from anthropic import APIError
from fastapi import APIRouter, Depends, HTTPException

from podcast_rag.api.dependencies import clients_dependency, settings_dependency
from podcast_rag.api.models import QueryRequest, QueryResponse
from podcast_rag.clients import ServiceClients
from podcast_rag.config import Settings
from podcast_rag.ingestion.embeddings import EmbeddingError
from podcast_rag.pipeline_config import PipelineConfig
from podcast_rag.retrieval.index import SearchIndexError
from podcast_rag.retrieval.pipeline import answer_question

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/api/query", response_model=QueryResponse)
def query(
    request: QueryRequest,
    clients: Annotated[ServiceClients, Depends(clients_dependency)],
    settings: Annotated[Settings, Depends(settings_dependency)],
) -> QueryResponse:
    """Answer a question using RAG over podcast transcripts."""
    try:
        result = answer_question(
            clients,
            request.question,
            config=PipelineConfig.from_settings(settings),
            embedding_model=settings.embedding_model,
            llm_model=settings.llm_model,
            base_prompt=settings.base_prompt,
        )
    except EmbeddingError as exc:
        logger.error("failed to generate embedding from user query: %s", exc)
        raise HTTPException(status_code=502, detail="something went wrong talking to openai") from exc
    except SearchIndexError as exc:
        logger.error("failed to locate nearby embeddings from user query: %s", exc)
        raise HTTPException(
            status_code=503, detail="something went wrong talking to the search index"
        ) from exc
    except APIError as exc:
        logger.error("failed to generate a chat completion: %s", exc)
        raise HTTPException(status_code=503, detail=f"LLM unavailable: {exc.message}") from exc

    return QueryResponse(**result)
