"""Two-stage retrieval: k-NN search, then neighbour expansion by position."""

from __future__ import annotations

import logging
from typing import Any

from podcast_rag.pipeline_config import PipelineConfig
from podcast_rag.retrieval.index import VECTOR_FIELD, SearchIndexError, VectorIndex
from podcast_rag.retrieval.models import RetrievedDocument

logger = logging.getLogger(__name__)


def _to_documents(hits: list[dict[str, Any]]) -> list[RetrievedDocument]:
    try:
        return [RetrievedDocument.from_hit(hit) for hit in hits]
    except ValueError as exc:
        raise SearchIndexError(f"failed to deserialize search results: {exc}") from exc


def search_embeddings(
    index: VectorIndex,
    query_vector: list[float],
    size: int = 10,
    k: int = 2,
) -> list[RetrievedDocument]:
    """Stage 1: nearest stored segments to *query_vector*, ranked by similarity.

    The similarity metric is whatever the index was configured with.

    Raises:
        SearchIndexError: On any index failure.
    """
    body = {
        "size": size,
        "query": {"knn": {VECTOR_FIELD: {"vector": query_vector, "k": k}}},
    }
    return _to_documents(index.search(body))


def add_nearby_segments(
    index: VectorIndex,
    sources: list[RetrievedDocument],
    max_segments: int = 20,
) -> list[RetrievedDocument]:
    """Stage 2: fetch the segments adjacent to each of *sources*.

    For a hit at position ``p`` the keys for ``p + 1`` and (when ``p > 0``)
    ``p - 1`` are requested in a single terms query capped at
    *max_segments*. Results come back in index order and are not
    deduplicated against *sources* or each other.

    Raises:
        SearchIndexError: On any index failure.
    """
    nearby_ids = [key for source in sources for key in source.neighbor_keys()]
    if not nearby_ids:
        return []

    body = {
        "size": max_segments,
        "query": {"terms": {"_id": nearby_ids}},
    }
    return _to_documents(index.search(body))


def _dedup_against(
    primary: list[RetrievedDocument],
    neighbors: list[RetrievedDocument],
) -> list[RetrievedDocument]:
    seen = {doc.key for doc in primary}
    unique: list[RetrievedDocument] = []
    for doc in neighbors:
        if doc.key in seen:
            continue
        seen.add(doc.key)
        unique.append(doc)
    return unique


def retrieve(
    index: VectorIndex,
    query_vector: list[float],
    config: PipelineConfig | None = None,
) -> tuple[list[RetrievedDocument], list[RetrievedDocument]]:
    """Run both retrieval stages.

    Returns:
        ``(hits, neighbors)``. Callers usually concatenate the two; hits
        stay similarity-ranked and come first.
    """
    config = config or PipelineConfig()

    hits = search_embeddings(index, query_vector, size=config.search_size, k=config.knn_k)
    if not config.expand_neighbors:
        return hits, []

    neighbors = add_nearby_segments(index, hits, max_segments=config.max_neighbor_segments)
    if config.dedup_neighbors:
        neighbors = _dedup_against(hits, neighbors)

    logger.info("Retrieved %d segments and %d neighbouring segments", len(hits), len(neighbors))
    return hits, neighbors
