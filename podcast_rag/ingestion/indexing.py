"""Load persisted embeddings into the vector index."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from podcast_rag.episodes.models import EpisodeData, Manifest
from podcast_rag.ingestion.models import EmbeddedChunk
from podcast_rag.ingestion.storage import load_embeddings
from podcast_rag.retrieval.index import VECTOR_FIELD, VectorIndex
from podcast_rag.retrieval.keys import composite_key

logger = logging.getLogger(__name__)


def build_search_document(episode: EpisodeData, embedding: EmbeddedChunk) -> dict[str, Any]:
    """Index document for one embedded chunk, carrying its episode's metadata."""
    return {
        "title": episode.title,
        "guid": episode.guid,
        "published": episode.published,
        "link": episode.link,
        "description": episode.description,
        "transcriptChunkText": embedding.content,
        "vectorId": embedding.sequence_position,
        VECTOR_FIELD: embedding.vector,
    }


def index_episode(index: VectorIndex, episode: EpisodeData, data_dir: str | Path) -> int:
    """Upsert every embedding of *episode* under its composite key.

    Documents are keyed by the chunk's sequence position, so positions
    dropped during a best-effort build leave gaps rather than shifting
    later chunks.

    Returns:
        The number of documents written.

    Raises:
        EmbeddingArtifactError: If the episode's artifact is missing or malformed.
        SearchIndexError: If any write is rejected.
    """
    embeddings = load_embeddings(data_dir, episode.guid)
    for embedding in embeddings:
        index.upsert(
            composite_key(episode.guid, embedding.sequence_position),
            build_search_document(episode, embedding),
        )
    logger.info(
        "Indexed %d embedding documents for %s (%s)",
        len(embeddings),
        episode.guid,
        episode.title,
    )
    return len(embeddings)


def index_all(
    index: VectorIndex,
    manifest: Manifest,
    data_dir: str | Path,
    dimensions: int = 1536,
) -> int:
    """Create the index if needed and load every transcribed episode into it."""
    index.ensure_index(dimensions)
    return sum(index_episode(index, episode, data_dir) for episode in manifest.transcribed())
