"""Embedding build: chunk -> embed -> persist, one artifact per episode."""

from __future__ import annotations

import logging
from pathlib import Path

from openai import OpenAI

from podcast_rag.episodes.models import EpisodeData, Manifest
from podcast_rag.ingestion.chunking import chunk_transcript
from podcast_rag.ingestion.embeddings import EmbeddingError, embed_texts
from podcast_rag.ingestion.models import EmbeddedChunk
from podcast_rag.ingestion.storage import artifact_exists, save_embeddings
from podcast_rag.pipeline_config import EmbeddingFailurePolicy, PipelineConfig

logger = logging.getLogger(__name__)


def build_episode_embeddings(
    client: OpenAI,
    episode: EpisodeData,
    data_dir: str | Path,
    config: PipelineConfig | None = None,
    model: str = "text-embedding-3-small",
) -> list[EmbeddedChunk] | None:
    """Chunk, embed and persist one episode's transcript.

    If the episode already has an artifact it is skipped entirely. Chunks
    are embedded one call at a time; a failed call either drops that chunk
    (``BEST_EFFORT``) or aborts the episode without writing anything
    (``FAIL_FAST``).

    Args:
        client: OpenAI client handle.
        episode: Episode whose ``transcript`` will be embedded.
        data_dir: Directory holding embedding artifacts.
        config: Pipeline configuration (window size, failure policy).
        model: Embedding model name.

    Returns:
        The persisted embeddings, or ``None`` if the episode was skipped.

    Raises:
        EmbeddingError: Under ``FAIL_FAST`` when any chunk fails to embed.
    """
    config = config or PipelineConfig()

    if artifact_exists(data_dir, episode.guid):
        logger.info("Embeddings for episode %s already exist, skipping", episode.guid)
        return None

    chunks = chunk_transcript(episode.transcript, episode.guid, config.window_size)
    logger.info(
        "Generating %d embeddings of %d-word windows for episode %s (%s)",
        len(chunks),
        config.window_size,
        episode.guid,
        episode.title,
    )

    embeddings: list[EmbeddedChunk] = []
    for chunk in chunks:
        try:
            vectors, response_model = embed_texts(client, [chunk.content], model=model)
        except EmbeddingError as exc:
            if config.failure_policy is EmbeddingFailurePolicy.FAIL_FAST:
                raise EmbeddingError(
                    f"failed to embed chunk {chunk.sequence_position} "
                    f"(words {chunk.start_word}:{chunk.end_word}) of episode {episode.guid}: {exc}"
                ) from exc
            logger.warning(
                "Skipping chunk %d (words %d:%d) of episode %s: %s",
                chunk.sequence_position,
                chunk.start_word,
                chunk.end_word,
                episode.guid,
                exc,
            )
            continue

        embeddings.append(
            EmbeddedChunk.from_chunk(chunk, vectors[0], response_model, config.window_size)
        )

    save_embeddings(data_dir, episode.guid, embeddings)
    if len(embeddings) < len(chunks):
        logger.warning(
            "Episode %s persisted with %d of %d chunks",
            episode.guid,
            len(embeddings),
            len(chunks),
        )
    return embeddings


def build_all_embeddings(
    client: OpenAI,
    manifest: Manifest,
    data_dir: str | Path,
    config: PipelineConfig | None = None,
    model: str = "text-embedding-3-small",
) -> int:
    """Build embeddings for every transcribed episode in *manifest*.

    Returns:
        The number of episodes for which a new artifact was written.
    """
    built = 0
    for episode in manifest.transcribed():
        result = build_episode_embeddings(client, episode, data_dir, config, model=model)
        if result is not None:
            built += 1
    return built
