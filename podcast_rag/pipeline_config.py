"""Pipeline configuration: policy enums and PipelineConfig dataclass."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from podcast_rag.config import Settings


class EmbeddingFailurePolicy(str, Enum):
    """What to do when embedding a single chunk fails."""

    FAIL_FAST = "fail_fast"
    BEST_EFFORT = "best_effort"


@dataclass(frozen=True)
class PipelineConfig:
    """Immutable configuration for the RAG pipeline.

    Defaults mirror the project's observed behaviour: 500-word windows,
    best-effort embedding, ten k-NN hits expanded by up to twenty
    neighbouring segments, and no deduplication of the expanded set.
    """

    window_size: int = 500
    failure_policy: EmbeddingFailurePolicy = EmbeddingFailurePolicy.BEST_EFFORT
    search_size: int = 10
    knn_k: int = 2
    max_neighbor_segments: int = 20
    expand_neighbors: bool = True
    dedup_neighbors: bool = False
    temperature: float = 0.6
    max_tokens: int = 300

    @classmethod
    def from_settings(cls, settings: Settings) -> PipelineConfig:
        return cls(
            window_size=settings.window_size,
            failure_policy=settings.embedding_failure_policy,
            search_size=settings.search_size,
            knn_k=settings.knn_k,
            max_neighbor_segments=settings.max_neighbor_segments,
            expand_neighbors=settings.expand_neighbors,
            dedup_neighbors=settings.dedup_neighbors,
            temperature=settings.temperature,
            max_tokens=settings.max_tokens,
        )
