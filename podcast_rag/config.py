from __future__ import annotations

from functools import lru_cache

from pydantic_settings import BaseSettings

from podcast_rag.pipeline_config import EmbeddingFailurePolicy

DEFAULT_BASE_PROMPT = (
    "You are a technical leader in the open source community, maybe affiliated with "
    "Oxide computers, and are discussing technical and social topics with friends and "
    "colleagues and answering questions from the audience"
)


class Settings(BaseSettings):
    """Application settings validated via Pydantic.

    Values are loaded from environment variables and/or a .env file.
    """

    # API Keys
    anthropic_api_key: str = ""
    openai_api_key: str = ""
    assemblyai_api_key: str = ""

    # Vector index (OpenSearch-compatible REST API)
    opensearch_url: str = "https://localhost:9200"
    opensearch_username: str = ""
    opensearch_password: str = ""
    opensearch_index: str = "oxide"
    opensearch_verify_certs: bool = True
    opensearch_timeout: float = 30.0

    # Episode sources and local artifacts
    data_dir: str = "data"
    rss_feed_url: str = "https://feeds.transistor.fm/oxide-and-friends.rss"
    max_episodes: int = 10

    # Models
    embedding_model: str = "text-embedding-3-small"
    embedding_dimensions: int = 1536
    llm_model: str = "claude-sonnet-4-20250514"
    base_prompt: str = DEFAULT_BASE_PROMPT

    # Chunking, embedding and retrieval
    window_size: int = 500
    embedding_failure_policy: EmbeddingFailurePolicy = EmbeddingFailurePolicy.BEST_EFFORT
    search_size: int = 10
    knn_k: int = 2
    max_neighbor_segments: int = 20
    expand_neighbors: bool = True
    dedup_neighbors: bool = False

    # Generation
    temperature: float = 0.6
    max_tokens: int = 300

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return a cached Settings instance.

    Gracefully handles missing .env files (e.g. in CI/testing) by falling
    back to environment variables and defaults.
    """
    try:
        return Settings()
    except Exception:
        # If .env is missing or unreadable, build settings from env vars only.
        return Settings(_env_file=None)  # type: ignore[call-arg]
