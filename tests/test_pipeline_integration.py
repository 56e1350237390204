"""End-to-end integration test for embed -> index -> query.

# MANUAL RUN REQUIRED: needs live API keys and a running OpenSearch node.
# Run manually with: pytest -m expensive tests/test_pipeline_integration.py -v
# Ensure .env has OPENAI_API_KEY, ANTHROPIC_API_KEY and the OPENSEARCH_* settings.
#
# Not run in CI (marked @pytest.mark.expensive).
"""

from __future__ import annotations

import uuid
from pathlib import Path

import pytest

from podcast_rag.clients import build_clients
from podcast_rag.config import get_settings
from podcast_rag.episodes.models import EpisodeData, Manifest
from podcast_rag.ingestion.indexing import index_all
from podcast_rag.ingestion.pipeline import build_all_embeddings
from podcast_rag.pipeline_config import PipelineConfig
from podcast_rag.retrieval.pipeline import answer_question

# Unique GUID per run so parallel runs sharing an index do not collide.
TEST_GUID = f"integration-test-{uuid.uuid4().hex[:8]}"

FILLER = "the rack ships with a single power shelf and a management network " * 40
FACT = "each fan in the rack draws about twelve watts at full speed " * 10


@pytest.mark.expensive
def test_embed_index_and_query(tmp_path: Path) -> None:
    """Golden path: a synthetic transcript is embedded, indexed and queried."""
    settings = get_settings()
    if not (settings.openai_api_key and settings.anthropic_api_key):
        pytest.skip("OPENAI_API_KEY and ANTHROPIC_API_KEY are required")

    config = PipelineConfig.from_settings(settings)
    manifest = Manifest(
        episodes={
            TEST_GUID: EpisodeData(
                guid=TEST_GUID,
                title="Integration Test Episode",
                link="https://example.com/integration",
                transcript=FILLER + FACT + FILLER,
            )
        }
    )

    clients = build_clients(settings)
    try:
        assert build_all_embeddings(
            clients.openai, manifest, tmp_path, config, model=settings.embedding_model
        ) == 1
        assert index_all(clients.index, manifest, tmp_path, settings.embedding_dimensions) > 0

        result = answer_question(
            clients,
            "How much power does a fan draw?",
            config=config,
            embedding_model=settings.embedding_model,
            llm_model=settings.llm_model,
            base_prompt=settings.base_prompt,
        )
    finally:
        clients.close()

    assert result["answer"].strip()
    assert any(TEST_GUID in key for key in result["segments"])
