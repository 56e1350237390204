"""Tests for the embedding build step (no external API keys required)."""

from __future__ import annotations

from pathlib import Path
from types import SimpleNamespace
from typing import Any
from unittest.mock import MagicMock, patch

import httpx
import openai
import pytest

from podcast_rag.episodes.models import EpisodeData, Manifest
from podcast_rag.ingestion.embeddings import EmbeddingError, embed_texts, get_query_embedding
from podcast_rag.ingestion.pipeline import build_all_embeddings, build_episode_embeddings
from podcast_rag.ingestion.storage import artifact_exists, load_embeddings
from podcast_rag.pipeline_config import EmbeddingFailurePolicy, PipelineConfig

CONFIG = PipelineConfig(window_size=4)


def _transcript(n: int) -> str:
    return " ".join(f"w{i}" for i in range(n))


def _episode(guid: str = "abc", words: int = 20) -> EpisodeData:
    return EpisodeData(guid=guid, title=f"Episode {guid}", transcript=_transcript(words))


def _response(*vectors: list[float]) -> SimpleNamespace:
    return SimpleNamespace(
        data=[SimpleNamespace(embedding=v) for v in vectors],
        model="text-embedding-3-small",
    )


def _mock_client(fail_on: set[int] | None = None) -> MagicMock:
    """OpenAI client whose Nth embeddings call (0-based) fails if N is in *fail_on*."""
    fail_on = fail_on or set()
    calls = {"n": 0}

    def create(input: list[str], model: str, **_: Any) -> SimpleNamespace:
        n = calls["n"]
        calls["n"] += 1
        if n in fail_on:
            raise openai.APIConnectionError(request=httpx.Request("POST", "https://api.openai.com"))
        return _response([float(n), 1.0])

    client = MagicMock()
    client.embeddings.create.side_effect = create
    return client


class TestEmbedTexts:
    def test_returns_vectors_and_model(self) -> None:
        client = MagicMock()
        client.embeddings.create.return_value = _response([0.1, 0.2], [0.3, 0.4])

        vectors, model = embed_texts(client, ["a", "b"], model="text-embedding-3-small")

        assert vectors == [[0.1, 0.2], [0.3, 0.4]]
        assert model == "text-embedding-3-small"
        client.embeddings.create.assert_called_once_with(
            input=["a", "b"], model="text-embedding-3-small"
        )

    def test_wraps_api_errors(self) -> None:
        client = _mock_client(fail_on={0})
        with pytest.raises(EmbeddingError, match="embedding request failed"):
            embed_texts(client, ["a"])

    def test_count_mismatch_raises(self) -> None:
        client = MagicMock()
        client.embeddings.create.return_value = _response([0.1])
        with pytest.raises(EmbeddingError, match="expected 2"):
            embed_texts(client, ["a", "b"])

    def test_query_embedding(self) -> None:
        client = MagicMock()
        client.embeddings.create.return_value = _response([0.5, 0.5])
        assert get_query_embedding(client, "fans?") == [0.5, 0.5]


class TestBuildEpisodeEmbeddings:
    def test_embeds_every_chunk_one_call_each(self, tmp_path: Path) -> None:
        client = _mock_client()

        result = build_episode_embeddings(client, _episode(), tmp_path, CONFIG)

        assert result is not None
        assert len(result) == 9
        assert client.embeddings.create.call_count == 9
        assert [e.sequence_position for e in result] == list(range(9))
        assert all(e.window_size == 4 for e in result)

        loaded = load_embeddings(tmp_path, "abc")
        assert [e.content for e in loaded] == [e.content for e in result]

    def test_rebuild_is_skipped(self, tmp_path: Path) -> None:
        client = _mock_client()
        build_episode_embeddings(client, _episode(), tmp_path, CONFIG)
        calls_after_first = client.embeddings.create.call_count

        second = build_episode_embeddings(client, _episode(), tmp_path, CONFIG)

        assert second is None
        assert client.embeddings.create.call_count == calls_after_first

    def test_short_transcript_writes_empty_artifact(self, tmp_path: Path) -> None:
        client = _mock_client()

        result = build_episode_embeddings(client, _episode(words=3), tmp_path, CONFIG)

        assert result == []
        assert client.embeddings.create.call_count == 0
        assert artifact_exists(tmp_path, "abc")

    def test_best_effort_skips_failed_chunk(self, tmp_path: Path) -> None:
        client = _mock_client(fail_on={1})

        result = build_episode_embeddings(client, _episode(), tmp_path, CONFIG)

        assert result is not None
        assert len(result) == 8
        assert 1 not in [e.sequence_position for e in result]
        assert len(load_embeddings(tmp_path, "abc")) == 8

    def test_fail_fast_writes_nothing(self, tmp_path: Path) -> None:
        client = _mock_client(fail_on={2})
        config = PipelineConfig(window_size=4, failure_policy=EmbeddingFailurePolicy.FAIL_FAST)

        with pytest.raises(EmbeddingError, match="chunk 2"):
            build_episode_embeddings(client, _episode(), tmp_path, config)

        assert not artifact_exists(tmp_path, "abc")

    def test_partial_artifact_still_gates_rebuild(self, tmp_path: Path) -> None:
        build_episode_embeddings(_mock_client(fail_on={0, 1}), _episode(), tmp_path, CONFIG)

        client = _mock_client()
        assert build_episode_embeddings(client, _episode(), tmp_path, CONFIG) is None
        client.embeddings.create.assert_not_called()

    def test_interrupted_write_is_rebuilt_on_rerun(self, tmp_path: Path) -> None:
        with patch("podcast_rag.ingestion.storage.os.replace", side_effect=KeyboardInterrupt):
            with pytest.raises(KeyboardInterrupt):
                build_episode_embeddings(_mock_client(), _episode(), tmp_path, CONFIG)
        assert not artifact_exists(tmp_path, "abc")

        client = _mock_client()
        result = build_episode_embeddings(client, _episode(), tmp_path, CONFIG)

        assert result is not None
        assert client.embeddings.create.call_count == 9
        assert len(load_embeddings(tmp_path, "abc")) == 9


class TestBuildAllEmbeddings:
    def test_only_transcribed_episodes_are_built(self, tmp_path: Path) -> None:
        manifest = Manifest(
            episodes={
                "a": _episode("a"),
                "b": EpisodeData(guid="b", title="No transcript"),
                "c": _episode("c"),
            }
        )
        client = _mock_client()

        assert build_all_embeddings(client, manifest, tmp_path, CONFIG) == 2
        assert artifact_exists(tmp_path, "a")
        assert not artifact_exists(tmp_path, "b")
        assert artifact_exists(tmp_path, "c")

        assert build_all_embeddings(client, manifest, tmp_path, CONFIG) == 0
