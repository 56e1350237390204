"""Per-episode embedding artifacts on local disk.

Each episode's embeddings are written once to
``<data_dir>/<guid>.embeddings.json``. The file's existence marks the
episode as done; it is never appended to or merged.
"""

from __future__ import annotations

import json
import os
from dataclasses import asdict
from pathlib import Path
from typing import Any

from podcast_rag.ingestion.models import EmbeddedChunk

ARTIFACT_SUFFIX = ".embeddings.json"

_REQUIRED_FIELDS = ("episode_id", "sequence_position", "content", "vector", "model", "window_size")


class EmbeddingArtifactError(ValueError):
    """Raised when an embeddings artifact cannot be read or decoded."""


def artifact_path(data_dir: str | Path, episode_id: str) -> Path:
    """Return the artifact path for *episode_id*."""
    return Path(data_dir) / f"{episode_id}{ARTIFACT_SUFFIX}"


def artifact_exists(data_dir: str | Path, episode_id: str) -> bool:
    return artifact_path(data_dir, episode_id).exists()


def save_embeddings(
    data_dir: str | Path,
    episode_id: str,
    embeddings: list[EmbeddedChunk],
) -> Path:
    """Serialize *embeddings* in order and write the episode's artifact.

    The records go to a sibling temp file that is renamed into place, so the
    artifact only exists once it is complete.
    """
    path = artifact_path(data_dir, episode_id)
    path.parent.mkdir(parents=True, exist_ok=True)
    records = [asdict(e) for e in embeddings]
    tmp = path.with_suffix(".json.tmp")
    try:
        tmp.write_text(json.dumps(records, indent=1), encoding="utf-8")
        os.replace(tmp, path)
    except BaseException:
        tmp.unlink(missing_ok=True)
        raise
    return path


def _decode_record(record: Any, index: int) -> EmbeddedChunk:
    if not isinstance(record, dict):
        raise EmbeddingArtifactError(f"record {index} is not an object")
    missing = [name for name in _REQUIRED_FIELDS if name not in record]
    if missing:
        raise EmbeddingArtifactError(f"record {index} is missing fields: {', '.join(missing)}")
    try:
        return EmbeddedChunk(
            episode_id=str(record["episode_id"]),
            sequence_position=int(record["sequence_position"]),
            content=str(record["content"]),
            vector=[float(v) for v in record["vector"]],
            model=str(record["model"]),
            window_size=int(record["window_size"]),
            start_word=int(record.get("start_word", 0)),
            end_word=int(record.get("end_word", 0)),
        )
    except (TypeError, ValueError) as exc:
        raise EmbeddingArtifactError(f"record {index} has invalid values: {exc}") from exc


def load_embeddings(data_dir: str | Path, episode_id: str) -> list[EmbeddedChunk]:
    """Load the artifact for *episode_id*, preserving stored order.

    Raises:
        EmbeddingArtifactError: If the file is missing, not JSON, or does not
            hold a list of embedding records.
    """
    path = artifact_path(data_dir, episode_id)
    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise EmbeddingArtifactError(f"could not load episode embeddings {path}: {exc}") from exc

    try:
        data = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise EmbeddingArtifactError(f"could not decode episode embeddings {path}: {exc}") from exc

    if not isinstance(data, list):
        raise EmbeddingArtifactError(f"expected a list of embeddings in {path}")
    return [_decode_record(record, i) for i, record in enumerate(data)]
