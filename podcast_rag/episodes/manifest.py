"""Load and save the episode manifest (``<data_dir>/manifest.json``)."""

from __future__ import annotations

from pathlib import Path

from pydantic import ValidationError

from podcast_rag.episodes.models import Manifest

MANIFEST_NAME = "manifest.json"


class ManifestError(ValueError):
    """Raised when the manifest exists but cannot be read or parsed."""


def manifest_path(data_dir: str | Path) -> Path:
    return Path(data_dir) / MANIFEST_NAME


def load_manifest(data_dir: str | Path) -> Manifest:
    """Load the manifest, returning an empty one if it does not exist yet."""
    path = manifest_path(data_dir)
    if not path.exists():
        return Manifest()
    try:
        return Manifest.model_validate_json(path.read_bytes())
    except OSError as exc:
        raise ManifestError(f"unexpected error reading manifest {path}: {exc}") from exc
    except ValidationError as exc:
        raise ManifestError(f"unexpected error parsing manifest {path}: {exc}") from exc


def save_manifest(data_dir: str | Path, manifest: Manifest) -> Path:
    path = manifest_path(data_dir)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(manifest.model_dump_json(indent=1), encoding="utf-8")
    return path
