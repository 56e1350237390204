"""Transcribe downloaded episode audio via AssemblyAI."""

from __future__ import annotations

import logging
from pathlib import Path

from podcast_rag.episodes.models import Manifest

logger = logging.getLogger(__name__)


class TranscriptionError(RuntimeError):
    """Raised when AssemblyAI rejects the audio or cannot be reached."""


def transcribe_audio(path: Path, api_key: str) -> str:
    """Transcribe one audio file and return its plain text.

    Raises:
        TranscriptionError: Bad audio content or an infrastructure error.
    """
    import assemblyai as aai  # type: ignore[import-untyped]  # no stubs; import inside function

    aai.settings.api_key = api_key
    transcriber = aai.Transcriber()
    # speech_models (plural) is required by the current AssemblyAI API.
    config = aai.TranscriptionConfig(
        speech_models=["universal-3-pro"],
        language_code="en",
    )

    try:
        transcript = transcriber.transcribe(str(path), config=config)
    except Exception as exc:
        # Invalid API key, network failure, provider outage.
        raise TranscriptionError(f"transcription service unavailable: {exc}") from exc

    if transcript.status == aai.TranscriptStatus.error:
        raise TranscriptionError(f"transcription failed for {path.name}: {transcript.error}")
    return transcript.text or ""


def transcribe_episodes(manifest: Manifest, data_dir: str | Path, api_key: str) -> list[str]:
    """Transcribe every episode in *manifest* that has no transcript yet.

    The manifest is updated in place; saving it is left to the caller.

    Returns:
        GUIDs of the newly transcribed episodes.
    """
    if not api_key:
        raise TranscriptionError("ASSEMBLYAI_API_KEY is not configured")

    transcribed: list[str] = []
    for guid, episode in manifest.episodes.items():
        if episode.transcript:
            logger.info(
                "Transcription already exists for episode %s (%s), skipping", guid, episode.title
            )
            continue

        audio = Path(data_dir) / episode.filename
        logger.info("Transcribing %s", audio)
        episode.transcript = transcribe_audio(audio, api_key)
        transcribed.append(guid)
    return transcribed
