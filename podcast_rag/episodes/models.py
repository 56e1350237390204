"""Pydantic models for the episode manifest."""

from __future__ import annotations

from pydantic import BaseModel


class EpisodeData(BaseModel):
    """Metadata and transcript of one downloaded podcast episode."""

    guid: str
    title: str = ""
    description: str = ""
    link: str = ""
    filename: str = ""
    published: str = ""
    transcript: str = ""


class Manifest(BaseModel):
    """All downloaded episodes keyed by GUID."""

    last_updated: str = ""
    episodes: dict[str, EpisodeData] = {}

    def transcribed(self) -> list[EpisodeData]:
        """Episodes that have a transcript, in manifest order."""
        return [e for e in self.episodes.values() if e.transcript]
