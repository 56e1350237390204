"""Data models for indexed and retrieved transcript segments."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from podcast_rag.retrieval.keys import composite_key, neighbor_keys


@dataclass
class RetrievedDocument:
    """A transcript segment returned by the vector index."""

    key: str
    episode_id: str
    sequence_position: int
    content: str
    title: str = ""
    link: str = ""
    published: str = ""
    description: str = ""
    score: float | None = None
    vector: list[float] = field(default_factory=list)

    @classmethod
    def from_hit(cls, hit: dict[str, Any]) -> RetrievedDocument:
        """Build a document from one entry of an OpenSearch ``hits.hits`` list.

        Raises:
            ValueError: If the hit lacks the fields needed to address it.
        """
        source = hit.get("_source")
        if not isinstance(source, dict):
            raise ValueError("search hit has no _source object")
        try:
            episode_id = str(source["guid"])
            position = int(source["vectorId"])
        except (KeyError, TypeError, ValueError) as exc:
            raise ValueError(f"search hit is missing guid/vectorId: {exc}") from exc

        return cls(
            key=str(hit.get("_id") or composite_key(episode_id, position)),
            episode_id=episode_id,
            sequence_position=position,
            content=str(source.get("transcriptChunkText", "")),
            title=str(source.get("title", "")),
            link=str(source.get("link", "")),
            published=str(source.get("published", "")),
            description=str(source.get("description", "")),
            score=hit.get("_score"),
            vector=list(source.get("vectorData") or []),
        )

    def neighbor_keys(self) -> list[str]:
        return neighbor_keys(self.episode_id, self.sequence_position)

    @property
    def source(self) -> str:
        return f"{self.title} - {self.link}"


class MessageRole(str, Enum):
    SYSTEM = "system"
    USER = "user"


@dataclass(frozen=True)
class Message:
    """A role-tagged message in a generation request."""

    role: MessageRole
    content: str
