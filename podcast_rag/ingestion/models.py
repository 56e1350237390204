"""Data models for the embedding pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class Chunk:
    """A window of transcript words ready for embedding.

    ``start_word``/``end_word`` are the half-open word bounds of the window
    and only matter for reasoning about overlap; identity is
    ``(episode_id, sequence_position)``.
    """

    episode_id: str
    sequence_position: int
    content: str
    start_word: int
    end_word: int


@dataclass
class EmbeddedChunk:
    """A chunk paired with its embedding vector."""

    episode_id: str
    sequence_position: int
    content: str
    vector: list[float]
    model: str
    window_size: int
    start_word: int = 0
    end_word: int = 0
    vector_size: int = field(init=False)

    def __post_init__(self) -> None:
        self.vector_size = len(self.vector)

    @classmethod
    def from_chunk(
        cls,
        chunk: Chunk,
        vector: list[float],
        model: str,
        window_size: int,
    ) -> EmbeddedChunk:
        return cls(
            episode_id=chunk.episode_id,
            sequence_position=chunk.sequence_position,
            content=chunk.content,
            vector=vector,
            model=model,
            window_size=window_size,
            start_word=chunk.start_word,
            end_word=chunk.end_word,
        )
