"""Overlapping sliding-window chunking for episode transcripts."""

from __future__ import annotations

from collections.abc import Iterator, Sequence

from podcast_rag.ingestion.models import Chunk

DEFAULT_WINDOW_SIZE = 500


def _windows(num_words: int, window_size: int) -> Iterator[tuple[int, int]]:
    """Yield ``(start, end)`` word bounds in emission order."""
    half = window_size // 2
    i = 0
    while i < num_words - window_size:
        # Primary window
        if i + window_size <= num_words:
            yield i, i + window_size

        # Forward window straddling the boundary with the next primary window
        if i + window_size < num_words - window_size:
            yield i + half, i + window_size + half

        # Backward window straddling the boundary with the previous primary window
        if i > window_size:
            yield i - half, i + half

        i += window_size


def chunk_words(
    words: Sequence[str],
    episode_id: str,
    window_size: int = DEFAULT_WINDOW_SIZE,
) -> Iterator[Chunk]:
    """Split a transcript into overlapping windows of *window_size* words.

    For each base index ``i`` (stepping by ``window_size``) up to one
    primary window ``[i, i+W)``, one forward-shifted window
    ``[i+W/2, i+W+W/2)`` and one backward-shifted window ``[i-W/2, i+W/2)``
    are emitted, in that order. The shifted windows cover content that a
    plain fixed-size split would cut in half.

    Sequence positions are assigned in emission order across the whole
    transcript, so they are dense and zero-based.

    A transcript of ``window_size`` words or fewer produces no chunks.

    Args:
        words: The transcript as an ordered sequence of words.
        episode_id: Identifier of the episode the words belong to.
        window_size: Target number of words per chunk.

    Yields:
        :class:`Chunk` instances.

    Raises:
        ValueError: If *window_size* is not an integer of at least 2.
    """
    if isinstance(window_size, bool) or not isinstance(window_size, int):
        raise ValueError(f"window_size must be an integer, got {window_size!r}")
    if window_size < 2:
        raise ValueError(f"window_size must be at least 2, got {window_size}")

    for position, (start, end) in enumerate(_windows(len(words), window_size)):
        yield Chunk(
            episode_id=episode_id,
            sequence_position=position,
            content=" ".join(words[start:end]),
            start_word=start,
            end_word=end,
        )


def chunk_transcript(
    transcript: str,
    episode_id: str,
    window_size: int = DEFAULT_WINDOW_SIZE,
) -> list[Chunk]:
    """Whitespace-split *transcript* and chunk it with :func:`chunk_words`."""
    return list(chunk_words(transcript.split(), episode_id, window_size))
