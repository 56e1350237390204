"""Composite document keys: ``episode-<guid>-embedding-<position>``.

The index document id encodes the chunk's sequence position, so the
neighbours of any hit can be addressed directly without a lookup table.
"""

from __future__ import annotations

import re

_KEY_RE = re.compile(r"^episode-(?P<episode_id>.+)-embedding-(?P<position>\d+)$")


def composite_key(episode_id: str, sequence_position: int) -> str:
    if sequence_position < 0:
        raise ValueError(f"sequence position must be non-negative, got {sequence_position}")
    return f"episode-{episode_id}-embedding-{sequence_position}"


def parse_composite_key(key: str) -> tuple[str, int]:
    """Split a composite key into ``(episode_id, sequence_position)``."""
    match = _KEY_RE.match(key)
    if match is None:
        raise ValueError(f"not a composite embedding key: {key!r}")
    return match.group("episode_id"), int(match.group("position"))


def neighbor_keys(episode_id: str, sequence_position: int) -> list[str]:
    """Keys of the chunks emitted right after and right before a position."""
    keys = [composite_key(episode_id, sequence_position + 1)]
    if sequence_position > 0:
        keys.append(composite_key(episode_id, sequence_position - 1))
    return keys
