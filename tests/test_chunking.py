"""Tests for the overlapping sliding-window chunker."""

from __future__ import annotations

import pytest

from podcast_rag.ingestion.chunking import chunk_transcript, chunk_words


def _words(n: int) -> list[str]:
    return [f"w{i}" for i in range(n)]


def _bounds(n: int, window: int) -> list[tuple[int, int]]:
    return [(c.start_word, c.end_word) for c in chunk_words(_words(n), "ep", window)]


class TestBoundaryScenarios:
    def test_short_transcript_yields_nothing(self) -> None:
        assert list(chunk_words(_words(300), "ep", 500)) == []

    def test_transcript_of_exactly_one_window_yields_nothing(self) -> None:
        assert list(chunk_words(_words(500), "ep", 500)) == []

    def test_exact_boundary_yields_single_primary(self) -> None:
        chunks = list(chunk_words(_words(1000), "ep", 500))
        assert len(chunks) == 1
        assert (chunks[0].start_word, chunks[0].end_word) == (0, 500)
        assert chunks[0].content.split() == _words(500)

    def test_one_word_over_window(self) -> None:
        assert _bounds(501, 500) == [(0, 500)]

    def test_empty_transcript(self) -> None:
        assert chunk_transcript("", "ep") == []


class TestWindowLayout:
    def test_small_window_layout(self) -> None:
        # i=0: primary + forward; i=4: primary + forward;
        # i=8: primary + forward + backward; i=12: primary + backward
        assert _bounds(20, 4) == [
            (0, 4),
            (2, 6),
            (4, 8),
            (6, 10),
            (8, 12),
            (10, 14),
            (6, 10),
            (12, 16),
            (10, 14),
        ]

    def test_primary_window_count(self) -> None:
        n, w = 5000, 500
        primaries = [b for b in _bounds(n, w) if b[0] % w == 0 and b[1] - b[0] == w]
        assert len(primaries) == (n - w) // w
        assert all(end - start == w for start, end in primaries)

    def test_total_count_for_long_transcript(self) -> None:
        # 9 primary, 8 forward, 7 backward windows
        assert len(_bounds(5000, 500)) == 24

    def test_three_windows_per_step_past_first_window(self) -> None:
        bounds = _bounds(5000, 500)
        start = bounds.index((1000, 1500))
        assert bounds[start : start + 3] == [
            (1000, 1500),
            (1250, 1750),
            (750, 1250),
        ]

    def test_final_step_has_no_forward_window(self) -> None:
        # no primary window follows [4000, 4500), so [4250, 4750) is not emitted
        bounds = _bounds(5000, 500)
        assert bounds[-2:] == [(4000, 4500), (3750, 4250)]
        assert (4250, 4750) not in bounds

    def test_backward_window_overlaps_previous_primary_tail(self) -> None:
        chunks = list(chunk_words(_words(20), "ep", 4))
        previous_primary = next(c for c in chunks if (c.start_word, c.end_word) == (4, 8))
        backward = chunks[6]
        assert (backward.start_word, backward.end_word) == (6, 10)
        tail = previous_primary.content.split()[-2:]
        assert backward.content.split()[:2] == tail

    def test_backward_window_repeats_previous_forward_window(self) -> None:
        bounds = _bounds(5000, 500)
        assert bounds.count((750, 1250)) == 2

    def test_odd_window_size(self) -> None:
        assert _bounds(12, 3)[:2] == [(0, 3), (1, 4)]


class TestSequencePositions:
    @pytest.mark.parametrize("n,w", [(20, 4), (1001, 500), (5000, 500), (7321, 250)])
    def test_positions_are_dense_and_ordered(self, n: int, w: int) -> None:
        chunks = list(chunk_words(_words(n), "ep", w))
        assert [c.sequence_position for c in chunks] == list(range(len(chunks)))

    def test_episode_id_carried(self) -> None:
        chunks = chunk_transcript(" ".join(_words(20)), "episode-guid", 4)
        assert {c.episode_id for c in chunks} == {"episode-guid"}

    def test_content_joins_words_with_single_spaces(self) -> None:
        chunks = chunk_transcript("a  b\tc\nd e f g h i j", "ep", 4)
        assert chunks[0].content == "a b c d"


class TestValidation:
    @pytest.mark.parametrize("window", [0, 1, -5, 4.5, True, "4"])
    def test_rejects_invalid_windows(self, window: object) -> None:
        with pytest.raises(ValueError, match="window_size"):
            list(chunk_words(_words(10), "ep", window))

    def test_is_lazy(self) -> None:
        gen = chunk_words(_words(20), "ep", 4)
        first = next(gen)
        assert first.sequence_position == 0
