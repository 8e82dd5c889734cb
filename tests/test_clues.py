"""Tests for nihush.core.clues – clue ladder."""

from __future__ import annotations

import pytest

from nihush.core.clues import CLUE_STAGES, DEFAULT_CLUE_POINTS, ClueLadder, validate_clue_points


class TestClueLadder:
    def test_starts_at_first_stage(self):
        ladder = ClueLadder()
        assert ladder.current_clue_index() == 0
        assert ladder.current_points() == 10
        assert not ladder.is_final_stage()

    def test_default_points(self):
        assert DEFAULT_CLUE_POINTS == (10, 7, 5, 3)
        assert ClueLadder().points == (10, 7, 5, 3)

    def test_points_follow_stage(self):
        ladder = ClueLadder()
        seen = [ladder.current_points()]
        while ladder.advance():
            seen.append(ladder.current_points())
        assert seen == [10, 7, 5, 3]

    def test_advance_clamps_at_final_stage(self):
        ladder = ClueLadder()
        results = [ladder.advance() for _ in range(5)]
        assert results == [True, True, True, False, False]
        assert ladder.current_clue_index() == CLUE_STAGES - 1
        assert ladder.is_final_stage()
        assert ladder.current_points() == 3

    def test_custom_points(self):
        ladder = ClueLadder([4, 3, 2, 0])
        ladder.advance()
        assert ladder.current_points() == 3


class TestValidation:
    @pytest.mark.parametrize("points", [(), (10, 7, 5), (10, 7, 5, 3, 1)])
    def test_wrong_length(self, points):
        with pytest.raises(ValueError):
            ClueLadder(points)

    @pytest.mark.parametrize("points", [(10, 7, -1, 3), (10, 7.5, 5, 3), (10, "7", 5, 3), (True, 7, 5, 3)])
    def test_bad_values(self, points):
        with pytest.raises(ValueError):
            validate_clue_points(points)

    def test_returns_tuple(self):
        assert validate_clue_points([1, 1, 1, 1]) == (1, 1, 1, 1)
