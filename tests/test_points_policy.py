"""Unit tests for app.services.points_policy."""

import pytest

from app.services.points_policy import calculate_points


class TestCalculatePoints:
    @pytest.mark.parametrize("score", [1, 2])
    def test_low_scores_get_compensation(self, score):
        assert calculate_points(score) == 10

    def test_neutral_score(self):
        assert calculate_points(3) == 5

    @pytest.mark.parametrize("score", [4, 5])
    def test_high_scores_get_reward(self, score):
        assert calculate_points(score) == 15

    def test_total_over_integers(self):
        assert calculate_points(0) == 10
        assert calculate_points(-3) == 10
        assert calculate_points(99) == 15
