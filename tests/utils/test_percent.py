"""Tests for integer percentage helpers."""

from decimal import Decimal

from coursetrack.utils.percent import mean_percentage, meets_threshold, percentage


class TestPercentage:
    """Round-half-up percentages."""

    def test_zero_denominator_is_zero(self):
        """Nothing to complete means 0%, not a division error."""
        assert percentage(0, 0) == 0
        assert percentage(3, 0) == 0

    def test_half_rounds_up(self):
        """1/8 = 12.5% rounds to 13, not banker's 12."""
        assert percentage(1, 8) == 13
        assert percentage(5, 200) == 3

    def test_thirds(self):
        assert percentage(1, 3) == 33
        assert percentage(2, 3) == 67

    def test_full_and_fractional_points(self):
        assert percentage(10, 10) == 100
        assert percentage(0.5, 2) == 25
        assert percentage(Decimal("7.5"), 10) == 75


class TestMeanPercentage:
    """Average of already rounded percentages."""

    def test_empty_is_zero(self):
        assert mean_percentage([]) == 0

    def test_rounded_mean(self):
        """(50 + 51) / 2 = 50.5 rounds to 51."""
        assert mean_percentage([50, 51]) == 51

    def test_accepts_generators(self):
        assert mean_percentage(p for p in (100, 0, 50)) == 50


class TestMeetsThreshold:
    """Pass checks use the unrounded ratio."""

    def test_equality_passes(self):
        assert meets_threshold(7, 10, 70) is True

    def test_just_below_fails_even_if_rounding_would_pass(self):
        """69.6% rounds to 70 for display but does not pass 70."""
        assert meets_threshold(69.6, 100, 70) is False

    def test_zero_max_never_meets(self):
        assert meets_threshold(0, 0, 0) is False

    def test_zero_threshold_passes_any_real_quiz(self):
        assert meets_threshold(0, 10, 0) is True
