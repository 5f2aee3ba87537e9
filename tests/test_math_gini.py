"""Tests for Gini coefficient calculations."""

import pytest

from collab_insight.math.gini import Gini


class TestGiniCoefficient:
    """Tests for Gini.gini_coefficient."""

    def test_empty_raises(self):
        with pytest.raises(ValueError, match="empty"):
            Gini.gini_coefficient([])

    def test_single_value_zero(self):
        assert Gini.gini_coefficient([42]) == 0.0

    def test_all_zeros_is_total_inequality(self):
        assert Gini.gini_coefficient([0, 0, 0, 0]) == 1.0

    def test_all_zeros_custom_value(self):
        assert Gini.gini_coefficient([0, 0], zero_total=0.0) == 0.0

    def test_negative_values_raises(self):
        with pytest.raises(ValueError, match="non-negative"):
            Gini.gini_coefficient([1, -1, 2])

    def test_perfect_equality(self):
        assert Gini.gini_coefficient([5, 5, 5, 5]) == 0.0
        assert Gini.gini_coefficient([10, 10, 10]) == 0.0

    def test_one_author_has_everything(self):
        # Maximum for n values is (n - 1) / n
        assert Gini.gini_coefficient([0, 100]) == pytest.approx(0.5)
        assert Gini.gini_coefficient([0, 0, 0, 100]) == pytest.approx(0.75)

    def test_matches_mean_absolute_difference_form(self):
        values = [1.0, 2.0, 3.0, 10.0]
        n = len(values)
        expected = sum(abs(a - b) for a in values for b in values) / (2 * n * sum(values))
        assert Gini.gini_coefficient(values) == pytest.approx(expected)

    def test_increases_with_concentration(self):
        shares = [[50, 50], [60, 40], [75, 25], [90, 10], [100, 0]]
        ginis = [Gini.gini_coefficient(s) for s in shares]
        assert ginis == sorted(ginis)
        assert len(set(ginis)) == len(ginis)

    def test_order_does_not_matter(self):
        assert Gini.gini_coefficient([3, 1, 2]) == Gini.gini_coefficient([1, 2, 3])


class TestBalanceScore:
    """Tests for Gini.balance_score."""

    def test_equal_totals_score_100(self):
        assert Gini.balance_score([8.0, 8.0]) == 100.0

    def test_concentrated_totals_score_lower(self):
        assert Gini.balance_score([90.0, 10.0]) < Gini.balance_score([60.0, 40.0]) < 100.0

    def test_accepts_iterables(self):
        assert Gini.balance_score(v for v in (1.0, 1.0, 1.0)) == 100.0
