"""Tests for collab_insight.math.statistics module."""

import math

from collab_insight.math.statistics import Statistics


class TestMeanAndStdev:
    """Tests for basic statistics."""

    def test_mean_empty(self):
        assert Statistics.mean([]) == 0.0

    def test_mean_known(self):
        assert Statistics.mean([1.0, 2.0, 3.0, 6.0]) == 3.0

    def test_population_stdev_empty(self):
        assert Statistics.population_stdev([]) == 0.0

    def test_population_stdev_known(self):
        """[2, 4, 4, 4, 5, 5, 7, 9] has population stdev 2."""
        result = Statistics.population_stdev([2.0, 4.0, 4.0, 4.0, 5.0, 5.0, 7.0, 9.0])
        assert abs(result - 2.0) < 1e-10


class TestCoefficientOfVariation:
    """Tests for Statistics.coefficient_of_variation."""

    def test_constant_values_zero(self):
        assert Statistics.coefficient_of_variation([4.0, 4.0, 4.0]) == 0.0

    def test_zero_mean_is_nan(self):
        assert math.isnan(Statistics.coefficient_of_variation([0.0, 0.0]))

    def test_known_value(self):
        # mean 5, population stdev 2
        cv = Statistics.coefficient_of_variation([2.0, 4.0, 4.0, 4.0, 5.0, 5.0, 7.0, 9.0])
        assert abs(cv - 0.4) < 1e-10


class TestClamp:
    def test_clamp(self):
        assert Statistics.clamp(150.0, 0.0, 100.0) == 100.0
        assert Statistics.clamp(-3.0, 0.0, 100.0) == 0.0
        assert Statistics.clamp(42.0, 0.0, 100.0) == 42.0
