"""Tests for CQI components, penalties and aggregation."""

import math
from datetime import datetime, timedelta

import pytest

from collab_insight.config import CqiConfig, CqiWeights
from collab_insight.cqi import CqiAggregator, PenaltyType
from collab_insight.cqi import components
from collab_insight.cqi.models import NO_PRODUCTIVE_WORK, SINGLE_CONTRIBUTOR
from collab_insight.models import CommitLabel, FilterSummary

BASE_TIME = datetime(2024, 1, 1, 9, 0)
PROJECT_END = BASE_TIME + timedelta(days=28)


@pytest.fixture
def aggregator():
    return CqiAggregator()


@pytest.fixture
def balanced_team(make_rated):
    """Two authors, one chunk each per week, both on the same file."""
    rated = []
    for week in range(4):
        day = BASE_TIME + timedelta(days=7 * week)
        rated.append(make_rated(author="alice", sha=f"a{week}", timestamp=day))
        rated.append(make_rated(author="bob", sha=f"b{week}", timestamp=day + timedelta(hours=1)))
    return rated


class TestEdgeCases:
    """Degenerate inputs give well-defined results."""

    def test_team_of_one_scores_zero(self, aggregator, make_rated):
        rated = [make_rated(sha=f"c{i}", lines=200) for i in range(40)]
        result = aggregator.calculate(rated, team_size=1)
        assert result.cqi == 0.0
        assert result.marker == SINGLE_CONTRIBUTOR

    def test_no_chunks(self, aggregator):
        result = aggregator.calculate([], team_size=3)
        assert result.cqi == 0.0
        assert result.marker == NO_PRODUCTIVE_WORK

    def test_one_author_in_larger_team(self, aggregator, make_rated):
        rated = [make_rated(author="alice", sha=f"c{i}") for i in range(5)]
        result = aggregator.calculate(rated, team_size=3)
        assert result.cqi == 0.0
        assert result.marker == SINGLE_CONTRIBUTOR

    def test_filter_summary_carried(self, aggregator):
        summary = FilterSummary(total=4, kept=0, counts={"EXCLUDE_MERGE": 4})
        assert aggregator.calculate([], 2, filter_summary=summary).filter_summary == summary


class TestScenarios:
    """End-to-end CQI behaviour."""

    def test_balanced_team_scores_high(self, aggregator, balanced_team):
        result = aggregator.calculate(balanced_team, 2, BASE_TIME, PROJECT_END)
        assert result.penalties == ()
        assert result.penalty_multiplier == 1.0
        assert 85.0 <= result.cqi <= 100.0
        assert result.components.effort_balance == pytest.approx(100.0)
        assert result.components.loc_balance == pytest.approx(100.0)
        assert result.components.temporal_spread == pytest.approx(100.0)
        assert result.components.ownership_spread == pytest.approx(100.0)

    def test_solo_development(self, aggregator, make_rated):
        rated = [make_rated(author="alice", sha=f"a{i}") for i in range(9)]
        rated.append(make_rated(author="bob", sha="b0"))
        result = aggregator.calculate(rated, 2, BASE_TIME, PROJECT_END)

        assert result.penalty_types == [PenaltyType.SOLO_DEVELOPMENT]
        assert result.penalties[0].multiplier == 0.25
        assert result.penalties[0].ratio == pytest.approx(0.9)
        assert result.cqi <= result.base_score * 0.25 + 1e-9
        assert result.penalties[0].reason == "One contributor has 90% of effort (>85%)"

    def test_severe_imbalance_not_solo(self, aggregator, make_rated):
        rated = [make_rated(author="alice", sha=f"a{i}") for i in range(3)]
        rated.append(make_rated(author="bob", sha="b0"))
        result = aggregator.calculate(rated, 2, BASE_TIME, PROJECT_END)
        assert result.has_penalty(PenaltyType.SEVERE_IMBALANCE)
        assert not result.has_penalty(PenaltyType.SOLO_DEVELOPMENT)

    def test_high_trivial_ratio(self, aggregator, make_rated):
        rated = [
            make_rated(author="alice", sha="a0"),
            make_rated(author="alice", sha="a1", label=CommitLabel.TRIVIAL),
            make_rated(author="bob", sha="b0", label=CommitLabel.TRIVIAL),
            make_rated(author="bob", sha="b1", label=CommitLabel.TRIVIAL),
        ]
        result = aggregator.calculate(rated, 2, BASE_TIME, PROJECT_END)
        assert result.penalty_types == [PenaltyType.HIGH_TRIVIAL_RATIO]
        assert result.penalty_multiplier == pytest.approx(0.85)

    def test_low_confidence(self, aggregator, make_rated):
        rated = [
            make_rated(author="alice", sha="a0", confidence=0.5),
            make_rated(author="bob", sha="b0", confidence=0.5),
        ]
        result = aggregator.calculate(rated, 2, BASE_TIME, PROJECT_END)
        assert result.penalty_types == [PenaltyType.LOW_CONFIDENCE]

    def test_late_work(self, aggregator, make_rated):
        late = BASE_TIME + timedelta(days=25)
        rated = [
            make_rated(author="alice", sha="a0", timestamp=BASE_TIME),
            make_rated(author="alice", sha="a1", timestamp=late),
            make_rated(author="bob", sha="b0", timestamp=late),
            make_rated(author="bob", sha="b1", timestamp=late),
        ]
        result = aggregator.calculate(rated, 2, BASE_TIME, PROJECT_END)
        assert result.penalty_types == [PenaltyType.LATE_WORK]
        assert result.penalties[0].ratio == pytest.approx(0.75)

    def test_penalties_compose_multiplicatively(self, aggregator, make_rated):
        rated = [
            make_rated(author="alice", sha=f"a{i}", label=CommitLabel.TRIVIAL, confidence=0.3)
            for i in range(9)
        ]
        rated.append(make_rated(author="bob", sha="b0", confidence=0.3))
        result = aggregator.calculate(rated, 2, BASE_TIME, PROJECT_END)

        assert result.penalty_types == [
            PenaltyType.SOLO_DEVELOPMENT,
            PenaltyType.HIGH_TRIVIAL_RATIO,
            PenaltyType.LOW_CONFIDENCE,
        ]
        assert result.penalty_multiplier == pytest.approx(0.25 * 0.85 * 0.90)
        assert result.cqi == pytest.approx(result.base_score * result.penalty_multiplier)

    def test_penalties_can_be_disabled(self, make_rated):
        aggregator = CqiAggregator(CqiConfig(penalties_enabled=False))
        rated = [make_rated(author="alice", sha=f"a{i}") for i in range(9)]
        rated.append(make_rated(author="bob", sha="b0"))
        result = aggregator.calculate(rated, 2, BASE_TIME, PROJECT_END)
        assert result.penalties == ()
        assert result.cqi == pytest.approx(result.base_score)

    def test_more_concentration_scores_lower(self, aggregator, make_rated):
        def cqi_for(alice_chunks):
            rated = [make_rated(author="alice", sha=f"a{i}") for i in range(alice_chunks)]
            rated.append(make_rated(author="bob", sha="b0"))
            return aggregator.calculate(rated, 2, BASE_TIME, PROJECT_END).components.effort_balance

        assert cqi_for(1) > cqi_for(2) > cqi_for(4)

    def test_custom_weights(self, balanced_team):
        weights = CqiWeights(effort=1.0, loc=0.0, temporal=0.0, ownership=0.0)
        result = CqiAggregator(CqiConfig(weights=weights)).calculate(balanced_team, 2)
        assert result.base_score == pytest.approx(result.components.effort_balance)

    def test_weights_sum_to_one(self):
        w = CqiConfig().weights
        assert w.effort + w.loc + w.temporal + w.ownership == pytest.approx(1.0)


class TestComponents:
    """Component functions in isolation."""

    def test_balance_score_single_author(self):
        assert components.balance_score({"alice": 10.0}) == 0.0

    def test_totals_skip_missing_author(self):
        totals = components.totals_by_author([("a", 1.0), (None, 5.0), ("a", 2.0)])
        assert totals == {"a": 3.0}

    def test_temporal_neutral_without_bounds(self):
        assert components.temporal_spread([(BASE_TIME, 1.0)], None, None) == 50.0

    def test_temporal_neutral_for_zero_duration(self):
        assert components.temporal_spread([(BASE_TIME, 1.0)], BASE_TIME, BASE_TIME) == 50.0

    def test_temporal_all_work_in_one_week(self):
        score = components.temporal_spread([(BASE_TIME, 10.0)], BASE_TIME, PROJECT_END)
        assert score == pytest.approx(100.0 * (1.0 - math.sqrt(3) / 2.0))

    def test_temporal_cv_capped(self):
        # 10 weeks, all effort in one: CV = 3, normalised to 1
        end = BASE_TIME + timedelta(days=70)
        assert components.temporal_spread([(BASE_TIME, 5.0)], BASE_TIME, end) == 0.0

    def test_weekly_totals_clamp_out_of_range(self):
        buckets = components.weekly_totals(
            [(BASE_TIME - timedelta(days=3), 1.0), (BASE_TIME + timedelta(days=40), 2.0)],
            BASE_TIME,
            14,
        )
        assert buckets == [1.0, 2.0]

    def test_ownership_neutral_without_hot_files(self):
        items = [("alice", ["a.py"]), ("bob", ["b.py"])]
        assert components.ownership_spread(items, team_size=2) == 75.0

    def test_ownership_single_owner(self):
        items = [("alice", ["core.py"])] * 3
        assert components.ownership_spread(items, team_size=2) == pytest.approx(50.0)

    def test_ownership_cap_at_four(self):
        items = [(f"m{i}", ["core.py"]) for i in range(6)]
        assert components.ownership_spread(items, team_size=6) == pytest.approx(100.0)

    def test_ownership_team_of_one(self):
        assert components.ownership_spread([("a", ["x"])] * 3, team_size=1) == 0.0


class TestFallback:
    """LoC-only scoring when no judge is available."""

    def test_fallback_uses_loc_balance(self, aggregator, make_chunk, make_delta):
        chunks = [
            make_chunk(sha="a", author="alice", deltas=[make_delta(added=100)]),
            make_chunk(sha="b", author="bob", deltas=[make_delta(added=100)]),
        ]
        result = aggregator.calculate_fallback(chunks, team_size=2)
        assert result.fallback
        assert result.cqi == pytest.approx(100.0)
        assert result.components.effort_balance == 0.0
        assert result.components.loc_balance == pytest.approx(100.0)

    def test_fallback_edge_cases(self, aggregator, make_chunk):
        assert aggregator.calculate_fallback([make_chunk()], 1).marker == SINGLE_CONTRIBUTOR
        assert aggregator.calculate_fallback([], 2).marker == NO_PRODUCTIVE_WORK
        assert aggregator.calculate_fallback([make_chunk()], 2).marker == SINGLE_CONTRIBUTOR

    def test_fallback_reports_git_components(self, aggregator, make_chunk, make_delta):
        chunks = [
            make_chunk(
                sha=f"a{i}",
                author="alice" if i % 2 else "bob",
                deltas=[make_delta("core.py", added=30)],
                timestamp=BASE_TIME + timedelta(days=7 * i),
            )
            for i in range(4)
        ]
        result = aggregator.calculate_fallback(
            chunks, 2, project_start=BASE_TIME, project_end=BASE_TIME + timedelta(days=28)
        )
        expected = aggregator.git_only_components(
            chunks, 2, BASE_TIME, BASE_TIME + timedelta(days=28)
        )
        assert result.components == expected
        assert result.components.ownership_spread == pytest.approx(100.0)
        assert result.cqi == pytest.approx(result.components.loc_balance)

    def test_git_only_components(self, aggregator, make_chunk, make_delta):
        chunks = [
            make_chunk(
                sha=f"a{i}",
                author="alice" if i % 2 else "bob",
                deltas=[make_delta("core.py", added=30)],
                timestamp=BASE_TIME + timedelta(days=7 * i),
            )
            for i in range(4)
        ]
        scores = aggregator.git_only_components(chunks, team_size=2)
        assert scores.effort_balance == 0.0
        assert scores.loc_balance == pytest.approx(100.0)
        assert scores.ownership_spread == pytest.approx(100.0)
        assert 0.0 <= scores.temporal_spread <= 100.0

    def test_git_only_single_author(self, aggregator, make_chunk):
        scores = aggregator.git_only_components([make_chunk()], team_size=2)
        assert scores.to_dict() == {
            "effort_balance": 0.0,
            "loc_balance": 0.0,
            "temporal_spread": 0.0,
            "ownership_spread": 0.0,
        }
