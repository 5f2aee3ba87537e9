"""Tests for the effort judge adapter, using a scripted client."""

import logging

import pytest

from collab_insight.cancellation import CancellationToken
from collab_insight.config import JudgeConfig
from collab_insight.exceptions import AnalysisCancelledError, JudgeError
from collab_insight.judge import EffortJudgeAdapter, rating_from_dict
from collab_insight.judge.prompt import TRUNCATION_MARKER, build_prompt
from collab_insight.models import CommitLabel


class TestRate:
    """Single-chunk rating."""

    def test_well_formed_response(self, fake_judge, judge_json, make_chunk):
        adapter = EffortJudgeAdapter(fake_judge(judge_json(effort=8, label="BUG_FIX")))
        rating = adapter.rate(make_chunk())
        assert rating.effort_score == 8.0
        assert rating.label is CommitLabel.BUG_FIX
        assert rating.confidence == 0.9
        assert not rating.is_error

    def test_truncated_response_becomes_trivial(self, fake_judge, make_chunk):
        client = fake_judge('{"effortScore": 5.0, "complexity": 5.0, "nov')
        rating = EffortJudgeAdapter(client).rate(make_chunk())
        assert rating.label is CommitLabel.TRIVIAL
        assert rating.confidence == 0.0
        assert rating.reasoning == "Truncated AI response"

    def test_repairable_response(self, fake_judge, make_chunk):
        client = fake_judge('{"effortScore": 6.0, "complexity": 4.0, "novelty": 3.0, "type": "TEST"')
        rating = EffortJudgeAdapter(client).rate(make_chunk())
        assert rating.label is CommitLabel.TEST
        assert rating.effort_score == 6.0

    def test_empty_response(self, fake_judge, make_chunk):
        rating = EffortJudgeAdapter(fake_judge("   ")).rate(make_chunk())
        assert rating.label is CommitLabel.TRIVIAL
        assert rating.reasoning == "Empty AI response"

    def test_malformed_fields(self, fake_judge, make_chunk):
        client = fake_judge('{"effortScore": "a lot", "type": "FEATURE"}')
        rating = EffortJudgeAdapter(client).rate(make_chunk())
        assert rating.label is CommitLabel.TRIVIAL
        assert rating.reasoning == "Malformed AI response"

    def test_client_error_becomes_error_rating(self, fake_judge, make_chunk):
        client = fake_judge(JudgeError("connection reset"))
        rating = EffortJudgeAdapter(client).rate(make_chunk())
        assert rating.is_error
        assert rating.effort_score == 0.0
        assert rating.reasoning == "Error during AI analysis: connection reset"

    def test_disabled_does_not_call(self, fake_judge, judge_json, make_chunk):
        client = fake_judge(judge_json())
        adapter = EffortJudgeAdapter(client, JudgeConfig(enabled=False))
        assert not adapter.enabled
        rating = adapter.rate(make_chunk())
        assert rating.reasoning == "AI disabled"
        assert client.prompts == []

    def test_no_client_is_disabled(self, make_chunk):
        assert not EffortJudgeAdapter(None).enabled

    def test_usage_is_logged(self, fake_judge, judge_json, make_chunk, caplog):
        caplog.set_level(logging.INFO, logger="collab_insight")
        EffortJudgeAdapter(fake_judge(judge_json())).rate(make_chunk(sha="abc12345"))
        usage = [r.getMessage() for r in caplog.records if "LLM_USAGE" in r.getMessage()]
        assert len(usage) == 1
        assert "commit=abc12345" in usage[0]
        assert "totalTokens=120" in usage[0]


class TestCancellation:
    """Cancellation is checked before and after the external call."""

    def test_cancelled_before_call(self, fake_judge, judge_json, make_chunk):
        client = fake_judge(judge_json())
        token = CancellationToken()
        token.cancel()
        with pytest.raises(AnalysisCancelledError) as excinfo:
            EffortJudgeAdapter(client).rate(make_chunk(), token)
        assert excinfo.value.stage == "before rating chunk"
        assert client.prompts == []

    def test_cancelled_during_call(self, fake_judge, judge_json, make_chunk):
        token = CancellationToken()
        client = fake_judge(judge_json(), on_call=lambda _: token.cancel())
        with pytest.raises(AnalysisCancelledError) as excinfo:
            EffortJudgeAdapter(client).rate(make_chunk(), token)
        assert excinfo.value.stage == "after rating chunk"

    def test_rate_all_propagates_cancellation(self, fake_judge, judge_json, make_chunk):
        token = CancellationToken()
        client = fake_judge(judge_json(), on_call=lambda _: token.cancel())
        chunks = [make_chunk(sha=f"c{i}", message=f"Change {i}") for i in range(6)]
        with pytest.raises(AnalysisCancelledError):
            EffortJudgeAdapter(client).rate_all(chunks, token)


class TestRateAll:
    """Concurrent rating of many chunks."""

    def test_results_keep_input_order(self, fake_judge, judge_json, make_chunk):
        client = fake_judge(
            judge_json(),
            replies={
                "Message: Add tests": judge_json(label="TEST"),
                "Message: Fix crash": judge_json(label="BUG_FIX"),
            },
        )
        chunks = [
            make_chunk(sha="a", message="Add feature"),
            make_chunk(sha="b", message="Add tests"),
            make_chunk(sha="c", message="Fix crash"),
        ]
        rated = EffortJudgeAdapter(client, JudgeConfig(max_concurrency=3)).rate_all(chunks)
        assert [r.chunk.commit_sha for r in rated] == ["a", "b", "c"]
        assert [r.effective_label for r in rated] == [
            CommitLabel.FEATURE,
            CommitLabel.TEST,
            CommitLabel.BUG_FIX,
        ]
        assert len(client.prompts) == 3

    def test_low_confidence_downgraded_but_recorded(self, fake_judge, judge_json, make_chunk):
        client = fake_judge(judge_json(label="FEATURE", confidence=0.5))
        [rated] = EffortJudgeAdapter(client).rate_all([make_chunk()])
        assert rated.effective_label is CommitLabel.TRIVIAL
        assert rated.rating.label is CommitLabel.FEATURE
        assert rated.rating.confidence == 0.5

    def test_empty_input(self, fake_judge):
        assert EffortJudgeAdapter(fake_judge("{}")).rate_all([]) == []


class TestRatingFromDict:
    def test_values_clamped(self):
        rating = rating_from_dict(
            {"effortScore": 14, "complexity": -2, "novelty": 5, "confidence": 1.5, "type": "bug-fix"}
        )
        assert rating.effort_score == 10.0
        assert rating.complexity == 0.0
        assert rating.confidence == 1.0
        assert rating.label is CommitLabel.BUG_FIX

    def test_missing_values_are_zero(self):
        rating = rating_from_dict({"type": "nonsense"})
        assert rating.effort_score == 0.0
        assert rating.confidence == 0.0
        assert rating.label is CommitLabel.TRIVIAL
        assert rating.reasoning == ""

    def test_snake_case_effort(self):
        assert rating_from_dict({"effort_score": 3}).effort_score == 3.0


class TestPrompt:
    def test_contains_context(self, make_chunk, make_delta):
        chunk = make_chunk(
            message="Add booking",
            deltas=[make_delta("a.py", added=3, deleted=1), make_delta("b.py", added=2)],
        )
        prompt = build_prompt(chunk)
        assert "Commit Message: Add booking" in prompt
        assert "Files Changed: a.py, b.py" in prompt
        assert "Lines Added: 5" in prompt
        assert "Lines Deleted: 1" in prompt
        assert '{"effortScore": 5.0' in prompt

    def test_diff_truncated(self, make_chunk, make_delta):
        chunk = make_chunk(deltas=[make_delta("a.py", added=1)])
        prompt = build_prompt(chunk, max_diff_chars=10)
        assert TRUNCATION_MARKER in prompt
        assert chunk.diff_text[:10] + TRUNCATION_MARKER in prompt
