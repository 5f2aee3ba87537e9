"""Shared test fixtures for Collab Insight tests."""

import json
import threading
from datetime import datetime, timedelta

import pytest

from collab_insight.judge import JudgeResponse, TokenUsage
from collab_insight.models import (
    Chunk,
    CommitLabel,
    EffortRating,
    FileDelta,
    RatedChunk,
    RawCommit,
)

BASE_TIME = datetime(2024, 1, 1, 9, 0)


def pytest_addoption(parser):
    """Add --run-slow option for slow tests."""
    parser.addoption(
        "--run-slow",
        action="store_true",
        default=False,
        help="run slow tests",
    )


def pytest_configure(config):
    """Configure slow marker."""
    config.addinivalue_line("markers", "slow: mark test as slow to run")


def pytest_collection_modifyitems(config, items):
    """Skip slow tests unless --run-slow is given."""
    if config.getoption("--run-slow"):
        return
    skip_slow = pytest.mark.skip(reason="need --run-slow option to run")
    for item in items:
        if "slow" in item.keywords:
            item.add_marker(skip_slow)


class FakeJudgeClient:
    """JudgeClient that answers from a script instead of a model.

    ``replies`` maps a substring of the prompt to the reply text (or an
    exception instance to raise); ``default`` answers everything else.
    """

    model = "fake-judge"

    def __init__(self, default=None, replies=None, on_call=None):
        self.default = default
        self.replies = replies or {}
        self.on_call = on_call
        self.prompts = []
        self._lock = threading.Lock()

    def complete(self, prompt):
        with self._lock:
            self.prompts.append(prompt)
        if self.on_call is not None:
            self.on_call(prompt)
        reply = self.default
        for needle, text in self.replies.items():
            if needle in prompt:
                reply = text
                break
        if isinstance(reply, Exception):
            raise reply
        return JudgeResponse(
            text=reply,
            usage=TokenUsage(self.model, 100, 20, 120, available=True),
        )


def _judge_json(effort=7.0, complexity=6.0, novelty=6.0, label="FEATURE", confidence=0.9):
    return json.dumps(
        {
            "effortScore": effort,
            "complexity": complexity,
            "novelty": novelty,
            "type": label,
            "confidence": confidence,
            "reasoning": "Adds a feature.",
        }
    )


@pytest.fixture
def make_delta():
    def _make(path="src/app.py", added=10, deleted=0, is_rename=False, whitespace=0):
        return FileDelta(
            path=path,
            diff_text=f"diff --git a/{path} b/{path}\n+change",
            lines_added=added,
            lines_deleted=deleted,
            is_rename=is_rename,
            whitespace_only_lines=whitespace,
        )

    return _make


@pytest.fixture
def make_commit(make_delta):
    def _make(
        sha="c1",
        author="alice",
        minutes=0,
        deltas=None,
        message="Add feature",
        email=None,
        timestamp=None,
    ):
        if deltas is None:
            deltas = [make_delta()]
        return RawCommit.build(
            sha=sha,
            author_email=email or f"{author}@tum.de",
            message=message,
            timestamp=timestamp or BASE_TIME + timedelta(minutes=minutes),
            file_deltas=deltas,
            author_id=author,
        )

    return _make


@pytest.fixture
def make_chunk(make_delta):
    def _make(
        sha="c1",
        author="alice",
        message="Add feature",
        deltas=None,
        timestamp=BASE_TIME,
        **flags,
    ):
        if deltas is None:
            deltas = [make_delta()]
        return Chunk(
            commit_sha=sha,
            author_id=author,
            author_email=f"{author}@tum.de",
            message=message,
            timestamp=timestamp,
            file_deltas=tuple(deltas),
            **flags,
        )

    return _make


@pytest.fixture
def make_rated(make_chunk, make_delta):
    def _make(
        author="alice",
        effort=8.0,
        complexity=6.0,
        novelty=6.0,
        label=CommitLabel.FEATURE,
        confidence=0.9,
        timestamp=BASE_TIME,
        files=("src/app.py",),
        lines=20,
        sha="c1",
    ):
        per_file = max(1, lines // len(files))
        chunk = make_chunk(
            sha=sha,
            author=author,
            timestamp=timestamp,
            deltas=[make_delta(path=f, added=per_file) for f in files],
        )
        rating = EffortRating(effort, complexity, novelty, label, confidence, "reason")
        return RatedChunk.from_rating(chunk, rating)

    return _make


@pytest.fixture
def fake_judge():
    return FakeJudgeClient


@pytest.fixture
def judge_json():
    return _judge_json
