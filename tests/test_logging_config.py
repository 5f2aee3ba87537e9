"""Tests for logger levels per CLI verbosity."""

import logging

import pytest

from collab_insight.logging_config import get_logger, setup_logging


@pytest.fixture(autouse=True)
def restore_levels():
    names = [
        "collab_insight",
        "collab_insight.orchestrator",
        "collab_insight.roster",
        "openai",
        "httpx",
        "httpcore",
    ]
    saved = {name: logging.getLogger(name).level for name in names}
    yield
    for name, level in saved.items():
        logging.getLogger(name).setLevel(level)


class TestSetupLogging:
    """Package, stage and third-party levels."""

    def test_normal_shows_team_progress_only(self):
        setup_logging()
        assert get_logger("collab_insight.orchestrator").isEnabledFor(logging.INFO)
        assert get_logger("collab_insight.roster").isEnabledFor(logging.INFO)
        assert not get_logger("collab_insight.judge.adapter").isEnabledFor(logging.INFO)
        assert get_logger("collab_insight.judge.adapter").isEnabledFor(logging.WARNING)

    def test_verbose_enables_debug_everywhere(self):
        setup_logging()
        setup_logging(verbose=True)
        for name in ("orchestrator", "roster", "judge.adapter", "chunking.builder"):
            assert get_logger(name).isEnabledFor(logging.DEBUG)

    def test_quiet_wins_over_verbose(self):
        logger = setup_logging(verbose=True, quiet=True)
        assert logger.level == logging.ERROR
        assert not get_logger("collab_insight.orchestrator").isEnabledFor(logging.WARNING)

    def test_http_clients_stay_at_warning(self):
        setup_logging(verbose=True)
        for name in ("openai", "httpx", "httpcore"):
            assert logging.getLogger(name).level == logging.WARNING


class TestGetLogger:
    def test_prefixes_bare_names(self):
        assert get_logger("cqi").name == "collab_insight.cqi"

    def test_keeps_package_names(self):
        assert get_logger("collab_insight.roster").name == "collab_insight.roster"

    def test_root(self):
        assert get_logger().name == "collab_insight"
