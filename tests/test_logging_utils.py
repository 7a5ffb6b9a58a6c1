"""Tests for log level resolution."""

import argparse
import logging

import pytest

from logging_utils import LOG_LEVEL_ENV, add_logging_args, configure_logging, resolve_log_level


class TestResolveLogLevel:
    """Tests for resolve_log_level."""

    def test_default_is_info(self, monkeypatch):
        monkeypatch.delenv(LOG_LEVEL_ENV, raising=False)
        assert resolve_log_level() == logging.INFO

    def test_explicit_level_wins(self, monkeypatch):
        monkeypatch.setenv(LOG_LEVEL_ENV, "debug")
        assert resolve_log_level("error", verbose=2) == logging.ERROR

    def test_environment_fallback(self, monkeypatch):
        monkeypatch.setenv(LOG_LEVEL_ENV, "WARNING")
        assert resolve_log_level() == logging.WARNING

    def test_unknown_environment_value_ignored(self, monkeypatch):
        monkeypatch.setenv(LOG_LEVEL_ENV, "loud")
        assert resolve_log_level() == logging.INFO

    @pytest.mark.parametrize("verbose,quiet,expected", [
        (1, 0, logging.DEBUG),
        (0, 1, logging.WARNING),
        (0, 2, logging.ERROR),
        (1, 1, logging.INFO),
    ])
    def test_modifiers(self, monkeypatch, verbose, quiet, expected):
        monkeypatch.delenv(LOG_LEVEL_ENV, raising=False)
        assert resolve_log_level(verbose=verbose, quiet=quiet) == expected


class TestConfigureLogging:
    """Tests for configure_logging."""

    def test_third_party_loggers_capped(self):
        configure_logging("info")
        assert logging.getLogger("urllib3").level == logging.WARNING
        assert logging.getLogger("easyocr").level == logging.WARNING

    def test_third_party_loggers_follow_debug(self):
        configure_logging("debug")
        assert logging.getLogger("PIL").level == logging.DEBUG

    def test_parser_flags(self):
        parser = argparse.ArgumentParser()
        add_logging_args(parser)
        args = parser.parse_args(["-vv", "--log-level", "warning"])
        assert args.verbose == 2
        assert args.log_level == "warning"
        assert args.quiet == 0
