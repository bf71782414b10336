from __future__ import annotations

import logging

from cvd_lens.core import logging as cvd_logging


def test_configure_logging_is_one_shot(monkeypatch):
    root = logging.getLogger()
    monkeypatch.setattr(root, "level", root.level)
    cvd_logging.reset_logging_for_tests()

    cvd_logging.configure_logging("DEBUG")
    assert root.level == logging.DEBUG
    assert logging.getLogger("httpx").level == logging.WARNING

    cvd_logging.configure_logging("ERROR")
    assert root.level == logging.DEBUG
    cvd_logging.reset_logging_for_tests()


def test_level_from_environment(monkeypatch):
    root = logging.getLogger()
    monkeypatch.setattr(root, "level", root.level)
    monkeypatch.setenv("LOG_LEVEL", "warning")
    cvd_logging.reset_logging_for_tests()

    cvd_logging.configure_logging()
    assert root.level == logging.WARNING
    cvd_logging.reset_logging_for_tests()


def test_unknown_level_falls_back_to_info(monkeypatch):
    root = logging.getLogger()
    monkeypatch.setattr(root, "level", root.level)
    cvd_logging.reset_logging_for_tests()

    cvd_logging.configure_logging("chatty")
    assert root.level == logging.INFO
    cvd_logging.reset_logging_for_tests()
