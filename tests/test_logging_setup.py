import logging

import pytest

from transmission_splitter.logging_setup import TOOL_LOGGER, setup_logging


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, restore_logging):
    monkeypatch.delenv("LOG_LEVEL", raising=False)
    monkeypatch.delenv("TOOL_LOG_LEVEL", raising=False)
    return monkeypatch


def test_root_logs_to_stdout_in_utc(capsys):
    setup_logging()
    logging.getLogger("transmission_splitter.test").info("hello")

    out = capsys.readouterr().out
    assert "Z INFO transmission_splitter.test hello" in out


def test_tool_output_follows_root_level_by_default(clean_env):
    clean_env.setenv("LOG_LEVEL", "debug")
    setup_logging()
    assert logging.getLogger(TOOL_LOGGER).getEffectiveLevel() == logging.DEBUG
    assert logging.getLogger("botocore").level == logging.INFO


def test_tool_output_can_be_quieted(clean_env, capsys):
    clean_env.setenv("TOOL_LOG_LEVEL", "warning")
    setup_logging()

    logging.getLogger(TOOL_LOGGER).info("Separating track 12%")
    logging.getLogger("transmission_splitter.separator").info("Running demucs")

    out = capsys.readouterr().out
    assert "Separating track" not in out
    assert "Running demucs" in out


def test_invalid_level(clean_env):
    clean_env.setenv("TOOL_LOG_LEVEL", "chatty")
    with pytest.raises(RuntimeError, match="TOOL_LOG_LEVEL"):
        setup_logging()
