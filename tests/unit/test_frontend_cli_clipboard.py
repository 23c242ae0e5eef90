"""Unit tests for clipboard helpers."""

import logging
from unittest.mock import patch

import pyperclip

from tinypm.frontend.cli.clipboard import copy_secret
from tinypm.frontend.cli.logging_config import configure_logging


def test_copy_secret_success():
    with patch("tinypm.frontend.cli.clipboard.pyperclip.copy") as copy:
        assert copy_secret("s3cret") is True
    copy.assert_called_once_with("s3cret")


def test_copy_secret_without_clipboard(caplog):
    with patch(
        "tinypm.frontend.cli.clipboard.pyperclip.copy",
        side_effect=pyperclip.PyperclipException("no xclip"),
    ):
        with caplog.at_level(logging.WARNING):
            assert copy_secret("s3cret") is False

    assert "clipboard unavailable" in caplog.text
    assert "s3cret" not in caplog.text


def test_configure_logging_creates_directory(tmp_path):
    log_file = tmp_path / "nested" / "tinypm.log"
    with patch("tinypm.frontend.cli.logging_config.logging.basicConfig") as basic:
        configure_logging(log_file, logging.DEBUG)

    assert log_file.parent.is_dir()
    kwargs = basic.call_args.kwargs
    assert kwargs["filename"] == str(log_file)
    assert kwargs["level"] == logging.DEBUG
