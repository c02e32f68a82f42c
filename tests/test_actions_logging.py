"""Unit tests for GitHub Actions log formatting"""

import logging
import os
import sys
from unittest.mock import patch

# Add parent directory to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from linear_transition.actions_logging import (
    ActionsFormatter,
    escape_data,
    in_github_actions,
    setup_logging,
)


def make_record(level, message):
    return logging.LogRecord("test", level, __file__, 1, message, None, None)


class TestActionsFormatter:
    """Test workflow command rendering"""

    def test_warning_becomes_annotation(self):
        record = make_record(logging.WARNING, "Can't get state for issue ENG-7. Skipping")
        assert ActionsFormatter().format(record) == "::warning::Can't get state for issue ENG-7. Skipping"

    def test_error_and_debug(self):
        formatter = ActionsFormatter()
        assert formatter.format(make_record(logging.ERROR, "boom")) == "::error::boom"
        assert formatter.format(make_record(logging.DEBUG, "Team found: []")) == "::debug::Team found: []"

    def test_info_is_plain(self):
        assert ActionsFormatter().format(make_record(logging.INFO, "Issue ENG-1 updated!")) == "Issue ENG-1 updated!"

    def test_escapes_newlines(self):
        assert escape_data("50%\nline\r") == "50%25%0Aline%0D"


class TestSetupLogging:
    """Test logging configuration"""

    def test_in_github_actions(self):
        assert in_github_actions({"GITHUB_ACTIONS": "true"})
        assert not in_github_actions({})

    def test_uses_actions_formatter_in_actions(self):
        with patch("linear_transition.actions_logging.logging.basicConfig") as mock_basic_config:
            setup_logging(debug=True, environ={"GITHUB_ACTIONS": "true"})

        kwargs = mock_basic_config.call_args[1]
        assert kwargs["level"] == logging.DEBUG
        assert isinstance(kwargs["handlers"][0].formatter, ActionsFormatter)

    def test_plain_format_with_log_file(self, tmp_path):
        with patch("linear_transition.actions_logging.logging.basicConfig") as mock_basic_config:
            setup_logging(log_file=str(tmp_path / "transition.log"), environ={})

        kwargs = mock_basic_config.call_args[1]
        assert kwargs["level"] == logging.INFO
        assert len(kwargs["handlers"]) == 2
        assert not isinstance(kwargs["handlers"][0].formatter, ActionsFormatter)
        for handler in kwargs["handlers"]:
            handler.close()
