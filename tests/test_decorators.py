"""Tests for the command log decorator."""

import pytest

from jsonfile_db.decorators import log_command
from jsonfile_db.errors import RecordNotFoundError


class _Service:
    def __init__(self, log_path):
        self.log_path = log_path

    @log_command
    def works(self, value):
        return value * 2

    @log_command
    def fails_with_os_error(self):
        raise OSError("disk full")

    @log_command
    def fails_with_domain_error(self):
        raise RecordNotFoundError("gone")


class TestLogCommand:
    def test_success_is_logged_ok(self, tmp_path):
        log = tmp_path / "logs" / "commands.log"
        assert _Service(log).works(21) == 42
        line = log.read_text(encoding="utf-8").strip()
        assert "_Service.works" in line
        assert "\tok\t" in line

    def test_domain_error_is_logged(self, tmp_path):
        log = tmp_path / "commands.log"
        with pytest.raises(RecordNotFoundError):
            _Service(log).fails_with_domain_error()
        assert "error:RecordNotFoundError" in log.read_text(encoding="utf-8")

    def test_other_error_is_not_logged_ok(self, tmp_path):
        log = tmp_path / "commands.log"
        with pytest.raises(OSError):
            _Service(log).fails_with_os_error()
        line = log.read_text(encoding="utf-8")
        assert "error:OSError" in line
        assert "\tok\t" not in line

    def test_disabled_without_log_path(self, tmp_path):
        assert _Service(None).works(1) == 2
        assert list(tmp_path.iterdir()) == []
