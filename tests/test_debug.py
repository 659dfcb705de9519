"""Tests for workbranch.utils.debug."""

import json

import pytest
import time_machine

import workbranch.utils.debug as debug_mod
from workbranch.utils.debug import debug_log


@pytest.fixture
def log_file(tmp_path, monkeypatch):
    path = tmp_path / "workbranch" / "debug.log"
    monkeypatch.setattr(debug_mod, "DEBUG_LOG", path)
    return path


class TestDebugLog:
    def test_disabled_writes_nothing(self, log_file, capsys):
        debug_log(False, "git status", "data")
        assert not log_file.exists()
        assert capsys.readouterr().out == ""

    def test_plain_string(self, log_file):
        debug_log(True, "git status --porcelain", " M app.py")
        content = log_file.read_text()
        assert "git status --porcelain" in content
        assert " M app.py" in content

    def test_json_string_prettified(self, log_file):
        debug_log(True, "az boards", '{"System.Title": "x"}')
        assert json.dumps({"System.Title": "x"}, indent=2) in log_file.read_text()

    def test_dict(self, log_file):
        debug_log(True, "git pull", {"returncode": 1, "stderr": "conflict"})
        content = log_file.read_text()
        assert '"returncode": 1' in content

    def test_appends(self, log_file):
        debug_log(True, "first", "a")
        debug_log(True, "second", "b")
        content = log_file.read_text()
        assert content.index("first") < content.index("second")

    @time_machine.travel("2026-03-14 09:26:53", tick=False)
    def test_timestamp(self, log_file):
        debug_log(True, "label", "x")
        assert "] label" in log_file.read_text()
        assert "2026-03-14" in log_file.read_text()

    def test_notice_printed(self, log_file, capsys):
        debug_log(True, "git checkout main", "")
        out = capsys.readouterr().out
        assert "[debug]" in out
        assert str(log_file) in out

    def test_notice_follows_stderr_mode(self, log_file, capsys, reset_output_stream):
        from workbranch.ui.output import use_stderr

        use_stderr()
        debug_log(True, "aws sts", "")
        captured = capsys.readouterr()
        assert captured.out == ""
        assert "[debug]" in captured.err
