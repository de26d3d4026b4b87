"""Tests for TransferCompleter."""

import pytest
from prompt_toolkit.document import Document

from cli.completer import TransferCompleter
from cli.constants import COMMANDS


@pytest.fixture
def completer():
    """Create a TransferCompleter instance."""
    return TransferCompleter()


@pytest.fixture
def workdir(tmp_path, monkeypatch):
    """
    Create a working directory with local files and switch into it.

    Returns:
        Path to the working directory
    """
    (tmp_path / "report.pdf").write_text("content")
    (tmp_path / "readme.txt").write_text("content")
    (tmp_path / ".hidden").write_text("content")
    data = tmp_path / "data"
    data.mkdir()
    (data / "big.bin").write_text("content")
    monkeypatch.chdir(tmp_path)
    return tmp_path


def get_completions_list(completer, text):
    """Helper to get list of completion texts from completer."""
    doc = Document(text, len(text))
    return [c.text for c in completer.get_completions(doc, None)]


class TestCommandCompletion:
    """Tests for command name completion."""

    def test_empty_input_shows_all_commands(self, completer):
        """Empty input should suggest all commands."""
        completions = get_completions_list(completer, "")
        assert completions == COMMANDS

    def test_partial_command_filters(self, completer):
        """Partial command should filter to matching commands."""
        completions = get_completions_list(completer, "clear")
        assert "clear" in completions
        assert "clear-range" in completions
        assert "upload" not in completions

    def test_command_completion_case_insensitive(self, completer):
        """Command completion should be case insensitive."""
        assert get_completions_list(completer, "UP") == ["upload"]


class TestLocalPathCompletion:
    """Tests for local path completion in upload and download."""

    def test_upload_lists_working_directory(self, completer, workdir):
        completions = get_completions_list(completer, "upload ")
        assert completions == ["data/", "readme.txt", "report.pdf"]

    def test_partial_name_filters(self, completer, workdir):
        completions = get_completions_list(completer, "upload re")
        assert completions == ["readme.txt", "report.pdf"]

    def test_hidden_files_need_dot_prefix(self, completer, workdir):
        assert ".hidden" not in get_completions_list(completer, "upload ")
        assert get_completions_list(completer, "upload .h") == [".hidden"]

    def test_descends_into_directories(self, completer, workdir):
        assert get_completions_list(completer, "upload data/") == ["data/big.bin"]

    def test_download_completes_third_argument(self, completer, workdir):
        assert get_completions_list(completer, "download docs/a.bin re") == ["readme.txt", "report.pdf"]

    def test_download_remote_argument_not_completed(self, completer, workdir):
        assert get_completions_list(completer, "download ") == []

    def test_upload_remote_argument_not_completed(self, completer, workdir):
        assert get_completions_list(completer, "upload report.pdf ") == []

    def test_other_commands_not_completed(self, completer, workdir):
        assert get_completions_list(completer, "mkshare ") == []

    def test_missing_directory(self, completer, workdir):
        assert get_completions_list(completer, "upload nowhere/") == []
