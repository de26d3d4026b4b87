"""Custom completer for the transfer CLI with local path autocompletion."""

from pathlib import Path
from typing import Iterable

from prompt_toolkit.completion import Completer, Completion
from prompt_toolkit.document import Document

from cli.constants import COMMANDS

# Position of the local-path argument for commands that take one.
LOCAL_PATH_ARGUMENT = {"upload": 1, "download": 2}


class TransferCompleter(Completer):
    """
    Custom completer that provides:
    - Command name completion for the first token
    - Local path completion for the local argument of 'upload' and 'download'
    """

    def get_completions(
        self, document: Document, complete_event
    ) -> Iterable[Completion]:
        """
        Generate completions based on cursor position and context.
        """
        text = document.text_before_cursor
        tokens = text.split()

        is_typing_new_token = text.endswith(" ") or not tokens

        if not tokens or (len(tokens) == 1 and not is_typing_new_token):
            yield from self._complete_commands(tokens[0] if tokens else "")
            return

        command = tokens[0].lower()
        if command not in LOCAL_PATH_ARGUMENT:
            return

        position = len(tokens) if is_typing_new_token else len(tokens) - 1
        if position != LOCAL_PATH_ARGUMENT[command]:
            return

        current_word = "" if is_typing_new_token else tokens[-1]
        yield from self._complete_local_paths(current_word)

    def _complete_commands(self, partial: str) -> Iterable[Completion]:
        """Complete command names matching the partial input."""
        partial_lower = partial.lower()
        for cmd in COMMANDS:
            if cmd.startswith(partial_lower):
                yield Completion(cmd, start_position=-len(partial))

    def _complete_local_paths(self, partial: str) -> Iterable[Completion]:
        """
        Complete local file and directory paths relative to the working directory.

        Directories are completed with a trailing '/'.
        """
        base, _, prefix = partial.rpartition('/')
        search_dir = Path(base) if base else Path('.')
        if base == '' and partial.startswith('/'):
            search_dir = Path('/')

        try:
            entries = sorted(search_dir.iterdir())
        except OSError:
            return

        for entry in entries:
            if not entry.name.startswith(prefix) or (entry.name.startswith('.') and not prefix.startswith('.')):
                continue
            candidate = f"{base}/{entry.name}" if base or partial.startswith('/') else entry.name
            if entry.is_dir():
                candidate += '/'
            yield Completion(candidate, start_position=-len(partial))
