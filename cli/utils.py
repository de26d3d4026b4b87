"""Utility functions for CLI operations."""

import sys

from cli.constants import GREEN, RESET
from transfer.progress import TransferProgress


def display_progress(progress: TransferProgress, verb: str) -> None:
    """Redraw a one-line progress indicator for a running transfer."""
    sys.stdout.write(
        f"\r{verb} {progress.name}: {progress.get_complete_size()} / {progress.get_total_size()} "
        f"({GREEN}{progress.get_complete_percent()}%{RESET}) {progress.get_speed()}"
    )
    sys.stdout.flush()


def finish_progress(progress: TransferProgress, verb: str) -> None:
    """Draw the final state of a progress indicator and end the line."""
    display_progress(progress, verb)
    sys.stdout.write('\n')
    sys.stdout.flush()
