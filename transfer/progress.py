"""Thread-safe progress and speed reporting for a running transfer."""

import math
import threading
import time
from collections import deque
from typing import Any, Callable, Dict, Optional, Union

from common.utils import format_file_size, format_speed

SPEED_WINDOW_SECONDS = 5.0


class TransferProgress:
    """
    Counter of completed bytes for one transfer, readable at any time.

    Completion callbacks may arrive in any chunk order; the counter only
    accumulates, is capped at the total size and never decreases.
    """

    def __init__(
        self,
        name: str,
        total_size: int = 0,
        callback: Optional[Callable[["TransferProgress"], None]] = None,
    ):
        self.name = name
        self._lock = threading.Lock()
        self._total_size = total_size
        self._complete_size = 0
        self._completed_chunks = 0
        self._finished = False
        self._callback = callback
        self._start_time = time.monotonic()
        self._end_time: Optional[float] = None
        self._samples = deque([(self._start_time, 0)])

    def set_total_size(self, total_size: int) -> None:
        if total_size < 0:
            raise ValueError(f"Total size must be non-negative, got {total_size}")
        with self._lock:
            self._total_size = total_size
            self._complete_size = min(self._complete_size, total_size)

    def report_chunk_complete(self, nbytes: int) -> None:
        """
        Add a finished chunk to the counter.

        Args:
            nbytes: Bytes the chunk transferred
        """
        if nbytes < 0:
            raise ValueError(f"Chunk size must be non-negative, got {nbytes}")
        with self._lock:
            self._complete_size = min(self._complete_size + nbytes, self._total_size)
            self._completed_chunks += 1
            now = time.monotonic()
            self._samples.append((now, self._complete_size))
            while len(self._samples) > 2 and now - self._samples[0][0] > SPEED_WINDOW_SECONDS:
                self._samples.popleft()
        if self._callback is not None:
            self._callback(self)

    def mark_finished(self) -> None:
        """Record that the transfer finished successfully."""
        with self._lock:
            self._complete_size = self._total_size
            self._finished = True
            self._end_time = time.monotonic()
        if self._callback is not None:
            self._callback(self)

    def get_total_size(self, human_readable: bool = True) -> Union[str, int]:
        with self._lock:
            total = self._total_size
        return format_file_size(total) if human_readable else total

    def get_complete_size(self, human_readable: bool = True) -> Union[str, int]:
        with self._lock:
            complete = self._complete_size
        return format_file_size(complete) if human_readable else complete

    def get_complete_percent(self, digits: int = 1) -> str:
        """
        Completed share of the total as a string, e.g. "42.5".

        Rounds down, so "100.0" only appears once every byte is done. A
        zero-byte transfer reports "100.0" once finished.
        """
        with self._lock:
            total, complete, finished = self._total_size, self._complete_size, self._finished
        if total == 0:
            percent = 100.0 if finished else 0.0
        else:
            scale = 10 ** digits
            percent = math.floor(complete * 100 * scale / total) / scale
        return f"{percent:.{digits}f}"

    def get_completed_chunks(self) -> int:
        with self._lock:
            return self._completed_chunks

    def is_complete(self) -> bool:
        with self._lock:
            return self._finished or (self._total_size > 0 and self._complete_size == self._total_size)

    def get_elapsed_seconds(self) -> float:
        with self._lock:
            end = self._end_time if self._end_time is not None else time.monotonic()
        return end - self._start_time

    def get_average_speed(self, human_readable: bool = True) -> Union[str, float]:
        """Bytes per second since the transfer started."""
        elapsed = self.get_elapsed_seconds()
        with self._lock:
            complete = self._complete_size
        speed = complete / elapsed if elapsed > 0 else 0.0
        return format_speed(speed) if human_readable else speed

    def get_speed(self, human_readable: bool = True) -> Union[str, float]:
        """Bytes per second over the last few seconds."""
        with self._lock:
            first_time, first_bytes = self._samples[0]
            last_time, last_bytes = self._samples[-1]
        window = last_time - first_time
        speed = (last_bytes - first_bytes) / window if window > 0 else 0.0
        return format_speed(speed) if human_readable else speed

    def to_dict(self) -> Dict[str, Any]:
        return {
            'name': self.name,
            'total_size': self.get_total_size(False),
            'complete_size': self.get_complete_size(False),
            'complete_percent': self.get_complete_percent(),
            'completed_chunks': self.get_completed_chunks(),
            'elapsed_seconds': round(self.get_elapsed_seconds(), 3),
            'average_speed': self.get_average_speed(False),
        }

    def __str__(self) -> str:
        return (
            f"{self.name}: {self.get_complete_size()} / {self.get_total_size()} "
            f"({self.get_complete_percent()}%)"
        )
