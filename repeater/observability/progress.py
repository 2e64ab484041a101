"""
Progress bar for dispatched requests, rendered on stderr.
"""

import sys
from typing import Optional, TextIO

from tqdm import tqdm

from repeater.configuration import PROGRESS_BAR_FORMAT


class ProgressReporter:
    """Shared completion counter with a progress bar over the whole plan."""

    def __init__(self, total: int, enabled: bool = True, stream: Optional[TextIO] = None):
        self.total = total
        self.completed = 0
        self._bar = tqdm(
            total=total,
            file=stream or sys.stderr,
            bar_format=PROGRESS_BAR_FORMAT,
            dynamic_ncols=True,
            disable=not enabled,
        )

    def increment(self) -> None:
        """Count one finished request."""
        self.completed += 1
        self._bar.update(1)

    def close(self) -> None:
        self._bar.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
