"""Utility functions for CLI operations."""

import sys
from typing import TextIO

from cli.constants import GREEN, RESET
from common.types import ProgressEvent


class ProgressPrinter:
    """Progress callback that renders file store events as one updating line."""

    def __init__(self, stream: TextIO = sys.stdout):
        self.stream = stream
        self._active = False

    def __call__(self, event: ProgressEvent) -> None:
        self.stream.write(
            f"\r{event.file_name}: {GREEN}{event.message}{RESET}" + " " * 10
        )
        self.stream.flush()
        self._active = True

    def finish(self) -> None:
        """End the progress line, if one was written."""
        if self._active:
            self.stream.write('\n')
            self.stream.flush()
            self._active = False


def format_file_size(size_bytes: int) -> str:
    """
    Format file size in bytes to human-readable format with appropriate unit.

    Uses binary units (1024-based) and automatically selects the most
    appropriate unit (B, KiB, MiB, GiB, TiB).

    Args:
        size_bytes: File size in bytes

    Returns:
        Formatted string with size and unit (e.g., "1.50 MiB", "512 B")
    """
    if size_bytes < 1024:
        return f"{size_bytes} B"

    units = ['KiB', 'MiB', 'GiB', 'TiB']
    size = size_bytes / 1024.0

    for unit in units:
        if size < 1024.0:
            return f"{size:.2f} {unit}"
        size /= 1024.0

    return f"{size:.2f} PiB"
