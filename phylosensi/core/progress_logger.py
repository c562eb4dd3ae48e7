#!/usr/bin/env python3
"""
Progress reporting for resampling loops.

The resampling engine reports each finished iteration to an observer instead
of holding a global progress bar. ProgressLogger is the console observer; it
rewrites a single status line using carriage returns.
"""

import sys
import logging
from typing import IO, Optional

logger = logging.getLogger(__name__)


class ProgressLogger:
    """
    Console progress observer with line overwriting.

    Any object with ``progress(message, current, total)`` and
    ``complete(message, count, item_type)`` methods can be passed to the
    analyses in its place.
    """

    def __init__(self, show_progress: bool = True, verbose: bool = False,
                 stream: Optional[IO[str]] = None):
        """
        Initialize progress logger.

        Args:
            show_progress: Whether to show dynamic progress updates
            verbose: Route completion messages through logging instead of the console line
            stream: Text stream to write to (defaults to stdout)
        """
        self.show_progress = show_progress and not verbose
        self.verbose = verbose
        self.stream = stream if stream is not None else sys.stdout
        self.current_line = ""

    def _clear_line(self):
        if self.current_line:
            self.stream.write('\r' + ' ' * len(self.current_line) + '\r')
            self.current_line = ""

    def progress(self, message: str, current: Optional[int] = None,
                 total: Optional[int] = None, overwrite: bool = True):
        """
        Show progress message with optional counter.

        Args:
            message: Progress message to display
            current: Current iteration number (1-based)
            total: Total number of iterations
            overwrite: Whether to overwrite the previous line
        """
        if not self.show_progress:
            return

        if current is not None and total is not None:
            percent = 100 * current // total if total else 100
            progress_msg = f"{message} [{current}/{total}] {percent:3d}%"
        else:
            progress_msg = message

        if overwrite:
            self._clear_line()

        self.stream.write(progress_msg)
        self.stream.flush()

        self.current_line = progress_msg if overwrite else ""

    def complete(self, final_message: str, count: Optional[int] = None,
                 item_type: Optional[str] = None):
        """
        Finish the current progress line with a completion message.

        Args:
            final_message: Final completion message
            count: Number of items processed
            item_type: Noun describing the items (e.g. "fits")
        """
        if count is not None:
            completion_msg = f"✓ {final_message} ({count} {item_type or 'items'})"
        else:
            completion_msg = f"✓ {final_message}"

        if not self.show_progress:
            if self.verbose:
                logger.info(completion_msg)
            return

        self._clear_line()
        self.stream.write(completion_msg + "\n")
        self.stream.flush()
