"""
Tests for the console progress observer.
"""

import logging

from phylosensi.core.progress_logger import ProgressLogger


class TestProgressLogger:
    """Test progress line handling."""

    def test_progress_with_counter(self, progress_stream):
        progress = ProgressLogger(stream=progress_stream)
        progress.progress("Deleting species", 3, 30)
        assert progress_stream.getvalue() == "Deleting species [3/30]  10%"
        assert progress.current_line == "Deleting species [3/30]  10%"

    def test_progress_overwrites_line(self, progress_stream):
        progress = ProgressLogger(stream=progress_stream)
        progress.progress("Step", 1, 2)
        progress.progress("Step", 2, 2)
        assert "\r" in progress_stream.getvalue()
        assert progress_stream.getvalue().endswith("Step [2/2] 100%")

    def test_progress_without_counter(self, progress_stream):
        progress = ProgressLogger(stream=progress_stream)
        progress.progress("Loading")
        assert progress_stream.getvalue() == "Loading"

    def test_complete(self, progress_stream):
        progress = ProgressLogger(stream=progress_stream)
        progress.progress("Fitting trees", 5, 5)
        progress.complete("Tree uncertainty analysis finished", count=5, item_type="successful fits")
        assert progress_stream.getvalue().endswith("✓ Tree uncertainty analysis finished (5 successful fits)\n")
        assert progress.current_line == ""

    def test_hidden_progress(self, progress_stream):
        progress = ProgressLogger(show_progress=False, stream=progress_stream)
        progress.progress("Step", 1, 2)
        progress.complete("Done")
        assert progress_stream.getvalue() == ""

    def test_verbose_logs_completion(self, progress_stream, caplog):
        progress = ProgressLogger(verbose=True, stream=progress_stream)
        with caplog.at_level(logging.INFO):
            progress.complete("Done", count=2)
        assert "✓ Done (2 items)" in caplog.text
        assert progress_stream.getvalue() == ""
