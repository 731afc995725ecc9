"""
Progress reporting utilities for regsweep.

Provides consistent progress reporting that respects piping and redirection.
"""

import sys
import os
from typing import Optional
from enum import Enum


class LogLevel(Enum):
    """Log levels for progress messages."""
    INFO = 1
    SUCCESS = 2


class ProgressReporter:
    """Handles progress reporting to stderr while keeping stdout clean for data."""

    colors = {
        'reset': '\033[0m',
        'red': '\033[31m',
        'green': '\033[32m',
    }

    def __init__(self, enabled: Optional[bool] = None, use_colors: Optional[bool] = None):
        """
        Initialize progress reporter.

        Args:
            enabled: Explicitly enable/disable progress. None = auto-detect
            use_colors: Use ANSI colors in output
        """
        if enabled is None:
            # Auto-detect: show progress if stderr is a terminal
            self.enabled = sys.stderr.isatty()
        else:
            self.enabled = enabled

        if use_colors is None:
            self.use_colors = sys.stderr.isatty() and os.environ.get('NO_COLOR') is None
        else:
            self.use_colors = use_colors

    def _colorize(self, text: str, color: str) -> str:
        """Add color to text if colors are enabled."""
        if self.use_colors and color in self.colors:
            return f"{self.colors[color]}{text}{self.colors['reset']}"
        return text

    def __call__(self, message: str, level: LogLevel = LogLevel.INFO):
        """
        Output progress message to stderr if enabled.

        Args:
            message: Progress message to display
            level: Log level for the message
        """
        if not self.enabled:
            return

        if level == LogLevel.SUCCESS:
            message = self._colorize(f"✓ {message}", 'green')

        print(message, file=sys.stderr, flush=True)

    def error(self, message: str):
        """Always output errors to stderr."""
        print(self._colorize(f"ERROR: {message}", 'red'), file=sys.stderr, flush=True)

    def success(self, message: str):
        """Output success message if enabled."""
        if self.enabled:
            self(message, level=LogLevel.SUCCESS)


# Global progress reporter instance
_progress = None


def get_progress(enabled: Optional[bool] = None) -> ProgressReporter:
    """
    Get the global progress reporter.

    Args:
        enabled: Override auto-detection of progress display

    Returns:
        ProgressReporter instance
    """
    global _progress
    if _progress is None or enabled is not None:
        _progress = ProgressReporter(enabled)
    return _progress


# Environment variable override
if os.environ.get('REGSWEEP_PROGRESS') == '0':
    _progress = ProgressReporter(enabled=False)
elif os.environ.get('REGSWEEP_PROGRESS') == '1':
    _progress = ProgressReporter(enabled=True)
