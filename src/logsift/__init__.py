"""logsift - find the interesting lines of a log by comparing it with known-good runs."""

from logsift.__version__ import __version__


__all__ = ['__version__']
