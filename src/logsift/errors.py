"""Typed errors raised by logsift.

Every failure that a caller can report and recover from derives from
LogsiftError, so a front end only needs a single except clause.
"""


class LogsiftError(Exception):
    """Base class for logsift errors."""


class InputError(LogsiftError):
    """Invalid user input or configuration (bad url, empty baselines, ...)."""


class SourceError(LogsiftError):
    """A location could not be opened, listed or read."""

    def __init__(self, source: str, message: str):
        self.source = source
        self.message = message
        super().__init__(f'{source}: {message}')


class IndexNotFoundError(LogsiftError):
    """The model has no index able to inspect a target source."""

    def __init__(self, source: str, index_name: str):
        self.source = source
        self.index_name = index_name
        super().__init__(f'No baselines for {source} (index {index_name!r})')


class AlgorithmError(LogsiftError):
    """Failure inside the vectorization or search code."""


class ModelFormatError(LogsiftError):
    """The model file is unreadable or was written by an incompatible version."""
