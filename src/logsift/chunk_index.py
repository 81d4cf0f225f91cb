"""Search algorithms working on chunks of lines instead of individual lines.

The set of algorithms is closed: IndexAlgorithm names every variant and is the
value passed to Model.train to pick one.
"""

from abc import ABC, abstractmethod
from enum import Enum

import numpy as np

from logsift import tokenizer, vectorizer
from logsift.errors import AlgorithmError, InputError


class ChunkIndex(ABC):
    """Base class for the chunk index algorithms."""

    @property
    @abstractmethod
    def algorithm(self) -> 'IndexAlgorithm':
        """The variant of this index."""
        pass

    @abstractmethod
    def tokenize(self, line: str) -> str:
        """Normalize a raw line before it is added or searched."""
        pass

    @abstractmethod
    def add(self, baselines: list[str]) -> None:
        """Store a batch of normalized baseline lines."""
        pass

    @abstractmethod
    def search(self, targets: list[str]) -> np.ndarray:
        """Return the distance of each normalized target line to the baselines."""
        pass

    def describe(self) -> str:
        return self.algorithm.value


class HashingTrickIndex(ChunkIndex):
    """Nearest neighbor search over hashing-trick feature matrices.

    Every add() call appends one matrix, so an index trained from three
    sources holds three matrices, in training order.
    """

    def __init__(self):
        self.baselines: list[vectorizer.FeaturesMatrix] = []

    @property
    def algorithm(self) -> 'IndexAlgorithm':
        return IndexAlgorithm.HASHING_TRICK

    def tokenize(self, line: str) -> str:
        return tokenizer.tokenize(line)

    def add(self, baselines: list[str]) -> None:
        try:
            self.baselines.append(vectorizer.vectorize(baselines))
        except ValueError as e:
            raise AlgorithmError(f'Failed to vectorize {len(baselines)} baseline lines: {e}') from e

    def search(self, targets: list[str]) -> np.ndarray:
        try:
            return vectorizer.nearest_distance(self.baselines, targets)
        except ValueError as e:
            raise AlgorithmError(f'Failed to search {len(targets)} lines: {e}') from e

    @property
    def line_count(self) -> int:
        return sum(matrix.shape[0] for matrix in self.baselines)

    def describe(self) -> str:
        return f'{self.algorithm.value} ({len(self.baselines)} matrices, {self.line_count} lines)'


class NoopIndex(ChunkIndex):
    """An index that never finds anything, for testing purpose."""

    @property
    def algorithm(self) -> 'IndexAlgorithm':
        return IndexAlgorithm.NOOP

    def tokenize(self, line: str) -> str:
        return line

    def add(self, baselines: list[str]) -> None:
        pass

    def search(self, targets: list[str]) -> np.ndarray:
        return np.zeros(len(targets), dtype=np.float32)


class IndexAlgorithm(str, Enum):
    """Available chunk index algorithms."""

    HASHING_TRICK = 'hashing-trick'
    NOOP = 'noop'

    def new(self) -> ChunkIndex:
        """Create an empty index for this algorithm."""
        if self is IndexAlgorithm.HASHING_TRICK:
            return HashingTrickIndex()
        return NoopIndex()

    @classmethod
    def from_string(cls, value: str) -> 'IndexAlgorithm':
        try:
            return cls(value)
        except ValueError:
            choices = ', '.join(a.value for a in cls)
            raise InputError(f'Unknown algorithm {value!r}, expected one of: {choices}')
