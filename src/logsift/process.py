"""Streaming engine: feed sources into a chunk index and score target lines.

Lines are processed in chunks so that the vectorization and search costs are
amortized over many lines, while the sources are only read once, lazily.
"""

import logging
from collections import deque
from collections.abc import Iterable, Iterator
from dataclasses import dataclass

from logsift.chunk_index import ChunkIndex
from logsift.errors import AlgorithmError
from logsift.models import Anomaly, AnomalyContext
from logsift.utils import get_float_env, get_int_env


logger = logging.getLogger(__name__)

DEFAULT_THRESHOLD = 0.3
DEFAULT_CONTEXT_LINES = 3
DEFAULT_CHUNK_SIZE = 512
# A chunk ends after chunk_size * CHUNK_LINES_FACTOR lines, even with few targets
CHUNK_LINES_FACTOR = 8


@dataclass(frozen=True)
class ProcessConfig:
    """Anomaly selection policy.

    Attributes:
        threshold: A line is an anomaly when its distance is above this value
        context: Number of lines kept before and after each anomaly
        chunk_size: Number of target lines searched at once. A chunk also
            ends after chunk_size * CHUNK_LINES_FACTOR lines have been read.
    """

    threshold: float = DEFAULT_THRESHOLD
    context: int = DEFAULT_CONTEXT_LINES
    chunk_size: int = DEFAULT_CHUNK_SIZE

    @classmethod
    def from_env(cls) -> 'ProcessConfig':
        """Read LOGSIFT_THRESHOLD, LOGSIFT_CONTEXT_LINES and LOGSIFT_CHUNK_SIZE."""
        return cls(
            threshold=get_float_env('LOGSIFT_THRESHOLD', DEFAULT_THRESHOLD),
            context=max(0, get_int_env('LOGSIFT_CONTEXT_LINES', DEFAULT_CONTEXT_LINES)),
            chunk_size=max(1, get_int_env('LOGSIFT_CHUNK_SIZE', DEFAULT_CHUNK_SIZE)),
        )


class ChunkTrainer:
    """Add baseline sources to a chunk index.

    Each add() call reads one opened source to the end and commits the lines
    that were not already seen in a previous source as a single batch.
    """

    def __init__(self, index: ChunkIndex):
        self.index = index
        self.sources = 0
        self.lines = 0
        self._known: set[str] = set()
        self._completed = False

    def add(self, reader: Iterable[str]) -> None:
        if self._completed:
            raise AlgorithmError('Trainer is already completed')

        batch = []
        for line in reader:
            token = self.index.tokenize(line)
            if token and token not in self._known:
                self._known.add(token)
                batch.append(token)

        self.sources += 1
        if batch:
            self.index.add(batch)
            self.lines += len(batch)

    def complete(self) -> None:
        """Finalize the training, the index is read-only afterward."""
        self._completed = True
        self._known.clear()
        logger.debug(f'Trained {self.index.describe()} from {self.sources} sources')


class _Pending:
    """An anomaly waiting for its after context."""

    __slots__ = ('before', 'anomaly', 'after')

    def __init__(self, before: list[str], anomaly: Anomaly, after: list[str]):
        self.before = before
        self.anomaly = anomaly
        self.after = after

    def to_context(self) -> AnomalyContext:
        return AnomalyContext(before=self.before, anomaly=self.anomaly, after=self.after)


class ChunkProcessor:
    """Iterate over the anomalies of an opened target source.

    Empty lines (once tokenized) and lines already scored earlier in the
    source are skipped. Anomalies are produced in line order.
    """

    def __init__(self, reader: Iterable[str], index: ChunkIndex, config: ProcessConfig | None = None):
        self.reader = reader
        self.index = index
        self.config = config or ProcessConfig()

    def __iter__(self) -> Iterator[AnomalyContext]:
        context = self.config.context
        history: deque[str] = deque(maxlen=context)
        chunk_lines: list[str] = []
        targets: list[tuple[int, str]] = []
        chunk_start = 0
        pending: deque[_Pending] = deque()
        seen: set[str] = set()
        max_chunk_lines = self.config.chunk_size * CHUNK_LINES_FACTOR

        for line in self.reader:
            for waiting in pending:
                if len(waiting.after) < context:
                    waiting.after.append(line)
            while pending and len(pending[0].after) >= context:
                yield pending.popleft().to_context()

            token = self.index.tokenize(line)
            if token and token not in seen:
                seen.add(token)
                targets.append((len(chunk_lines), token))
            chunk_lines.append(line)

            if len(targets) >= self.config.chunk_size or len(chunk_lines) >= max_chunk_lines:
                if targets:
                    pending.extend(self._score(chunk_start, chunk_lines, targets, history))
                history.extend(chunk_lines)
                chunk_start += len(chunk_lines)
                chunk_lines = []
                targets = []

        if targets:
            pending.extend(self._score(chunk_start, chunk_lines, targets, history))
        for waiting in pending:
            yield waiting.to_context()

    def _score(
        self,
        chunk_start: int,
        chunk_lines: list[str],
        targets: list[tuple[int, str]],
        history: deque[str],
    ) -> list[_Pending]:
        context = self.config.context
        distances = self.index.search([token for _, token in targets])
        if len(distances) != len(targets):
            raise AlgorithmError(f'Search returned {len(distances)} distances for {len(targets)} lines')

        found = []
        for (offset, _), distance in zip(targets, distances):
            if distance <= self.config.threshold:
                continue
            before = chunk_lines[max(0, offset - context) : offset]
            if len(before) < context and history:
                missing = context - len(before)
                before = list(history)[max(0, len(history) - missing) :] + before
            anomaly = Anomaly(distance=float(distance), pos=chunk_start + offset, line=chunk_lines[offset])
            found.append(_Pending(before, anomaly, chunk_lines[offset + 1 : offset + 1 + context]))

        logger.debug(f'Scored {len(targets)} lines from line {chunk_start}: {len(found)} anomalies')
        return found
