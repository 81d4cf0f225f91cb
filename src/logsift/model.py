"""Baseline model: one trained index per group of similar sources.

Model file format:
- 8 bytes magic: b'LOGSIFT\\0'
- 2 bytes big-endian MODEL_FORMAT_VERSION
- a zstandard frame (fast level) containing the pickled Model
"""

import logging
import pickle
import struct
import time
from collections.abc import Iterator
from datetime import datetime
from pathlib import Path
from typing import TypeVar

import zstandard

from logsift.chunk_index import ChunkIndex, IndexAlgorithm
from logsift.errors import IndexNotFoundError, ModelFormatError, SourceError
from logsift.models import AnomalyContext, LogReport, Report, SourceFailure
from logsift.process import ChunkProcessor, ChunkTrainer, ProcessConfig
from logsift.readers import open_source
from logsift.sources import Content, IndexName, Source, group_sources
from logsift.utils import debug_or_progress


logger = logging.getLogger(__name__)

MODEL_MAGIC = b'LOGSIFT\0'
# Increment when the pickled structure changes
MODEL_FORMAT_VERSION = 1
COMPRESSION_LEVEL = 1

K = TypeVar('K')
V = TypeVar('V')


class Index:
    """A chunk index trained from the sources of one group."""

    def __init__(self, index: ChunkIndex, train_time: float, sources: int = 0):
        self.index = index
        self.train_time = train_time
        self.sources = sources

    @classmethod
    def train(cls, sources: list[Source], index: ChunkIndex) -> 'Index':
        """Train an index from sources, in order.

        Raises:
            SourceError: If a source can't be opened or read; nothing is kept
        """
        start_time = time.time()
        trainer = ChunkTrainer(index)
        for source in sources:
            logger.debug(f'Adding {source}')
            with open_source(source) as reader:
                trainer.add(reader)
        trainer.complete()
        return cls(index, time.time() - start_time, len(sources))

    def inspect(
        self, source: Source, show_progress: bool = False, config: ProcessConfig | None = None
    ) -> Iterator[AnomalyContext]:
        """Lazily search the anomalies of a source.

        The source is opened right away. When that fails, the returned
        iterator raises the SourceError on its first step.
        """
        debug_or_progress(show_progress, f'Inspecting {source}')
        try:
            reader = open_source(source)
        except SourceError as e:
            return _failed(e)
        return iter(ChunkProcessor(reader, self.index, config or ProcessConfig.from_env()))


def _failed(error: Exception) -> Iterator[AnomalyContext]:
    raise error
    yield


def lookup_or_single(mapping: dict[K, V], key: K) -> V | None:
    """Get a value, or the only value of the mapping when the key is missing.

    This is useful to compare two files that don't share the same index name.
    """
    value = mapping.get(key)
    if value is None and len(mapping) == 1:
        return next(iter(mapping.values()))
    return value


class Model:
    """An archive of baselines used to search anomalies."""

    def __init__(self, created_at: datetime, baselines: list[Content], indexes: dict[IndexName, Index]):
        self.created_at = created_at
        self.baselines = baselines
        self.indexes = indexes

    @classmethod
    def train(cls, baselines: list[Content], algorithm: IndexAlgorithm, show_progress: bool = False) -> 'Model':
        """Create a model from baselines.

        Sources are grouped by IndexName and each group gets its own index,
        created empty from algorithm.

        Raises:
            InputError: If a baseline has no source
            SourceError: If a baseline source can't be read
        """
        created_at = datetime.now()
        indexes: dict[IndexName, Index] = {}
        for index_name, sources in group_sources(baselines).items():
            debug_or_progress(
                show_progress, f'Loading index {index_name} with {", ".join(str(source) for source in sources)}'
            )
            indexes[index_name] = Index.train(sources, algorithm.new())

        logger.info(f'Trained {len(indexes)} indexes from {len(baselines)} baselines')
        return cls(created_at, baselines, indexes)

    def get_index(self, source: Source) -> Index | None:
        """Get the matching index for a given source."""
        return lookup_or_single(self.indexes, IndexName.from_source(source))

    def report(self, target: Content, show_progress: bool = False, config: ProcessConfig | None = None) -> Report:
        """Inspect every source of the target.

        A source that can't be read is recorded in the report errors, the
        other sources are still inspected.

        Raises:
            IndexNotFoundError: If a target source has no matching index
            InputError: If the target has no source
        """
        config = config or ProcessConfig.from_env()
        created_at = datetime.now()
        targets: list[LogReport] = []
        errors: list[SourceFailure] = []
        for source in target.get_sources():
            start_time = time.time()
            index_name = IndexName.from_source(source)
            index = self.get_index(source)
            if index is None:
                raise IndexNotFoundError(str(source), str(index_name))

            try:
                anomalies = list(index.inspect(source, show_progress, config))
            except SourceError as e:
                logger.warning(f'Failed to inspect {source}: {e.message}')
                errors.append(SourceFailure(source=str(source), message=e.message))
                continue

            if anomalies:
                targets.append(
                    LogReport(
                        source=str(source),
                        index_name=str(index_name),
                        test_time=time.time() - start_time,
                        anomalies=anomalies,
                    )
                )

        return Report(
            created_at=created_at,
            target=str(target),
            baselines=[str(baseline) for baseline in self.baselines],
            targets=targets,
            errors=errors,
        )

    def save(self, path: str | Path) -> None:
        """Write the model to a compressed file."""
        path = Path(path)
        logger.info(f'Saving model to {path}')
        payload = pickle.dumps(self, protocol=pickle.HIGHEST_PROTOCOL)
        compressed = zstandard.ZstdCompressor(level=COMPRESSION_LEVEL).compress(payload)
        try:
            with open(path, 'wb') as f:
                f.write(MODEL_MAGIC)
                f.write(struct.pack('>H', MODEL_FORMAT_VERSION))
                f.write(compressed)
        except OSError as e:
            raise SourceError(str(path), f"can't write model: {e.strerror or e}") from e

    @classmethod
    def load(cls, path: str | Path) -> 'Model':
        """Read a model written by save().

        Raises:
            SourceError: If the file can't be read
            ModelFormatError: If the file isn't a model of this version
        """
        path = Path(path)
        logger.info(f'Loading model from {path}')
        try:
            data = path.read_bytes()
        except OSError as e:
            raise SourceError(str(path), f"can't read model: {e.strerror or e}") from e

        header_size = len(MODEL_MAGIC) + 2
        if len(data) < header_size or not data.startswith(MODEL_MAGIC):
            raise ModelFormatError(f'{path}: not a logsift model')
        (version,) = struct.unpack('>H', data[len(MODEL_MAGIC) : header_size])
        if version != MODEL_FORMAT_VERSION:
            raise ModelFormatError(
                f'{path}: model format version {version} is not supported (expected {MODEL_FORMAT_VERSION})'
            )

        try:
            model = pickle.loads(zstandard.ZstdDecompressor().decompress(data[header_size:]))
        except (zstandard.ZstdError, pickle.UnpicklingError, EOFError, AttributeError, ImportError) as e:
            raise ModelFormatError(f"{path}: can't load model: {e}") from e
        if not isinstance(model, cls):
            raise ModelFormatError(f'{path}: unexpected content {type(model).__name__}')
        return model
