"""User input, content and sources of log lines.

The user provides an Input (a path or an url) which is resolved into a
Content: a single file, a directory or a CI build. A Content expands into
Sources, the concrete locations of log lines. Sources are grouped by
IndexName so that the same kind of file coming from different runs is
trained and compared together.
"""

import logging
import re
from abc import ABC, abstractmethod
from collections.abc import Iterator
from dataclasses import dataclass
from typing import TYPE_CHECKING

from logsift.errors import InputError


if TYPE_CHECKING:
    from logsift.zuul import Build


logger = logging.getLogger(__name__)

# Files that never contain log lines
INVALID_EXTENSIONS = ('.ico', '.png', '.clf', '.sqlite')


@dataclass(frozen=True)
class Input:
    """The user input, either a local path or an url."""

    value: str
    is_url: bool

    @classmethod
    def from_string(cls, value: str) -> 'Input':
        return cls(value=value, is_url=value.startswith('http'))

    def __str__(self) -> str:
        return f'Url({self.value})' if self.is_url else f'Path({self.value})'


@dataclass(frozen=True)
class Source(ABC):
    """The location of log lines.

    Attributes:
        prefix_len: Length of the base prefix of location, removed to get the
            relative identity used for display and grouping.
        location: Absolute path or url.
    """

    prefix_len: int
    location: str

    def __post_init__(self):
        if not 0 <= self.prefix_len <= len(self.location):
            raise InputError(
                f'Invalid prefix length {self.prefix_len} for {self.location!r} (length {len(self.location)})'
            )

    @property
    @abstractmethod
    def kind(self) -> str:
        """Short name of the kind of location, used for display."""

    @property
    def relative(self) -> str:
        """The location without its base prefix."""
        return self.location[self.prefix_len :]

    def is_valid(self) -> bool:
        return not self.relative.endswith(INVALID_EXTENSIONS)

    def __str__(self) -> str:
        return f'{self.kind}: {self.relative}'


@dataclass(frozen=True)
class LocalSource(Source):
    @property
    def kind(self) -> str:
        return 'local'


@dataclass(frozen=True)
class RemoteSource(Source):
    @property
    def kind(self) -> str:
        return 'remote'


_COMPRESSION_SUFFIX = re.compile(r'\.(gz|bz2|xz|zst)$')
_ROTATION_SUFFIX = re.compile(r'([.-]\d+)+$')
_VARIABLE_PART = re.compile(r'[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}|[0-9a-f]{32,}|\d+')


@dataclass(frozen=True)
class IndexName:
    """An identifier used to group similar sources.

    Two sources get the same IndexName when their relative identities only
    differ by compression suffix, rotation suffix or numbers (build ids,
    dates, node indexes).
    """

    name: str

    @classmethod
    def from_path(cls, relative: str) -> 'IndexName':
        name = relative.lstrip('/')
        name = _COMPRESSION_SUFFIX.sub('', name)
        name = _ROTATION_SUFFIX.sub('', name)
        name = _VARIABLE_PART.sub('', name)
        return cls(name)

    @classmethod
    def from_source(cls, source: Source) -> 'IndexName':
        return cls.from_path(source.relative)

    def __str__(self) -> str:
        return self.name


class Content(ABC):
    """A logical unit of log content, local or remote."""

    @staticmethod
    def from_input(user_input: Input) -> 'Content':
        """Apply conversion rules to convert the user Input to Content."""
        logger.debug(f'Resolving {user_input}')
        if user_input.is_url:
            from logsift.urls import content_from_url

            return content_from_url(user_input.value)

        from logsift.files import content_from_path

        return content_from_path(user_input.value)

    @abstractmethod
    def _discover_baselines(self) -> list['Content']:
        pass

    @abstractmethod
    def get_sources_iter(self) -> Iterator[Source]:
        """Lazily expand the content into its sources, without filtering."""
        pass

    def discover_baselines(self) -> list['Content']:
        """Discover the nominal content to compare this content with.

        Raises:
            InputError: When baselines can't be discovered or none were found
        """
        baselines = self._discover_baselines()
        if not baselines:
            raise InputError(f'Empty discovered baselines for {self}')
        logger.debug(f'Discovered baselines for {self}: {", ".join(map(str, baselines))}')
        return baselines

    def get_sources(self) -> list[Source]:
        """Get the sources of log lines for this content.

        Raises:
            InputError: When the content has no valid source
            SourceError: When the content can't be listed
        """
        sources = [source for source in self.get_sources_iter() if source.is_valid()]
        if not sources:
            raise InputError(f'Empty discovered sources for {self}')
        return sources


@dataclass(frozen=True)
class FileContent(Content):
    source: Source

    def _discover_baselines(self) -> list[Content]:
        if isinstance(self.source, LocalSource):
            from logsift.files import discover_baselines_from_path

            return discover_baselines_from_path(self.source.location)
        raise InputError(f"Can't discover remote baselines for {self.source}, they need to be provided")

    def get_sources_iter(self) -> Iterator[Source]:
        yield self.source

    def __str__(self) -> str:
        return f'File({self.source})'


@dataclass(frozen=True)
class DirectoryContent(Content):
    source: Source

    def _discover_baselines(self) -> list[Content]:
        raise InputError(f"Can't discover directory baselines for {self.source}, they need to be provided")

    def get_sources_iter(self) -> Iterator[Source]:
        if isinstance(self.source, LocalSource):
            from logsift.files import dir_iter

            return dir_iter(self.source.location)

        from logsift.urls import httpdir_iter

        return httpdir_iter(self.source.location)

    def __str__(self) -> str:
        return f'Directory({self.source})'


@dataclass(frozen=True)
class ZuulContent(Content):
    build: 'Build'

    def _discover_baselines(self) -> list[Content]:
        return self.build.discover_baselines()

    def get_sources_iter(self) -> Iterator[Source]:
        return self.build.sources_iter()

    def __str__(self) -> str:
        return f'Zuul({self.build})'


def group_sources(baselines: list[Content]) -> dict[IndexName, list[Source]]:
    """Partition the sources of every baseline by IndexName.

    Groups are ordered by first encounter, and sources keep their encounter
    order within a group.
    """
    groups: dict[IndexName, list[Source]] = {}
    for baseline in baselines:
        for source in baseline.get_sources():
            groups.setdefault(IndexName.from_source(source), []).append(source)
    return groups
