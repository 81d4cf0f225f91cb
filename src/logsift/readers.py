"""Open sources of log lines.

Opening is eager, so that a missing file or a failing url is reported right
away, while reading is lazy: a LineReader yields the raw lines one at a time
and never holds the whole content in memory.
"""

import bz2
import gzip
import io
import logging
import lzma
import zlib
from collections.abc import Callable, Iterable, Iterator

import httpx
import zstandard

from logsift.errors import InputError, SourceError
from logsift.sources import LocalSource, RemoteSource, Source
from logsift.utils import get_float_env


logger = logging.getLogger(__name__)

GZIP_MAGIC = b'\x1f\x8b'
READ_CHUNK_SIZE = 65536


def get_http_timeout() -> float:
    """Timeout in seconds for remote requests, from LOGSIFT_HTTP_TIMEOUT (default 30)."""
    return get_float_env('LOGSIFT_HTTP_TIMEOUT', 30.0)


def make_http_client() -> httpx.Client:
    """Create the http client used for every remote access."""
    return httpx.Client(timeout=get_http_timeout(), follow_redirects=True)


class LineReader:
    """Iterate over the raw lines of an opened source.

    Lines are decoded as utf-8 (invalid bytes replaced) and returned without
    their line terminator.
    """

    def __init__(self, name: str, chunks: Iterable[bytes], close: Callable[[], None] | None = None):
        self.name = name
        self._chunks = chunks
        self._close = close

    def __iter__(self) -> Iterator[str]:
        try:
            for raw in split_lines(self._chunks):
                yield raw.decode('utf-8', errors='replace').rstrip('\r')
        except (OSError, EOFError, zlib.error, lzma.LZMAError, zstandard.ZstdError) as e:
            raise SourceError(self.name, f'read failed: {e}') from e
        except httpx.HTTPError as e:
            raise SourceError(self.name, f'download failed: {e}') from e
        finally:
            self.close()

    def close(self) -> None:
        if self._close is not None:
            self._close()
            self._close = None

    def __enter__(self) -> 'LineReader':
        return self

    def __exit__(self, *exc) -> None:
        self.close()


def split_lines(chunks: Iterable[bytes]) -> Iterator[bytes]:
    """Re-split a stream of byte chunks on newlines."""
    buffer = bytearray()
    for chunk in chunks:
        start = len(buffer)
        buffer += chunk
        end = buffer.rfind(b'\n', start)
        if end < 0:
            continue
        yield from bytes(buffer[:end]).split(b'\n')
        del buffer[: end + 1]
    # Last line without newline
    if buffer:
        yield bytes(buffer)


def _read_chunks(fileobj: io.IOBase) -> Iterator[bytes]:
    while chunk := fileobj.read(READ_CHUNK_SIZE):
        yield chunk


def _gunzip_chunks(chunks: Iterable[bytes]) -> Iterator[bytes]:
    decompressor = zlib.decompressobj(16 + zlib.MAX_WBITS)
    for chunk in chunks:
        yield decompressor.decompress(chunk)
    yield decompressor.flush()


def open_local(path: str) -> LineReader:
    """Open a local file, transparently decompressing .gz, .bz2, .xz and .zst files.

    Raises:
        SourceError: If the file can't be opened
    """
    try:
        if path.endswith('.gz'):
            fileobj = gzip.open(path, 'rb')
        elif path.endswith('.bz2'):
            fileobj = bz2.open(path, 'rb')
        elif path.endswith('.xz'):
            fileobj = lzma.open(path, 'rb')
        elif path.endswith('.zst'):
            raw = open(path, 'rb')
            reader = zstandard.ZstdDecompressor().stream_reader(raw, read_across_frames=True, closefd=True)
            fileobj = io.BufferedReader(reader)
        else:
            fileobj = open(path, 'rb')
    except OSError as e:
        raise SourceError(path, f"can't open file: {e.strerror or e}") from e

    return LineReader(path, _read_chunks(fileobj), fileobj.close)


def open_remote(prefix_len: int, url: str) -> LineReader:
    """Start downloading an url.

    Gzip payloads served without a Content-Encoding header (e.g. a raw
    job-output.txt.gz) are decompressed on the fly.

    Raises:
        SourceError: On connection failure or an http error status
    """
    logger.debug(f'Fetching {url[prefix_len:]} from {url[:prefix_len]}')
    client = make_http_client()
    try:
        response = client.send(client.build_request('GET', url), stream=True)
    except httpx.HTTPError as e:
        client.close()
        raise SourceError(url, f'request failed: {e}') from e

    def close():
        response.close()
        client.close()

    if response.status_code >= 400:
        close()
        raise SourceError(url, f'http status {response.status_code}')

    return LineReader(url, _remote_chunks(response), close)


def _remote_chunks(response: httpx.Response) -> Iterator[bytes]:
    chunks = response.iter_bytes(READ_CHUNK_SIZE)
    first = next(chunks, b'')
    if first.startswith(GZIP_MAGIC):
        yield from _gunzip_chunks(_prepend(first, chunks))
    else:
        yield from _prepend(first, chunks)


def _prepend(first: bytes, chunks: Iterator[bytes]) -> Iterator[bytes]:
    yield first
    yield from chunks


def open_source(source: Source) -> LineReader:
    """Open a source of log lines.

    Raises:
        SourceError: If the source can't be opened
        InputError: For a kind of source that can't be read
    """
    if isinstance(source, LocalSource):
        return open_local(source.location)
    if isinstance(source, RemoteSource):
        return open_remote(source.prefix_len, source.location)
    raise InputError(f'Unsupported source {source!r}')
