"""Remote files and http directory listings."""

import logging
import re
from collections.abc import Iterator

import httpx
from bs4 import BeautifulSoup

from logsift import readers
from logsift.errors import InputError, SourceError
from logsift.sources import Content, DirectoryContent, FileContent, RemoteSource, Source


logger = logging.getLogger(__name__)

# Zuul build urls, either the api endpoint or the web page of a build
ZUUL_API_BUILD = re.compile(r'^(?P<api>https?://.+/api/(?:tenant/[^/]+/)?)build/(?P<uuid>[0-9a-f]{32})/?$')
ZUUL_WEB_BUILD = re.compile(r'^(?P<base>https?://.+?/)t/(?P<tenant>[^/]+)/build/(?P<uuid>[0-9a-f]{32})/?$')


def parse_url(value: str) -> httpx.URL:
    """Validate a user provided url.

    Raises:
        InputError: If the url is malformed or not http(s)
    """
    try:
        url = httpx.URL(value)
    except httpx.InvalidURL as e:
        raise InputError(f'Invalid url {value!r}: {e}') from e
    if url.scheme not in ('http', 'https') or not url.host:
        raise InputError(f'Invalid url {value!r}: expected http(s)://host/...')
    return url


def content_from_url(value: str) -> Content:
    """Create a Content for a url.

    Raises:
        InputError: If the url is malformed
    """
    url = str(parse_url(value))

    if match := ZUUL_API_BUILD.match(url):
        from logsift.zuul import Build

        return Build.from_url(match['api'], match['uuid']).as_content()
    if match := ZUUL_WEB_BUILD.match(url):
        from logsift.zuul import Build

        api = f'{match["base"]}api/tenant/{match["tenant"]}/'
        return Build.from_url(api, match['uuid']).as_content()

    if url.endswith('/'):
        return DirectoryContent(RemoteSource(len(url), url))
    return FileContent(RemoteSource(url.rfind('/') + 1, url))


def list_links(client: httpx.Client, url: str) -> list[str]:
    """Return the absolute links of an html directory listing page.

    Raises:
        SourceError: If the page can't be fetched
    """
    try:
        response = client.get(url)
    except httpx.HTTPError as e:
        raise SourceError(url, f'listing failed: {e}') from e
    if response.status_code >= 400:
        raise SourceError(url, f'listing failed: http status {response.status_code}')

    base = response.url
    links = []
    for anchor in BeautifulSoup(response.text, 'html.parser').find_all('a', href=True):
        href = anchor['href'].split('#', 1)[0].strip()
        if href:
            links.append(str(base.join(href)))
    return links


def httpdir_iter(root: str) -> Iterator[Source]:
    """Recursively crawl an http directory listing.

    Only links below root are followed, query strings (sort links) are
    ignored and every page is visited once.

    Raises:
        SourceError: If a listing page can't be fetched
    """
    if not root.endswith('/'):
        root += '/'
    prefix_len = len(root)
    visited = {root}
    pending = [root]

    with readers.make_http_client() as client:
        while pending:
            url = pending.pop(0)
            logger.debug(f'Listing {url}')
            for link in list_links(client, url):
                if not link.startswith(root) or '?' in link or link in visited:
                    continue
                visited.add(link)
                if link.endswith('/'):
                    pending.append(link)
                else:
                    yield RemoteSource(prefix_len, link)
