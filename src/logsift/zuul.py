"""Zuul CI builds.

A build is resolved through the Zuul REST api. Its logs are the files of the
build log_url directory listing, and its baselines are the latest successful
builds of the same job, project and branch.
"""

import logging
from collections.abc import Iterator
from dataclasses import dataclass

import httpx

from logsift import readers
from logsift.errors import InputError, SourceError
from logsift.sources import Content, Source, ZuulContent
from logsift.urls import httpdir_iter
from logsift.utils import get_int_env


logger = logging.getLogger(__name__)


def get_baseline_limit() -> int:
    """Number of successful builds used as baselines, from LOGSIFT_BASELINE_LIMIT (default 1)."""
    return max(1, get_int_env('LOGSIFT_BASELINE_LIMIT', 1))


def _get_json(url: str, params: dict | None = None):
    with readers.make_http_client() as client:
        try:
            response = client.get(url, params=params)
        except httpx.HTTPError as e:
            raise SourceError(url, f'zuul api request failed: {e}') from e
    if response.status_code >= 400:
        raise SourceError(url, f'zuul api returned http status {response.status_code}')
    try:
        return response.json()
    except ValueError as e:
        raise InputError(f'{url}: invalid zuul api response: {e}') from e


@dataclass(frozen=True)
class Build:
    """A Zuul build."""

    api: str
    uuid: str
    job_name: str
    project: str
    branch: str
    result: str
    log_url: str

    @classmethod
    def from_json(cls, api: str, data: dict) -> 'Build':
        """Create a Build from a build object of the Zuul api.

        Raises:
            InputError: If a mandatory attribute is missing
        """
        # Zuul >= 10 nests the project and branch in a ref object
        ref = data.get('ref') or data
        try:
            return cls(
                api=api,
                uuid=data['uuid'],
                job_name=data['job_name'],
                project=ref['project'],
                branch=ref.get('branch') or '',
                result=data.get('result') or 'UNKNOWN',
                log_url=data.get('log_url') or '',
            )
        except (KeyError, TypeError) as e:
            raise InputError(f'Invalid zuul build object, missing {e}') from e

    @classmethod
    def from_url(cls, api: str, uuid: str) -> 'Build':
        """Fetch a build from the api."""
        if not api.endswith('/'):
            api += '/'
        return cls.from_json(api, _get_json(f'{api}build/{uuid}'))

    def as_content(self) -> Content:
        return ZuulContent(self)

    def discover_baselines(self) -> list[Content]:
        """Return the latest successful builds of the same job, project and branch."""
        limit = get_baseline_limit()
        params = {
            'job_name': self.job_name,
            'project': self.project,
            'branch': self.branch,
            'result': 'SUCCESS',
            # The build itself may be part of the result
            'limit': limit + 1,
        }
        builds = _get_json(f'{self.api}builds', params)
        if not isinstance(builds, list):
            raise InputError(f'{self.api}builds: expected a list of builds')

        baselines: list[Content] = []
        for data in builds:
            build = Build.from_json(self.api, data)
            if build.uuid == self.uuid or not build.log_url:
                continue
            baselines.append(build.as_content())
            if len(baselines) == limit:
                break
        logger.debug(f'Found {len(baselines)} baseline builds for {self}')
        return baselines

    def sources_iter(self) -> Iterator[Source]:
        """List the log files of the build."""
        if not self.log_url:
            raise SourceError(str(self), 'build has no log_url')
        return httpdir_iter(self.log_url)

    def __str__(self) -> str:
        return f'{self.job_name} {self.uuid[:7]} ({self.result})'
