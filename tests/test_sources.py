"""Tests for input, sources, index names and grouping."""

import os

import pytest
from conftest import write_lines

from logsift.errors import InputError
from logsift.files import content_from_path
from logsift.sources import (
    Content,
    DirectoryContent,
    FileContent,
    IndexName,
    Input,
    LocalSource,
    RemoteSource,
    Source,
    group_sources,
)


class TestInput:
    """Test user input classification."""

    @pytest.mark.parametrize('value', ['http://example.com/logs/', 'https://zuul/t/a/build/x', 'httpfoo'])
    def test_http_prefix_is_url(self, value):
        assert Input.from_string(value).is_url

    @pytest.mark.parametrize('value', ['/var/log/app.log', 'logs/http', '', './https://x'])
    def test_other_strings_are_paths(self, value):
        assert not Input.from_string(value).is_url


class TestSource:
    """Test source relative identity and validation."""

    def test_relative_strips_prefix(self):
        source = LocalSource(9, '/var/log/app/job-output.txt')
        assert source.relative == 'app/job-output.txt'

    def test_relative_of_remote(self):
        url = 'https://logs.example.com/42/controller/syslog.txt'
        source = RemoteSource(len('https://logs.example.com/42/'), url)
        assert source.relative == 'controller/syslog.txt'

    def test_prefix_bounds(self):
        assert LocalSource(0, 'abc').relative == 'abc'
        assert LocalSource(3, 'abc').relative == ''

    @pytest.mark.parametrize('prefix_len', [-1, 4, 100])
    def test_invalid_prefix_rejected(self, prefix_len):
        with pytest.raises(InputError):
            LocalSource(prefix_len, 'abc')

    @pytest.mark.parametrize('name', ['favicon.ico', 'screenshot.png', 'cookies.clf', 'state.sqlite'])
    def test_invalid_extensions(self, name):
        assert not LocalSource(5, f'/tmp/{name}').is_valid()

    @pytest.mark.parametrize('name', ['job-output.txt', 'syslog', 'image.png.txt', 'db.sqlite3'])
    def test_valid_extensions(self, name):
        assert LocalSource(5, f'/tmp/{name}').is_valid()

    def test_display(self):
        assert str(LocalSource(5, '/tmp/app.log')) == 'local: app.log'
        assert str(RemoteSource(8, 'https://host/app.log')) == 'remote: host/app.log'

    def test_kind_is_required(self):
        with pytest.raises(TypeError):
            Source(0, 'app.log')

    def test_local_and_remote_differ(self):
        assert LocalSource(0, 'a') != RemoteSource(0, 'a')


class TestIndexName:
    """Test the normalization of relative identities."""

    def test_same_file_of_different_builds(self):
        first = LocalSource(len('/builds/41/'), '/builds/41/job-output.txt')
        second = RemoteSource(len('https://logs/1234/'), 'https://logs/1234/job-output.txt')
        assert IndexName.from_source(first) == IndexName.from_source(second)

    def test_leading_slash_ignored(self):
        assert IndexName.from_path('/job-output.txt') == IndexName.from_path('job-output.txt')

    def test_compression_and_rotation_suffixes(self):
        expected = IndexName.from_path('app.log')
        assert IndexName.from_path('app.log.1') == expected
        assert IndexName.from_path('app.log.2.gz') == expected
        assert IndexName.from_path('app.log-20240101') == expected
        assert IndexName.from_path('app.log.zst') == expected

    def test_numbers_removed(self):
        assert IndexName.from_path('node-1/syslog.txt') == IndexName.from_path('node-2/syslog.txt')

    def test_different_files_differ(self):
        assert IndexName.from_path('syslog.txt') != IndexName.from_path('job-output.txt')

    def test_hashable(self):
        names = {IndexName.from_path('a.log'), IndexName.from_path('a.log.1')}
        assert len(names) == 1
        assert str(names.pop()) == 'a.log'


class TestContent:
    """Test content expansion into sources."""

    def test_file_yields_single_source(self):
        source = LocalSource(5, '/tmp/app.log')
        assert list(FileContent(source).get_sources_iter()) == [source]

    def test_get_sources_filters_invalid(self, log_dir):
        write_lines(os.path.join(log_dir, 'job-output.txt'), ['line'])
        write_lines(os.path.join(log_dir, 'favicon.ico'), ['binary'])
        write_lines(os.path.join(log_dir, 'sub', 'cookies.clf'), ['cookie'])

        sources = content_from_path(log_dir).get_sources()

        assert [source.relative for source in sources] == ['job-output.txt']

    def test_get_sources_empty_is_error(self, log_dir):
        write_lines(os.path.join(log_dir, 'logo.png'), ['binary'])
        with pytest.raises(InputError):
            content_from_path(log_dir).get_sources()

    def test_directory_never_discovers_baselines(self, log_dir):
        with pytest.raises(InputError, match='need to be provided'):
            DirectoryContent(LocalSource(len(log_dir), log_dir)).discover_baselines()

    def test_remote_file_never_discovers_baselines(self):
        content = FileContent(RemoteSource(8, 'https://host/app.log'))
        with pytest.raises(InputError):
            content.discover_baselines()

    def test_empty_discovered_baselines_is_error(self, log_dir):
        path = write_lines(os.path.join(log_dir, 'app.log'), ['line'])
        with pytest.raises(InputError, match='Empty discovered baselines'):
            content_from_path(path).discover_baselines()

    def test_from_input_path(self, log_dir):
        path = write_lines(os.path.join(log_dir, 'app.log'), ['line'])
        content = Content.from_input(Input.from_string(path))
        assert isinstance(content, FileContent)
        assert content.source.relative == 'app.log'

    def test_from_input_malformed_url(self):
        with pytest.raises(InputError):
            Content.from_input(Input.from_string('http://'))


class TestGroupSources:
    """Test that grouping is a strict, order preserving partition."""

    def setup_method(self):
        self.first = [
            LocalSource(3, '/a/job-output.txt'),
            LocalSource(3, '/a/node-1/syslog.txt'),
            LocalSource(3, '/a/node-2/syslog.txt'),
        ]
        self.second = [
            LocalSource(3, '/b/syslog.txt.gz'),
            LocalSource(3, '/b/job-output.txt'),
        ]

    def _content(self, sources):
        class ListContent(Content):
            def _discover_baselines(self):
                return []

            def get_sources_iter(self):
                return iter(sources)

        return ListContent()

    def test_partition(self):
        groups = group_sources([self._content(self.first), self._content(self.second)])

        grouped = [source for sources in groups.values() for source in sources]
        assert sorted(grouped, key=str) == sorted(self.first + self.second, key=str)
        assert len(grouped) == len(self.first) + len(self.second)

    def test_groups_and_order(self):
        groups = group_sources([self._content(self.first), self._content(self.second)])

        assert list(groups) == [IndexName('job-output.txt'), IndexName('node-/syslog.txt'), IndexName('syslog.txt')]
        assert groups[IndexName('job-output.txt')] == [self.first[0], self.second[1]]
        assert groups[IndexName('node-/syslog.txt')] == [self.first[1], self.first[2]]
        assert groups[IndexName('syslog.txt')] == [self.second[0]]
