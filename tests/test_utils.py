"""Tests for environment settings and cache directory configuration."""

import tempfile
from pathlib import Path

from logsift.cli.common import resolve_model_path
from logsift.utils import (
    get_float_env,
    get_int_env,
    get_logsift_cache_base,
    get_logsift_cache_dir,
    get_str_env,
)


class TestEnvHelpers:
    """Test reading typed settings from the environment."""

    def test_int(self, monkeypatch):
        assert get_int_env('LOGSIFT_TEST_INT', 7) == 7
        monkeypatch.setenv('LOGSIFT_TEST_INT', '42')
        assert get_int_env('LOGSIFT_TEST_INT', 7) == 42
        monkeypatch.setenv('LOGSIFT_TEST_INT', 'many')
        assert get_int_env('LOGSIFT_TEST_INT', 7) == 7

    def test_float(self, monkeypatch):
        assert get_float_env('LOGSIFT_TEST_FLOAT', 0.5) == 0.5
        monkeypatch.setenv('LOGSIFT_TEST_FLOAT', '0.75')
        assert get_float_env('LOGSIFT_TEST_FLOAT', 0.5) == 0.75
        monkeypatch.setenv('LOGSIFT_TEST_FLOAT', 'half')
        assert get_float_env('LOGSIFT_TEST_FLOAT', 0.5) == 0.5

    def test_str(self, monkeypatch):
        assert get_str_env('LOGSIFT_TEST_STR', 'default') == 'default'
        monkeypatch.setenv('LOGSIFT_TEST_STR', 'value')
        assert get_str_env('LOGSIFT_TEST_STR', 'default') == 'value'


class TestLogsiftCacheDirConfig:
    """Test that LOGSIFT_CACHE_DIR is respected."""

    def test_default(self, monkeypatch):
        """Test default cache directory when no env vars are set."""
        monkeypatch.delenv('LOGSIFT_CACHE_DIR', raising=False)
        monkeypatch.delenv('XDG_CACHE_HOME', raising=False)

        assert get_logsift_cache_base() == Path.home() / '.cache' / 'logsift'

    def test_logsift_cache_dir_takes_priority(self, monkeypatch):
        with tempfile.TemporaryDirectory() as tmpdir:
            monkeypatch.setenv('LOGSIFT_CACHE_DIR', tmpdir)
            monkeypatch.setenv('XDG_CACHE_HOME', '/should/be/ignored')

            assert get_logsift_cache_base() == Path(tmpdir)

    def test_xdg_cache_home(self, monkeypatch):
        with tempfile.TemporaryDirectory() as tmpdir:
            monkeypatch.delenv('LOGSIFT_CACHE_DIR', raising=False)
            monkeypatch.setenv('XDG_CACHE_HOME', tmpdir)

            assert get_logsift_cache_base() == Path(tmpdir) / 'logsift'

    def test_cache_dir_creates_subdirectory(self, temp_cache_dir):
        result = get_logsift_cache_dir('models')
        assert result == Path(temp_cache_dir) / 'models'
        assert result.is_dir()


class TestResolveModelPath:
    """Test where MODEL arguments are read and written."""

    def test_bare_name_uses_cache(self, temp_cache_dir):
        assert resolve_model_path('nightly.model') == Path(temp_cache_dir) / 'models' / 'nightly.model'

    def test_path_is_kept(self, tmp_path):
        path = str(tmp_path / 'nightly.model')
        assert resolve_model_path(path) == Path(path)

    def test_existing_local_file_is_kept(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        (tmp_path / 'nightly.model').write_bytes(b'')
        assert resolve_model_path('nightly.model') == Path('nightly.model')
