import re
from pathlib import Path

import pytest
from decouple import config

from ideas import helpers

TEST_ENV = config('TEST_ENV', default='remote')


class TestHelpers:

    def test_unique_name(self):
        assert helpers.unique_name([], 'photo.json') == 'photo.json'
        assert helpers.unique_name(['photo.json'], 'photo.json') == 'photo 2.json'
        assert helpers.unique_name(['photo.json', 'photo 2.json'], 'photo.json') == 'photo 3.json'
        assert helpers.unique_name(['photo.json', 'photo 3.json'], 'photo.json') == 'photo 2.json'
        assert helpers.unique_name(['notes'], 'notes') == 'notes 2'
        assert helpers.unique_name(['.bashrc'], '.bashrc') == '.bashrc 2'
        assert helpers.unique_name(['archive.tar.gz'], 'archive.tar.gz') == 'archive.tar 2.gz'

    def test_settings_folder(self, monkeypatch, tmp_path):
        monkeypatch.setattr(helpers, 'DATA_LOCATION', tmp_path / 'Ideas')
        result = helpers.settings_folder()
        assert isinstance(result, Path)
        assert result == tmp_path / 'Ideas'
        assert result.is_dir()

    @pytest.mark.skipif(TEST_ENV != 'local', reason="Requires local filesystem")
    def test_default_locations(self):
        assert helpers.DATA_LOCATION == Path.home() / "Library" / "Application Support" / "Ideas"
        assert helpers.LOG_LOCATION == Path.home() / "Library" / "Logs" / "Ideas"

    def test_log_file_name(self):
        assert re.fullmatch(r'Ideas_\d{8}-\d{6}\.log', helpers.log_file_name())
