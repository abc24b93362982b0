import json
import logging

import pytest

from ideas.cli import ideascli
from ideas.cli.ideascli import IdeasCli


class TestIdeasCli:
    DEFAULT_SETTINGS = dict(IdeasCli.SETTINGS)

    @pytest.fixture(autouse=True)
    def _settings(self, tmp_path):
        self.conf = tmp_path / 'conf.json'
        self.conf.write_text('{}')
        self.logs = tmp_path / 'logs'
        self.logs.mkdir()
        self.bundle = tmp_path / 'Note.ideas'
        yield
        IdeasCli.SETTINGS.clear()
        IdeasCli.SETTINGS.update(TestIdeasCli.DEFAULT_SETTINGS)
        root = logging.getLogger()
        for handler in root.handlers[:]:
            if isinstance(handler, logging.FileHandler):
                root.removeHandler(handler)
                handler.close()

    def _run(self, *args):
        ideascli.main(['--config', str(self.conf), '--log-dir', str(self.logs)] + [str(arg) for arg in args])

    def test_new_and_show(self, capsys):
        self._run('new', self.bundle, '--text', 'First idea')
        assert (self.bundle / 'Text.rtf').is_file()
        capsys.readouterr()

        self._run('show', self.bundle)
        assert capsys.readouterr().out == 'First idea\n'

    def test_new_existing(self):
        self._run('new', self.bundle)
        with pytest.raises(SystemExit) as e:
            self._run('new', self.bundle)
        assert e.value.code == 5

    def test_set_text_from_file(self, tmp_path, capsys):
        self._run('new', self.bundle)
        source = tmp_path / 'text.txt'
        source.write_text('From a file\n')
        self._run('set-text', self.bundle, '--from-file', source)
        capsys.readouterr()

        self._run('show', self.bundle)
        assert capsys.readouterr().out == 'From a file\n'

    def test_attach_and_list(self, tmp_path, capsys):
        source = tmp_path / 'photo.json'
        source.write_bytes(b'{"a": 1}')
        self._run('new', self.bundle)
        self._run('attach', self.bundle, source)
        self._run('attach', self.bundle, source)
        capsys.readouterr()

        self._run('list', self.bundle)
        lines = capsys.readouterr().out.splitlines()
        assert lines == [
            'photo 2.json\t8\tapplication/json\tapplication-json',
            'photo.json\t8\tapplication/json\tapplication-json',
        ]

    def test_attach_replacing(self, tmp_path):
        source = tmp_path / 'photo.json'
        source.write_bytes(b'{}')
        self._run('new', self.bundle)
        self._run('attach', self.bundle, source)
        self._run('--unique-attachment-names', '0', 'attach', self.bundle, source, '--name', 'photo.json')
        assert sorted(p.name for p in (self.bundle / 'Attachments').iterdir()) == ['photo.json']

    @pytest.mark.parametrize('setting, expected', [
        (1, ['photo 2.json', 'photo.json']),
        (0, ['photo.json']),
    ])
    def test_attach_numeric_setting(self, tmp_path, setting, expected):
        self.conf.write_text(json.dumps({'unique_attachment_names': setting}))
        source = tmp_path / 'photo.json'
        source.write_bytes(b'{}')
        self._run('new', self.bundle)
        self._run('attach', self.bundle, source)
        self._run('attach', self.bundle, source)
        assert sorted(p.name for p in (self.bundle / 'Attachments').iterdir()) == expected

    def test_attach_missing_file(self, tmp_path):
        self._run('new', self.bundle)
        with pytest.raises(SystemExit) as e:
            self._run('attach', self.bundle, tmp_path / 'missing.png')
        assert e.value.code == 6

    def test_detach_and_extract(self, tmp_path):
        source = tmp_path / 'notes.txt'
        source.write_bytes(b'some notes')
        self._run('new', self.bundle)
        self._run('attach', self.bundle, source)

        self._run('extract', self.bundle, 'notes.txt', tmp_path / 'out.txt')
        assert (tmp_path / 'out.txt').read_bytes() == b'some notes'

        self._run('detach', self.bundle, 'notes.txt')
        assert (self.bundle / 'Attachments').is_dir()
        assert list((self.bundle / 'Attachments').iterdir()) == []

        with pytest.raises(SystemExit) as e:
            self._run('detach', self.bundle, 'notes.txt')
        assert e.value.code == 7

        with pytest.raises(SystemExit) as e:
            self._run('extract', self.bundle, 'notes.txt', tmp_path / 'out.txt')
        assert e.value.code == 8

    def test_open_missing(self):
        with pytest.raises(SystemExit) as e:
            self._run('show', self.bundle)
        assert e.value.code == 3

    def test_merge_settings(self):
        self.conf.write_text(json.dumps({'unique_attachment_names': '0', 'unknown': 'ignored'}))
        IdeasCli.merge_settings(str(self.conf))
        assert IdeasCli.SETTINGS['unique_attachment_names'] == '0'
        assert 'unknown' not in IdeasCli.SETTINGS

    def test_invalid_config(self):
        self.conf.write_text('{not json')
        with pytest.raises(SystemExit) as e:
            self._run('show', self.bundle)
        assert e.value.code == 20

    def test_missing_config(self, tmp_path):
        with pytest.raises(SystemExit) as e:
            ideascli.main(['--config', str(tmp_path / 'missing.json'), '--log-dir', str(self.logs),
                           'show', str(self.bundle)])
        assert e.value.code == 2
