from unittest import mock

import pytest

from ideas.document.model.entry import Entry
from ideas.document.model.filetype import MimeTypeResolver, TypeClassifier, TYPE_JSON


class FakeResolver:
    """
    Maps ``json`` to a made-up JSON type, and nothing else.
    """
    JSON = 'public.json'

    def resolve_type(self, extension):
        return FakeResolver.JSON if extension == 'json' else None

    def conforms(self, type_id, candidate):
        return type_id == candidate


class TestTypeClassifier:

    @pytest.mark.parametrize('name, extension', [
        ('notes', None),
        ('notes.txt', 'txt'),
        ('archive.tar.gz', 'gz'),
        ('.bashrc', 'bashrc'),
        ('notes.', None),
        ('', None),
        ('Photo.JPG', 'JPG'),
    ])
    def test_extension_of(self, name, extension):
        assert TypeClassifier.extension_of(name) == extension

    def test_type_identifier_for(self):
        classifier = TypeClassifier(FakeResolver())
        assert classifier.type_identifier_for('json') == FakeResolver.JSON
        assert classifier.type_identifier_for('png') is None
        assert classifier.type_identifier_for(None) is None

    def test_conforms_to(self):
        classifier = TypeClassifier(FakeResolver())
        assert classifier.conforms_to(Entry.regular_file('photo.json', b'{}'), FakeResolver.JSON) is True
        assert classifier.conforms_to('photo.json', 'public.image') is False
        assert classifier.conforms_to('photo.png', FakeResolver.JSON) is False
        assert classifier.conforms_to('json', FakeResolver.JSON) is False

    def test_conforms_to_short_circuits(self):
        resolver = mock.Mock()
        resolver.resolve_type.return_value = None
        classifier = TypeClassifier(resolver)

        # No extension: the resolver is never asked
        assert classifier.conforms_to('README', TYPE_JSON) is False
        resolver.resolve_type.assert_not_called()

        # Unknown extension: conformance is never checked
        assert classifier.conforms_to('data.xyz', TYPE_JSON) is False
        resolver.resolve_type.assert_called_once_with('xyz')
        resolver.conforms.assert_not_called()

    def test_default_resolver(self):
        classifier = TypeClassifier()
        assert isinstance(classifier.resolver, MimeTypeResolver)
        assert classifier.conforms_to('photo.json', TYPE_JSON) is True
        assert classifier.type_of('Photo.PNG') == 'image/png'

    def test_icon_names_for(self):
        classifier = TypeClassifier()
        assert classifier.icon_names_for('photo.png') == ['image-png', 'image-x-generic', 'unknown']
        assert classifier.icon_names_for('data.json') == ['application-json', 'unknown']
        assert classifier.icon_names_for('notes.md') == ['text-markdown', 'text-x-generic', 'unknown']
        assert classifier.icon_names_for('notes') == ['unknown']
        assert classifier.icon_names_for(Entry.regular_file('x.qqqqzz', b'')) == ['unknown']


class TestMimeTypeResolver:

    def test_resolve_type(self):
        resolver = MimeTypeResolver()
        assert resolver.resolve_type('json') == 'application/json'
        assert resolver.resolve_type('JSON') == 'application/json'
        assert resolver.resolve_type('gz') == 'application/gzip'
        assert resolver.resolve_type('qqqqzz') is None
        assert resolver.resolve_type('') is None

    def test_resolve_type_falls_back_to_mimetypes(self):
        with mock.patch.dict('mimetypes.types_map', {'.ideasx': 'application/x-ideas'}):
            assert MimeTypeResolver().resolve_type('ideasx') == 'application/x-ideas'

    @pytest.mark.parametrize('type_id, candidate, expected', [
        ('application/json', 'application/json', True),
        ('application/ld+json', 'application/json', True),
        ('application/geo+json', 'text/plain', True),
        ('image/svg+xml', 'application/xml', True),
        ('image/png', 'image/*', True),
        ('image/png', 'IMAGE/PNG', True),
        ('text/markdown', 'text/plain', True),
        ('application/json', 'text/plain', True),
        ('image/png', 'application/octet-stream', True),
        ('image/png', 'application/json', False),
        ('text/plain', 'text/markdown', False),
        ('application/pdf', 'text/plain', False),
        ('video/mp4', 'image/*', False),
    ])
    def test_conforms(self, type_id, candidate, expected):
        assert MimeTypeResolver().conforms(type_id, candidate) is expected
