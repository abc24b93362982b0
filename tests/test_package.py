import pytest

from ideas.document.model.entry import Entry, NotADirectory
from ideas.document.model.package import ATTACHMENTS_DIRECTORY, TEXT_FILE, Package


class TestPackage:

    def test_new_package(self):
        package = Package()
        assert package.root.is_directory is True
        assert package.text_entry is None
        assert package.attachments_directory is None
        assert package.attachments() == []

    def test_root_must_be_directory(self):
        with pytest.raises(NotADirectory):
            Package.from_entry(Entry.regular_file('Note.ideas', b''))

    def test_replace_text(self):
        package = Package()
        assert package.replace_text(b'first') is None
        old = package.text_entry
        replaced = package.replace_text(b'second')
        assert replaced is old
        assert package.text_entry.contents == b'second'
        assert [child.name for child in package.root.list_children()] == [TEXT_FILE]

    def test_ensure_attachments_directory(self):
        package = Package()
        directory = package.ensure_attachments_directory()
        assert directory.name == ATTACHMENTS_DIRECTORY
        assert package.ensure_attachments_directory() is directory

        directory.add_child(Entry.regular_file('a.png', b'png'))
        directory.add_child(Entry.regular_file('b.json', b'{}'))
        assert [attachment.name for attachment in package.attachments()] == ['a.png', 'b.json']

        directory.remove_child('a.png')
        directory.remove_child('b.json')
        assert package.attachments_directory is directory
        assert package.attachments() == []

    def test_attachments_file_is_not_a_directory(self):
        package = Package(Entry.directory('Note.ideas', [Entry.regular_file(ATTACHMENTS_DIRECTORY, b'')]))
        assert package.attachments_directory is None
        assert package.attachments() == []

    def test_snapshot(self, tmp_path):
        (tmp_path / TEXT_FILE).write_bytes(b'{\\rtf1 Hi}')
        package = Package.from_entry(Entry.from_path(tmp_path))
        snapshot = package.snapshot()
        assert snapshot == package
        assert snapshot.root is not package.root

        package.ensure_attachments_directory().add_child(Entry.regular_file('a.txt', b'a'))
        package.replace_text(b'changed')
        assert snapshot.attachments_directory is None
        assert snapshot.text_entry.contents == b'{\\rtf1 Hi}'
