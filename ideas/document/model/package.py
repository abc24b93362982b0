"""
Contains the ``Package`` class, which wraps the root directory of a document bundle and guards its well-known entries:
exactly one ``Text.rtf`` file, and at most one ``Attachments`` directory.
"""

from __future__ import annotations

import copy
from typing import List

from ideas.document.model.entry import Entry, NotADirectory

#: Name of the rich text file in a bundle.
TEXT_FILE: str = "Text.rtf"
#: Name of the directory holding attachments in a bundle.
ATTACHMENTS_DIRECTORY: str = "Attachments"


class Package:
    """
    Represents a whole document bundle. The root is always a directory entry.
    """

    def __init__(self, root: Entry | None = None):
        """
        Create a new package.

        :param root: the root directory of the bundle. An empty directory is created if none is given.
        """
        if root is None:
            root = Entry.directory('')
        if not root.is_directory:
            raise NotADirectory(root.name)
        self.root: Entry = root

    @staticmethod
    def from_entry(root: Entry) -> Package:
        """
        Wrap an entry read from disk as a package.

        :param root: the root entry of the bundle.
        :return: the package. Raises ``NotADirectory`` if the root is a regular file.
        """
        return Package(root)

    @property
    def text_entry(self) -> Entry | None:
        return self.root.get_child(TEXT_FILE)

    @property
    def attachments_directory(self) -> Entry | None:
        """
        The ``Attachments`` directory, or ``None`` if no attachment has ever been added. A regular file occupying the
        name is not treated as an attachments directory.
        """
        directory = self.root.get_child(ATTACHMENTS_DIRECTORY)
        if directory is None or not directory.is_directory:
            return None
        return directory

    def ensure_attachments_directory(self) -> Entry:
        """
        Get the ``Attachments`` directory, creating it if this is the first attachment.

        :return: the ``Attachments`` directory.
        """
        directory = self.attachments_directory
        if directory is None:
            directory = Entry.directory(ATTACHMENTS_DIRECTORY)
            self.root.add_child(directory)
        return directory

    def replace_text(self, data: bytes) -> Entry | None:
        """
        Replace the ``Text.rtf`` file with new bytes. The old entry, if any, is detached.

        :param data: the encoded rich text.
        :return: the replaced entry, if any.
        """
        return self.root.add_child(Entry.regular_file(TEXT_FILE, data), replace=True)

    def attachments(self) -> List[Entry]:
        """
        Get the attachments of this package, in the order they were added. A package read from disk lists them by
        name.

        :return: the list of attachments, empty if there is no ``Attachments`` directory.
        """
        directory = self.attachments_directory
        if directory is None:
            return []
        return list(directory.list_children())

    def snapshot(self) -> Package:
        """
        Take a copy of this package which later edits do not affect. Lazily-read bytes are read before copying.

        :return: the copy.
        """
        self.root.materialize()
        return Package(copy.deepcopy(self.root))

    def __eq__(self, other):
        if not isinstance(other, Package):
            return NotImplemented
        return self.root == other.root

    __hash__ = None
