"""
Contains the ``Entry`` class, which represents a single named node in a document bundle. An entry is either a regular
file holding opaque bytes, or a directory holding other entries.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Dict, Iterator


class DuplicateNameConflict(Exception):
    """
    Raised when an entry is added to a directory which already has a child of the same name, and the caller does not
    allow replacing it.
    """

    def __init__(self, directory: str, name: str):
        self.directory: str = directory
        self.name: str = name
        super().__init__('Directory {0} already contains an entry named {1}'.format(directory, name))


class NotADirectory(Exception):
    """
    Raised when a directory operation is called on a regular file entry.
    """

    def __init__(self, name: str):
        self.name: str = name
        super().__init__('Entry {} is not a directory'.format(name))


class Entry:
    """
    Represents a regular file or a directory in a document bundle.

    Regular files read from disk are materialized lazily: the bytes are only read the first time ``contents`` is
    accessed, and are then kept in memory. Directories keep their children in insertion order, keyed by name, and
    exclusively own them.
    """

    #: Denotes a regular file entry.
    TYPE_FILE: int = 0
    #: Denotes a directory entry.
    TYPE_DIRECTORY: int = 1

    def __init__(self, name: str, kind: int, contents: bytes | None = None, source: Path | None = None):
        """
        Create a new entry. Prefer ``Entry.regular_file``, ``Entry.directory`` and ``Entry.from_path``.

        :param name: the name of the entry within its parent.
        :param kind: either ``Entry.TYPE_FILE`` or ``Entry.TYPE_DIRECTORY``.
        :param contents: the bytes of a regular file.
        :param source: path on disk from which the bytes of a regular file are read on first access.
        """
        if kind not in (Entry.TYPE_FILE, Entry.TYPE_DIRECTORY):
            raise ValueError('Unknown entry kind {}'.format(kind))
        self.name: str = name
        self.kind: int = kind
        self.parent: Entry | None = None
        self._contents: bytes | None = contents
        self._source: Path | None = source
        self._children: Dict[str, Entry] = {}

    @staticmethod
    def regular_file(name: str, contents: bytes) -> Entry:
        """
        Wrap bytes as a new regular file entry.

        :param name: the name of the file.
        :param contents: the content of the file.
        :return: the new entry.
        """
        return Entry(name, Entry.TYPE_FILE, contents=bytes(contents))

    @staticmethod
    def directory(name: str, children: list[Entry] | None = None) -> Entry:
        """
        Create a new directory entry, optionally populated with children.

        :param name: the name of the directory.
        :param children: entries to add to the directory, in order.
        :return: the new entry.
        """
        entry = Entry(name, Entry.TYPE_DIRECTORY)
        for child in children or []:
            entry.add_child(child)
        return entry

    @staticmethod
    def from_path(path: Path, name: str | None = None) -> Entry:
        """
        Create an entry from a file or directory on disk. Directories are walked recursively, but the bytes of regular
        files are only read when first needed.

        :param path: the file or directory to read.
        :param name: the name to give the entry. Defaults to the last component of ``path``.
        :return: the new entry.
        """
        path = Path(path)
        name = path.name if name is None else name
        if path.is_dir():
            entry = Entry(name, Entry.TYPE_DIRECTORY)
            for child_name in sorted(os.listdir(path)):
                entry.add_child(Entry.from_path(path / child_name))
            return entry
        if path.is_file():
            return Entry(name, Entry.TYPE_FILE, source=path)
        raise FileNotFoundError('No file or directory at {}'.format(path))

    @property
    def is_directory(self) -> bool:
        return self.kind == Entry.TYPE_DIRECTORY

    @property
    def is_regular_file(self) -> bool:
        return self.kind == Entry.TYPE_FILE

    @property
    def is_loaded(self) -> bool:
        """
        True if the bytes of this regular file are in memory. Always True for directories.
        """
        return self.is_directory or self._contents is not None

    @property
    def contents(self) -> bytes | None:
        """
        The bytes of this regular file, read from disk on first access. ``None`` for directories.
        """
        if self.is_directory:
            return None
        if self._contents is None and self._source is not None:
            with open(self._source, 'rb') as fp:
                self._contents = fp.read()
        return self._contents

    def materialize(self) -> None:
        """
        Read the bytes of this entry and every entry below it into memory.
        """
        if self.is_regular_file:
            _ = self.contents
            return
        for child in self._children.values():
            child.materialize()

    def _require_directory(self) -> None:
        if not self.is_directory:
            raise NotADirectory(self.name)

    def get_child(self, name: str) -> Entry | None:
        """
        Look up a child by name.

        :param name: the name of the child.
        :return: the child, or ``None`` if there is no child with that name.
        """
        self._require_directory()
        return self._children.get(name)

    def add_child(self, entry: Entry, replace: bool = True) -> Entry | None:
        """
        Add a child to this directory. If a child of the same name exists, it is detached and replaced, unless
        ``replace`` is False, in which case ``DuplicateNameConflict`` is raised.

        :param entry: the entry to add. Must not already belong to a directory.
        :param replace: whether an existing child of the same name may be replaced.
        :return: the child which was replaced, if any.
        """
        self._require_directory()
        if entry.parent is not None:
            raise ValueError('Entry {0} already belongs to {1}'.format(entry.name, entry.parent.name))
        ancestor = self
        while ancestor is not None:
            if ancestor is entry:
                raise ValueError('Entry {} cannot be added beneath itself'.format(entry.name))
            ancestor = ancestor.parent

        replaced = self._children.get(entry.name)
        if replaced is not None:
            if not replace:
                raise DuplicateNameConflict(self.name, entry.name)
            self.remove_child(entry.name)
        self._children[entry.name] = entry
        entry.parent = self
        return replaced

    def remove_child(self, name: str) -> Entry | None:
        """
        Detach a child from this directory.

        :param name: the name of the child.
        :return: the detached child, or ``None`` if there was no child with that name.
        """
        self._require_directory()
        removed = self._children.pop(name, None)
        if removed is not None:
            removed.parent = None
        return removed

    def rename_child(self, name: str, new_name: str) -> Entry | None:
        """
        Rename a child, keeping its position in the directory.

        :param name: the current name of the child.
        :param new_name: the new name of the child.
        :return: the renamed child, or ``None`` if there was no child with that name.
        """
        self._require_directory()
        child = self._children.get(name)
        if child is None or name == new_name:
            return child
        if new_name in self._children:
            raise DuplicateNameConflict(self.name, new_name)
        child.name = new_name
        self._children = {(new_name if key == name else key): value for key, value in self._children.items()}
        return child

    def list_children(self) -> Iterator[Entry]:
        """
        Get the children of this directory in insertion order. Each call returns a new iterator.

        :return: an iterator over the children.
        """
        self._require_directory()
        return iter(list(self._children.values()))

    def __contains__(self, name):
        return name in self._children

    def __eq__(self, other):
        if not isinstance(other, Entry):
            return NotImplemented
        if self.name != other.name or self.kind != other.kind:
            return False
        if self.is_regular_file:
            return self.contents == other.contents
        return self._children == other._children

    __hash__ = None

    def __repr__(self):
        if self.is_directory:
            return 'Entry(directory {0!r}, {1} children)'.format(self.name, len(self._children))
        if self.is_loaded:
            return 'Entry(file {0!r}, {1} bytes)'.format(self.name, len(self._contents))
        return 'Entry(file {0!r}, not loaded)'.format(self.name)

    def __str__(self):
        return self.name


def regular_file_bytes(entry: Entry) -> bytes | None:
    """
    Get the bytes of a regular file entry.

    :param entry: the entry.
    :return: the bytes, or ``None`` if the entry is a directory.
    """
    return entry.contents
