"""
Reads document bundles from disk into a tree of ``Entry``, and writes such trees back to disk. A bundle is a directory
with one file per regular file entry and one subdirectory per directory entry.
"""

from __future__ import annotations

import logging
import os
import shutil
from pathlib import Path

from ideas.document.model.entry import Entry


def read_package(path: Path) -> tuple[bool, str] | tuple[bool, Entry]:
    """
    Reads the bundle at ``path``. The bytes of the files in the bundle are only read when first needed.

    :param path: the path of the bundle.

    :returns:

        -success (:py:class:`bool`) - true if the bundle is read successfully.

        -data (:py:class:`str` | :py:class:`Entry`) - error message on failure, or the root entry of the bundle.

    """
    path = Path(path)
    try:
        root = Entry.from_path(path)
    except (IOError, OSError) as e:
        return False, 'Failed to read bundle {0}: {1}'.format(path, e)
    logging.debug('Read bundle {}'.format(path))
    return True, root


def _write_entry(path: Path, entry: Entry) -> None:
    if entry.is_directory:
        path.mkdir()
        for child in entry.list_children():
            _write_entry(path / child.name, child)
    else:
        with open(path, 'wb') as fp:
            fp.write(entry.contents or b'')


def _remove(path: Path) -> None:
    if path.is_dir() and not path.is_symlink():
        shutil.rmtree(path)
    elif path.exists() or path.is_symlink():
        path.unlink()


def write_package(path: Path, root: Entry) -> tuple[bool, str]:
    """
    Writes a tree of entries as a bundle at ``path``, replacing any bundle already there. The tree is first written to a
    staging directory next to ``path``, which is then moved into place, so a failed write leaves the previous bundle
    untouched.

    :param path: the path of the bundle.
    :param root: the root entry of the tree. Must be a directory.

    :returns:

        -success (:py:class:`bool`) - true if the bundle is written successfully.

        -data (:py:class:`str`) - success message, or error message on failure.

    """
    path = Path(path)
    if not root.is_directory:
        return False, 'Cannot write bundle {}: root entry is not a directory'.format(path)

    staging = path.parent / '.{}.saving'.format(path.name)
    backup = path.parent / '.{}.previous'.format(path.name)
    moved_aside = False
    try:
        _remove(staging)
        _write_entry(staging, root)
        if path.exists():
            _remove(backup)
            os.rename(path, backup)
            moved_aside = True
        os.rename(staging, path)
    except (IOError, OSError) as e:
        if moved_aside and not path.exists():
            os.rename(backup, path)
        shutil.rmtree(staging, ignore_errors=True)
        error = 'Failed to write bundle {0}: {1}'.format(path, e)
        logging.critical(error)
        return False, error

    if moved_aside:
        shutil.rmtree(backup, ignore_errors=True)
    debug_msg = 'Bundle {} written.'.format(path)
    logging.debug(debug_msg)
    return True, debug_msg
