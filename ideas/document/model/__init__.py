"""
This is the model of a document in Ideas. Here, you'll find the following:

- ``entry.py`` - Contains the ``Entry`` class, a named file or directory node in a document bundle.
- ``package.py`` - Contains the ``Package`` class which guards the well-known entries of a bundle.
- ``filetype.py`` - Classifies attachments by extension and type identifier.
- ``richtext.py`` - Encodes and decodes the RTF text of a document.
- ``bundle.py`` - Reads and writes bundles on disk.

"""

from . import bundle, entry, filetype, package, richtext

__all__ = ['bundle', 'entry', 'filetype', 'package', 'richtext', ]
