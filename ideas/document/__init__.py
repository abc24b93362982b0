"""
This is the document part of Ideas. Here, you'll find the following:

- ``model`` - the in-memory tree mirroring a document bundle on disk, plus type classification and the rich text codec.
- ``controller.py`` - Contains the ``DocumentController`` class which loads, edits and saves a document.
- ``errors.py`` - Contains the error codes and typed errors raised while loading, saving or attaching.

"""

from . import controller, errors, model

__all__ = ['controller', 'errors', 'model', ]
