"""
This is the main package for Ideas.

- ``document`` - the document package model and the controller that loads and saves it.
- ``cli`` - the Ideas command-line interface.
- ``helpers`` - helpers used across the application.

"""

from . import helpers

__all__ = ['helpers', ]
