"""
Contains the error codes used by Ideas documents, and the typed errors raised when loading, saving or attaching to a
document fails.
"""

from __future__ import annotations

from enum import IntEnum

#: Domain reported alongside every error code.
ERROR_DOMAIN: str = "IdeasErrorDomain"


class ErrorCode(IntEnum):
    """
    The named failure conditions of a document.
    """

    #: Couldn't find the document.
    CANNOT_ACCESS_DOCUMENT = 0
    #: Couldn't access any entries inside the document.
    CANNOT_LOAD_FILE_WRAPPERS = 1
    #: Couldn't load the ``Text.rtf`` file.
    CANNOT_LOAD_TEXT = 2
    #: Couldn't access the ``Attachments`` directory.
    CANNOT_ACCESS_ATTACHMENTS = 3
    #: Couldn't save the ``Text.rtf`` file.
    CANNOT_SAVE_TEXT = 4
    #: Couldn't save an attachment.
    CANNOT_SAVE_ATTACHMENT = 5


class IdeasError(Exception):
    """
    Base class for errors raised by a document. Carries an ``ErrorCode`` and an optional human-readable message.
    """

    def __init__(self, code: ErrorCode, message: str = ''):
        """
        Create a new error.

        :param code: the failure condition.
        :param message: extra detail about the failure.
        """
        self.code: ErrorCode = code
        self.domain: str = ERROR_DOMAIN
        self.message: str = message
        super().__init__(str(self))

    def __str__(self):
        if self.message:
            return '{0} ({1}): {2}'.format(self.code.name, self.domain, self.message)
        return '{0} ({1})'.format(self.code.name, self.domain)


class LoadError(IdeasError):
    """
    Raised when a document cannot be loaded.
    """
    pass


class SaveError(IdeasError):
    """
    Raised when a document cannot be saved.
    """
    pass


class AttachError(IdeasError):
    """
    Raised when an attachment cannot be added to a document.
    """
    pass


class DocumentNotLoaded(RuntimeError):
    """
    Raised when a document operation is called before a document has been loaded or created.
    """
    pass
