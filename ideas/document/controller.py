"""
This is the document controller. It loads a document bundle into a ``Package``, exposes the document's text and
attachments for editing, and writes pending changes back into the package when the document is saved. These methods
are called by the CLI, but can be called separately if imported.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Callable, List

from ideas.document.errors import AttachError, DocumentNotLoaded, ErrorCode, LoadError, SaveError
from ideas.document.model import bundle, richtext
from ideas.document.model.entry import Entry
from ideas.document.model.filetype import TypeClassifier
from ideas.document.model.package import ATTACHMENTS_DIRECTORY, TEXT_FILE, Package


class DocumentState(Enum):
    """
    The lifecycle of a document held by a ``DocumentController``.
    """

    #: No document has been loaded or created.
    UNLOADED = 'unloaded'
    #: The document matches what was last loaded or saved.
    LOADED = 'loaded'
    #: The document has changes which have not been saved.
    MODIFIED = 'modified'
    #: A snapshot of the document has been handed over to be written to disk.
    SAVING = 'saving'
    #: The last save failed. The document moves on to ``MODIFIED`` straight away.
    ERROR = 'error'


@dataclass
class AttachmentsChanged:
    """
    Sent to subscribers after attachments have been added to or removed from a document.
    """

    #: Names of the attachments added.
    added: List[str] = field(default_factory=list)
    #: Names of the attachments removed, including any replaced by an added attachment of the same name.
    removed: List[str] = field(default_factory=list)


class DocumentController:
    """
    Loads, edits and saves a single document. Each controller owns its package; nothing is shared between controllers.
    """

    def __init__(self,
                 classifier: TypeClassifier | None = None,
                 reader: Callable = bundle.read_package,
                 writer: Callable = bundle.write_package):
        """
        Create a new document controller.

        :param classifier: the classifier used for attachment types. Defaults to one backed by MIME types.
        :param reader: reads a bundle from a path, as ``bundle.read_package`` does.
        :param writer: writes a tree of entries to a path, as ``bundle.write_package`` does.
        """
        self.classifier: TypeClassifier = classifier if classifier is not None else TypeClassifier()
        self.reader: Callable = reader
        self.writer: Callable = writer
        self.state: DocumentState = DocumentState.UNLOADED
        self.package: Package | None = None
        self.path: Path | None = None
        self.last_error: SaveError | None = None
        self._text: str = ''
        self._edited_while_saving: bool = False
        self._subscribers: List[Callable[[AttachmentsChanged], None]] = []

    def _reset(self) -> None:
        self.state = DocumentState.UNLOADED
        self.package = None
        self.path = None
        self._text = ''

    def _require_loaded(self) -> None:
        if self.state == DocumentState.UNLOADED or self.package is None:
            raise DocumentNotLoaded('No document has been loaded or created')

    def _mark_modified(self) -> None:
        if self.state == DocumentState.SAVING:
            self._edited_while_saving = True
        else:
            self.state = DocumentState.MODIFIED

    @property
    def is_modified(self) -> bool:
        return self.state == DocumentState.MODIFIED or self._edited_while_saving

    def subscribe(self, callback: Callable[[AttachmentsChanged], None]) -> None:
        """
        Be told whenever attachments are added or removed.

        :param callback: called with an ``AttachmentsChanged`` after each successful change.
        """
        self._subscribers.append(callback)

    def unsubscribe(self, callback: Callable[[AttachmentsChanged], None]) -> None:
        """
        Stop being told about attachment changes.

        :param callback: a callback previously passed to ``subscribe``.
        """
        if callback in self._subscribers:
            self._subscribers.remove(callback)

    def _publish(self, event: AttachmentsChanged) -> None:
        for callback in list(self._subscribers):
            try:
                callback(event)
            except Exception:
                logging.exception('Attachment change subscriber {} failed'.format(callback))

    def new_document(self) -> DocumentState:
        """
        Start a new, empty document. It has no text and no attachments until edited.

        :return: the state of the document.
        """
        self._reset()
        self.package = Package()
        self.state = DocumentState.MODIFIED
        logging.debug('Created new document')
        return self.state

    def load(self, root: Entry) -> DocumentState:
        """
        Load a document from the root entry of its bundle. If loading fails, no document is kept.

        :param root: the root entry of the bundle.
        :return: the state of the document.
        """
        self._reset()
        if not root.is_directory:
            error = 'Bundle {} is not a directory'.format(root.name)
            logging.critical(error)
            raise LoadError(ErrorCode.CANNOT_LOAD_FILE_WRAPPERS, error)

        text_entry = root.get_child(TEXT_FILE)
        if text_entry is None or not text_entry.is_regular_file:
            error = 'Bundle {0} has no {1}'.format(root.name, TEXT_FILE)
            logging.critical(error)
            raise LoadError(ErrorCode.CANNOT_LOAD_TEXT, error)

        try:
            text = richtext.decode(text_entry.contents)
        except (IOError, OSError, richtext.RichTextError) as e:
            error = 'Failed to read {0} in bundle {1}: {2}'.format(TEXT_FILE, root.name, e)
            logging.critical(error)
            raise LoadError(ErrorCode.CANNOT_LOAD_TEXT, error)

        self.package = Package.from_entry(root)
        self._text = text
        self.state = DocumentState.LOADED
        logging.debug('Loaded document {0} with {1} attachments'.format(root.name, len(self.package.attachments())))
        return self.state

    def load_path(self, path: Path) -> DocumentState:
        """
        Read the bundle at ``path`` and load it.

        :param path: the path of the bundle.
        :return: the state of the document.
        """
        path = Path(path)
        success, data = self.reader(path)
        if not success:
            self._reset()
            logging.critical(data)
            raise LoadError(ErrorCode.CANNOT_ACCESS_DOCUMENT, data)
        state = self.load(data)
        self.path = path
        return state

    @property
    def text(self) -> str:
        self._require_loaded()
        return self._text

    def set_text(self, text: str) -> None:
        """
        Replace the text of the document. The package is only updated when the document is saved.

        :param text: the new text.
        """
        self._require_loaded()
        if text != self._text:
            self._text = text
            self._mark_modified()

    def current_attachments(self) -> List[Entry]:
        """
        Get the attachments of the document, in the order they were added. A document read from disk lists them by
        name.

        :return: the attachments. Empty if the document has no ``Attachments`` directory.
        """
        self._require_loaded()
        return self.package.attachments()

    def _attachments_directory(self) -> Entry:
        root = self.package.root
        if not root.is_directory:
            raise AttachError(ErrorCode.CANNOT_ACCESS_ATTACHMENTS, 'Document root is not a directory')
        existing = root.get_child(ATTACHMENTS_DIRECTORY)
        if existing is not None and not existing.is_directory:
            raise AttachError(ErrorCode.CANNOT_ACCESS_ATTACHMENTS,
                              '{} exists but is not a directory'.format(ATTACHMENTS_DIRECTORY))
        return self.package.ensure_attachments_directory()

    def add_attachment(self, source: bytes, suggested_name: str) -> Entry:
        """
        Add an attachment to the document, creating the ``Attachments`` directory if this is the first one.

        Names are not made unique here: an attachment with the same name as an existing one replaces it. Callers
        which import files should pick a free name first (see ``helpers.unique_name``).

        :param source: the content of the attachment.
        :param suggested_name: the file name of the attachment.
        :return: the new attachment.
        """
        self._require_loaded()
        if suggested_name in ('', '.', '..') or '/' in suggested_name or '\x00' in suggested_name:
            raise AttachError(ErrorCode.CANNOT_SAVE_ATTACHMENT,
                              'Invalid attachment name {!r}'.format(suggested_name))
        directory = self._attachments_directory()
        entry = Entry.regular_file(suggested_name, source)
        replaced = directory.add_child(entry)
        self._mark_modified()
        logging.debug('Added attachment {}'.format(suggested_name))
        self._publish(AttachmentsChanged(added=[suggested_name],
                                         removed=[replaced.name] if replaced is not None else []))
        return entry

    def add_attachment_from_path(self, path: Path, name: str | None = None) -> Entry:
        """
        Read a file and add it as an attachment.

        :param path: the file to attach.
        :param name: the name to give the attachment. Defaults to the file's name.
        :return: the new attachment.
        """
        path = Path(path)
        try:
            with open(path, 'rb') as fp:
                content = fp.read()
        except (IOError, OSError) as e:
            error = 'Failed to read attachment {0}: {1}'.format(path, e)
            logging.critical(error)
            raise AttachError(ErrorCode.CANNOT_SAVE_ATTACHMENT, error)
        return self.add_attachment(content, path.name if name is None else name)

    def remove_attachment(self, name: str) -> Entry | None:
        """
        Remove an attachment. The ``Attachments`` directory is kept even if it becomes empty.

        :param name: the name of the attachment.
        :return: the removed attachment, or ``None`` if there was no attachment with that name.
        """
        self._require_loaded()
        directory = self.package.attachments_directory
        if directory is None:
            return None
        removed = directory.remove_child(name)
        if removed is None:
            return None
        self._mark_modified()
        logging.debug('Removed attachment {}'.format(name))
        self._publish(AttachmentsChanged(removed=[name]))
        return removed

    def export_attachment(self, name: str, destination: Path) -> tuple[bool, str]:
        """
        Write the content of an attachment to a file, e.g. to open it in another application.

        :param name: the name of the attachment.
        :param destination: the file to write.

        :returns:

            -success (:py:class:`bool`) - true if the attachment is written.

            -data (:py:class:`str`) - success message, or error message on failure.

        """
        self._require_loaded()
        directory = self.package.attachments_directory
        attachment = directory.get_child(name) if directory is not None else None
        if attachment is None or not attachment.is_regular_file:
            return False, 'No attachment named {}'.format(name)
        try:
            with open(destination, 'wb') as fp:
                fp.write(attachment.contents)
        except (IOError, OSError) as e:
            return False, 'Failed to export attachment {0} to {1}: {2}'.format(name, destination, e)
        return True, 'Attachment {0} exported to {1}'.format(name, destination)

    def prepare_for_save(self, current_text: str | None = None) -> Package:
        """
        Write the text of the document into the package, and hand over a snapshot of the package to be written to
        disk. Later edits do not affect the snapshot. Call ``finish_save`` once the snapshot is written.

        :param current_text: the text to save. Defaults to the text of the document.
        :return: the snapshot of the package.
        """
        self._require_loaded()
        if self.state == DocumentState.SAVING:
            raise SaveError(ErrorCode.CANNOT_SAVE_TEXT, 'A save is already in progress')
        if current_text is not None:
            self.set_text(current_text)

        try:
            data = richtext.encode(self._text)
        except richtext.RichTextError as e:
            error = 'Failed to encode text: {}'.format(e)
            logging.critical(error)
            raise SaveError(ErrorCode.CANNOT_SAVE_TEXT, error)
        self.package.replace_text(data)

        try:
            snapshot = self.package.snapshot()
        except (IOError, OSError) as e:
            error = 'Failed to read attachments: {}'.format(e)
            logging.critical(error)
            raise SaveError(ErrorCode.CANNOT_SAVE_ATTACHMENT, error)

        self.state = DocumentState.SAVING
        self._edited_while_saving = False
        return snapshot

    def finish_save(self, success: bool, message: str = '') -> DocumentState:
        """
        Record the outcome of writing a snapshot. On failure the document stays modified, so the next save writes the
        same changes again.

        :param success: whether the snapshot was written.
        :param message: the error message on failure.
        :return: the state of the document.
        """
        if self.state != DocumentState.SAVING:
            logging.warning('Save finished for a document which was not being saved')
            return self.state
        edited = self._edited_while_saving
        self._edited_while_saving = False
        if success:
            self.last_error = None
            self.state = DocumentState.MODIFIED if edited else DocumentState.LOADED
        else:
            self.state = DocumentState.ERROR
            self.last_error = SaveError(ErrorCode.CANNOT_SAVE_TEXT, message)
            logging.critical('Failed to save document: {}'.format(message))
            self.state = DocumentState.MODIFIED
        return self.state

    def cancel_save(self) -> DocumentState:
        """
        Abandon a save in progress. The document stays modified.

        :return: the state of the document.
        """
        if self.state == DocumentState.SAVING:
            self._edited_while_saving = False
            self.state = DocumentState.MODIFIED
        return self.state

    def save(self, path: Path | None = None) -> str:
        """
        Save the document to its bundle on disk.

        :param path: where to save the bundle. Defaults to the path the document was loaded from or last saved to.
        :return: the success message from the writer.
        """
        path = Path(path) if path is not None else self.path
        if path is None:
            raise SaveError(ErrorCode.CANNOT_ACCESS_DOCUMENT, 'No path to save the document to')
        snapshot = self.prepare_for_save()
        success, data = self.writer(path, snapshot.root)
        self.finish_save(success, data)
        if not success:
            raise self.last_error
        self.path = path
        logging.debug('Saved document to {}'.format(path))
        return data
