"""
Classifies the entries of a document bundle by file type. The extension of an entry's name is mapped to a type
identifier through a ``TypeResolver``, which is also asked whether one type conforms to another (e.g. whether an
attachment is a kind of JSON document).

The default resolver, ``MimeTypeResolver``, uses MIME types as type identifiers.
"""

from __future__ import annotations

import mimetypes
from typing import Dict, List, Protocol

from ideas.document.model.entry import Entry

#: Type every regular file conforms to.
TYPE_DATA: str = 'application/octet-stream'
#: Type of plain text, which every ``text/*`` type conforms to.
TYPE_TEXT: str = 'text/plain'
#: Type of JSON documents.
TYPE_JSON: str = 'application/json'


class TypeResolver(Protocol):
    """
    Maps file extensions to type identifiers, and decides whether one type conforms to another.
    """

    def resolve_type(self, extension: str) -> str | None:
        ...

    def conforms(self, type_id: str, candidate: str) -> bool:
        ...


class MimeTypeResolver:
    """
    A ``TypeResolver`` backed by the ``mimetypes`` registry, with a built-in table taking precedence so that the
    common attachment types resolve the same way on every machine.

    A type conforms to a candidate when they are equal, when the candidate is the wildcard family of the type (e.g.
    ``image/*``), when the candidate is ``application/octet-stream``, or when one of the type's parents conforms.
    The parents of a type are its structured suffix (``application/ld+json`` has parent ``application/json``), any
    entry in ``PARENT_TYPES``, and ``text/plain`` for every other ``text/*`` type.
    """

    _BUILTIN_TYPES: Dict[str, str] = {
        'json': 'application/json',
        'geojson': 'application/geo+json',
        'jsonld': 'application/ld+json',
        'xml': 'application/xml',
        'rtf': 'text/rtf',
        'txt': 'text/plain',
        'md': 'text/markdown',
        'markdown': 'text/markdown',
        'csv': 'text/csv',
        'html': 'text/html',
        'htm': 'text/html',
        'png': 'image/png',
        'jpg': 'image/jpeg',
        'jpeg': 'image/jpeg',
        'gif': 'image/gif',
        'heic': 'image/heic',
        'webp': 'image/webp',
        'svg': 'image/svg+xml',
        'pdf': 'application/pdf',
        'zip': 'application/zip',
        'gz': 'application/gzip',
        'tar': 'application/x-tar',
        'mp3': 'audio/mpeg',
        'm4a': 'audio/mp4',
        'mov': 'video/quicktime',
        'mp4': 'video/mp4',
        'gpx': 'application/gpx+xml',
        'kml': 'application/vnd.google-earth.kml+xml',
    }

    #: Parents of types which are not covered by the structured suffix or ``text/*`` rules.
    PARENT_TYPES: Dict[str, str] = {
        'application/json': TYPE_TEXT,
        'application/xml': TYPE_TEXT,
        'application/javascript': TYPE_TEXT,
        'application/x-sh': TYPE_TEXT,
    }

    def resolve_type(self, extension: str) -> str | None:
        """
        Get the MIME type for an extension. The lookup is case-insensitive.

        :param extension: the extension, without the leading ``.``.
        :return: the MIME type, or ``None`` if the extension is not recognised.
        """
        if not extension:
            return None
        extension = extension.lower()
        if extension in MimeTypeResolver._BUILTIN_TYPES:
            return MimeTypeResolver._BUILTIN_TYPES[extension]
        suffix = '.' + extension
        return mimetypes.types_map.get(suffix) or mimetypes.common_types.get(suffix)

    def parents(self, type_id: str) -> List[str]:
        """
        Get the types a type directly conforms to, excluding ``application/octet-stream``.

        :param type_id: the MIME type.
        :return: the parent types.
        """
        result = []
        major, _, minor = type_id.partition('/')
        if '+' in minor:
            suffix = minor.rsplit('+', 1)[1]
            result.append('application/' + suffix)
        if type_id in MimeTypeResolver.PARENT_TYPES:
            result.append(MimeTypeResolver.PARENT_TYPES[type_id])
        elif major == 'text' and type_id != TYPE_TEXT:
            result.append(TYPE_TEXT)
        return result

    def conforms(self, type_id: str, candidate: str) -> bool:
        """
        Check whether a type conforms to a candidate type.

        :param type_id: the concrete MIME type.
        :param candidate: the type to check against. May be a wildcard such as ``image/*``.
        :return: True if ``type_id`` is a kind of ``candidate``.
        """
        type_id = type_id.lower()
        candidate = candidate.lower()
        if type_id == candidate or candidate == TYPE_DATA:
            return True
        if candidate.endswith('/*') and type_id.partition('/')[0] == candidate[:-2]:
            return True
        return any(self.conforms(parent, candidate) for parent in self.parents(type_id))


class TypeClassifier:
    """
    Classifies entries by file type using a ``TypeResolver``. Nothing is cached: every query is derived from the
    entry's current name.
    """

    _GENERIC_ICONS: Dict[str, str] = {
        'text': 'text-x-generic',
        'image': 'image-x-generic',
        'audio': 'audio-x-generic',
        'video': 'video-x-generic',
        'font': 'font-x-generic',
    }

    #: Icon name used when nothing is known about a file.
    UNKNOWN_ICON: str = 'unknown'

    def __init__(self, resolver: TypeResolver | None = None):
        """
        Create a new classifier.

        :param resolver: the resolver used to look up types. Defaults to a ``MimeTypeResolver``.
        """
        self.resolver: TypeResolver = resolver if resolver is not None else MimeTypeResolver()

    @staticmethod
    def extension_of(name: str) -> str | None:
        """
        Get the extension of a file name: the text after the last ``.``.

        A name starting with its only ``.`` still has an extension, so ``.bashrc`` gives ``bashrc``. A name ending in
        ``.`` has none.

        :param name: the file name.
        :return: the extension, or ``None`` if the name has no ``.`` or ends with one.
        """
        if '.' not in name:
            return None
        extension = name.split('.')[-1]
        return extension if extension != '' else None

    def type_identifier_for(self, extension: str | None) -> str | None:
        """
        Get the preferred type identifier for an extension.

        :param extension: the extension, without the leading ``.``.
        :return: the type identifier, or ``None`` if the resolver can't map the extension.
        """
        if extension is None:
            return None
        return self.resolver.resolve_type(extension)

    def type_of(self, entry: Entry | str) -> str | None:
        """
        Get the type identifier of an entry, from its name.

        :param entry: the entry, or its name.
        :return: the type identifier, or ``None`` if it can't be derived.
        """
        name = entry if isinstance(entry, str) else entry.name
        return self.type_identifier_for(TypeClassifier.extension_of(name))

    def conforms_to(self, entry: Entry | str, candidate_type: str) -> bool:
        """
        Check whether an entry is of a kind of ``candidate_type``. An entry without an extension, or whose extension
        can't be mapped to a type, does not conform to anything.

        :param entry: the entry, or its name.
        :param candidate_type: the type identifier to check against.
        :return: True if the entry conforms.
        """
        type_id = self.type_of(entry)
        if type_id is None:
            return False
        return self.resolver.conforms(type_id, candidate_type)

    def icon_names_for(self, entry: Entry | str) -> List[str]:
        """
        Get the icon names to try for an entry, most specific first, in the freedesktop icon naming style. The list
        always ends with ``unknown``.

        :param entry: the entry, or its name.
        :return: the icon names.
        """
        type_id = self.type_of(entry)
        if type_id is None:
            return [TypeClassifier.UNKNOWN_ICON]
        names = [type_id.replace('/', '-')]
        generic = TypeClassifier._GENERIC_ICONS.get(type_id.partition('/')[0])
        if generic is not None and generic not in names:
            names.append(generic)
        names.append(TypeClassifier.UNKNOWN_ICON)
        return names
