"""
Encodes the text of a document as RTF, and decodes RTF back to text. Only the text survives a round-trip: formatting
in RTF written by other applications is read past, not preserved.
"""

from __future__ import annotations

import string
from typing import List

_HEADER = '{\\rtf1\\ansi\\ansicpg1252\\deff0\n{\\fonttbl\\f0\\fswiss\\fcharset0 Helvetica;}\n\\f0\\fs24 '
_FOOTER = '}'

#: Destination groups whose content is not part of the text.
IGNORED_DESTINATIONS = {
    'fonttbl', 'colortbl', 'expandedcolortbl', 'stylesheet', 'info', 'pict', 'listtable', 'listoverridetable',
    'header', 'headerl', 'headerr', 'footer', 'footerl', 'footerr', 'footnote', 'generator', 'rsidtbl',
    'themedata', 'colorschememapping', 'latentstyles', 'datastore', 'filetbl', 'xmlnstbl', 'object', 'field_inst',
    'fldinst', 'nonshppict',
}

_SYMBOLS = {
    'par': '\n',
    'line': '\n',
    'tab': '\t',
    'emdash': '\u2014',
    'endash': '\u2013',
    'bullet': '\u2022',
    'lquote': '\u2018',
    'rquote': '\u2019',
    'ldblquote': '\u201c',
    'rdblquote': '\u201d',
}


class RichTextError(ValueError):
    """
    Raised when text can't be encoded as RTF, or bytes can't be decoded as RTF.
    """
    pass


def _escape(char: str) -> str:
    if char in '\\{}':
        return '\\' + char
    if char == '\n':
        return '\\par\n'
    if char == '\t':
        return '\\tab '
    code = ord(char)
    if 0xD800 <= code <= 0xDFFF:
        raise RichTextError('Text contains an unpaired surrogate U+{:04X}'.format(code))
    if 32 <= code < 127:
        return char
    units = [code] if code <= 0xFFFF else [0xD800 + ((code - 0x10000) >> 10), 0xDC00 + ((code - 0x10000) & 0x3FF)]
    return ''.join('\\u{}?'.format(unit - 0x10000 if unit > 0x7FFF else unit) for unit in units)


def encode(text: str) -> bytes:
    """
    Encode text as an RTF document. The output only depends on ``text``, so encoding the same text twice gives the
    same bytes.

    :param text: the text to encode. ``\\r\\n`` and ``\\r`` line endings are stored as ``\\n``.
    :return: the RTF bytes.
    """
    if not isinstance(text, str):
        raise RichTextError('Expected text, got {}'.format(type(text).__name__))
    text = text.replace('\r\n', '\n').replace('\r', '\n')
    body = ''.join(_escape(char) for char in text)
    return (_HEADER + body + _FOOTER).encode('ascii')


class _Group:
    def __init__(self, skip: bool = False, uc: int = 1):
        self.skip: bool = skip
        self.uc: int = uc

    def child(self) -> _Group:
        return _Group(self.skip, self.uc)


def decode(data: bytes) -> str:
    """
    Decode an RTF document to text.

    :param data: the RTF bytes.
    :return: the text of the document.
    """
    try:
        source = bytes(data).decode('ascii')
    except (TypeError, UnicodeDecodeError) as e:
        raise RichTextError('RTF data is not 7-bit text: {}'.format(e))
    source = source.lstrip()
    if not source.startswith('{\\rtf'):
        raise RichTextError('RTF data does not start with an RTF header')

    out: List[str] = []
    stack: List[_Group] = []
    pending_skip = 0
    closed = False
    i = 0
    length = len(source)

    def emit(value: str) -> None:
        nonlocal pending_skip
        if pending_skip > 0:
            pending_skip -= 1
            return
        if not stack[-1].skip:
            out.append(value)

    while i < length:
        char = source[i]
        if closed:
            if not char.isspace() and char != '\x00':
                raise RichTextError('Unexpected data after the end of the RTF document')
            i += 1
            continue
        if char == '{':
            stack.append(stack[-1].child() if stack else _Group())
            pending_skip = 0
            i += 1
        elif char == '}':
            if not stack:
                raise RichTextError('Unbalanced closing brace at offset {}'.format(i))
            stack.pop()
            pending_skip = 0
            closed = not stack
            i += 1
        elif char == '\\':
            if i + 1 >= length:
                raise RichTextError('RTF data ends in the middle of a control word')
            nxt = source[i + 1]
            if nxt in '\\{}':
                emit(nxt)
                i += 2
            elif nxt == "'":
                digits = source[i + 2:i + 4]
                if len(digits) != 2 or any(c not in string.hexdigits for c in digits):
                    raise RichTextError('Invalid hex escape at offset {}'.format(i))
                emit(bytes([int(digits, 16)]).decode('cp1252', errors='replace'))
                i += 4
            elif nxt == '*':
                stack[-1].skip = True
                i += 2
            elif nxt in '\r\n':
                emit('\n')
                i += 2
            elif nxt == '~':
                emit('\u00a0')
                i += 2
            elif nxt == '_':
                emit('\u2011')
                i += 2
            elif nxt.isalpha():
                start = i + 1
                end = start
                while end < length and source[end].isalpha():
                    end += 1
                word = source[start:end]
                param_start = end
                if end < length and source[end] == '-':
                    end += 1
                while end < length and source[end].isdigit():
                    end += 1
                param = source[param_start:end]
                if param == '-':
                    raise RichTextError('Invalid parameter for control word {}'.format(word))
                if end < length and source[end] == ' ':
                    end += 1
                i = end

                if word in IGNORED_DESTINATIONS:
                    stack[-1].skip = True
                elif word == 'uc' and param:
                    stack[-1].uc = int(param)
                elif word == 'u' and param:
                    code = int(param)
                    if code < 0:
                        code += 0x10000
                    if not 0 <= code <= 0x10FFFF:
                        raise RichTextError('Unicode escape out of range: \\u{}'.format(param))
                    emit(chr(code))
                    pending_skip = stack[-1].uc
                elif word in _SYMBOLS:
                    emit(_SYMBOLS[word])
            else:
                i += 2
        elif char in '\r\n':
            i += 1
        else:
            emit(char)
            i += 1

    if stack:
        raise RichTextError('RTF data has {} unclosed groups'.format(len(stack)))

    try:
        return ''.join(out).encode('utf-16', 'surrogatepass').decode('utf-16')
    except UnicodeError as e:
        raise RichTextError('RTF data contains an invalid unicode sequence: {}'.format(e))
