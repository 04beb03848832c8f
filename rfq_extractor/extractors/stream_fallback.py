"""
Last-resort text recovery straight from PDF content streams.

No layout analysis: every stream is inflated when possible and scanned for
the text-showing operators Tj, ', " and TJ. The strings are decoded and
returned one per line in document order.
"""
import logging
import re
import zlib
from typing import List, Tuple

logger = logging.getLogger(__name__)


_STREAM_RE = re.compile(rb'stream\r?\n(.*?)endstream', re.DOTALL)
# (string) Tj | (string) ' | aw ac (string) " | [array] TJ
_SHOW_STRING_RE = re.compile(rb'\s*(?:Tj|\'|")')
_SHOW_ARRAY_RE = re.compile(rb'\s*TJ')
_OFFSET_RE = re.compile(rb'-?\d+(?:\.\d+)?|-?\.\d+')
_ESCAPE_RE = re.compile(rb'\\([0-7]{1,3}|\r\n|.)', re.DOTALL)

OPEN_PAREN, CLOSE_PAREN, BACKSLASH = ord('('), ord(')'), ord('\\')
OPEN_BRACKET, CLOSE_BRACKET = ord('['), ord(']')

_ESCAPES = {
    b'n': b'\n',
    b'r': b'\r',
    b't': b'\t',
    b'b': b'\b',
    b'f': b'\f',
    b'(': b'(',
    b')': b')',
    b'\\': b'\\',
}


def inflate(body: bytes) -> bytes:
    """Inflate a FlateDecode stream (zlib, then raw deflate); return it unchanged otherwise."""
    for wbits in (zlib.MAX_WBITS, -zlib.MAX_WBITS):
        decompressor = zlib.decompressobj(wbits)
        try:
            inflated = decompressor.decompress(body)
        except zlib.error:
            continue
        # Uncompressed bytes can partially "inflate" as raw deflate; require a complete stream
        if decompressor.eof:
            return inflated
    return body


def decode_pdf_string(raw: bytes) -> str:
    """Resolve escape sequences of a literal PDF string."""
    def replace(match):
        token = match.group(1)
        if token[0] in b'01234567':
            return bytes([int(token, 8) & 0xFF])
        if token in (b'\r\n', b'\n', b'\r'):
            return b''
        return _ESCAPES.get(token, token)

    return _ESCAPE_RE.sub(replace, raw).decode('latin-1')


def read_literal(content: bytes, start: int) -> Tuple[bytes, int]:
    """
    Read the literal string whose "(" is at content[start].

    Balanced parentheses may appear unescaped inside a literal string,
    so the closing ")" is found by counting depth.

    Returns:
        (raw string body, index just past the closing parenthesis)
    """
    depth = 0
    index = start
    while index < len(content):
        byte = content[index]
        if byte == BACKSLASH:
            index += 2
            continue
        if byte == OPEN_PAREN:
            depth += 1
        elif byte == CLOSE_PAREN:
            depth -= 1
            if depth == 0:
                return content[start + 1:index], index + 1
        index += 1
    # Unterminated: take the rest of the stream
    return content[start + 1:], len(content)


def _read_array(content: bytes, start: int, space_threshold: float) -> Tuple[str, int]:
    """Decode the TJ array whose "[" is at content[start]."""
    parts = []
    index = start + 1
    while index < len(content):
        byte = content[index]
        if byte == CLOSE_BRACKET:
            return ''.join(parts), index + 1
        if byte == OPEN_PAREN:
            raw, index = read_literal(content, index)
            parts.append(decode_pdf_string(raw))
            continue
        offset = _OFFSET_RE.match(content, index)
        if offset:
            if float(offset.group(0)) < -space_threshold:
                parts.append(' ')
            index = offset.end()
            continue
        index += 1
    return ''.join(parts), len(content)


def extract_stream_fragments(content: bytes, space_threshold: float = 200) -> List[str]:
    """
    Text fragments shown by the operators of one content stream.

    Args:
        content: Decompressed content stream
        space_threshold: TJ offsets below minus this value become a space

    Returns:
        Non-empty fragments in stream order
    """
    fragments = []
    index = 0
    while index < len(content):
        byte = content[index]
        if byte == OPEN_PAREN:
            raw, index = read_literal(content, index)
            operator = _SHOW_STRING_RE.match(content, index)
            text = decode_pdf_string(raw) if operator else ''
        elif byte == OPEN_BRACKET:
            text, index = _read_array(content, index, space_threshold)
            operator = _SHOW_ARRAY_RE.match(content, index)
        else:
            index += 1
            continue

        # Strings and arrays not followed by a show operator are operands of something else
        if operator:
            index = operator.end()
            if text.strip():
                fragments.append(text)
    return fragments


def extract_text_from_streams(data: bytes, space_threshold: float = 200) -> str:
    """
    Recover text from the raw bytes of a PDF file.

    Args:
        data: PDF file contents
        space_threshold: TJ kerning threshold treated as a word gap

    Returns:
        Fragments joined by newlines ('' when nothing was found)
    """
    fragments = []
    streams = 0
    for match in _STREAM_RE.finditer(data):
        streams += 1
        fragments.extend(extract_stream_fragments(inflate(match.group(1)), space_threshold))
    logger.debug("Scanned %d stream(s), found %d text fragment(s)", streams, len(fragments))
    return '\n'.join(fragments)
