"""
=============================================================================
PERCENT-ENCODING
=============================================================================

Decodes request paths and encodes filenames for links in generated pages.

=============================================================================
THE TWO DIRECTIONS
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                                                                      │
    │   INCOMING (decode)                 OUTGOING (encode)                │
    │   ─────────────────                 ─────────────────                │
    │                                                                      │
    │   /my%20file+2.txt                  my file "2".txt                  │
    │          │                                 │                         │
    │          ▼                                 ▼                         │
    │   /my file 2.txt                    my%20file%20%222%22.txt          │
    │                                                                      │
    │   %XY  → byte 0xXY                  A-Z a-z 0-9 - . _ ~  → as is     │
    │   +    → space                      any other byte       → %XX       │
    │   else → unchanged                                                   │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

Decoding works on BYTES, not characters: "%C3%A9" is the two bytes of
UTF-8 "é", and "%FF" is a byte that is not valid UTF-8 at all. The
decoded bytes are turned into a str the same way Python turns filenames
into str (os.fsdecode, i.e. UTF-8 with surrogateescape), so every byte
sequence a client can send maps onto exactly one filesystem name, and
encode() maps that name back onto the same bytes.

A "%" that is not followed by two hex digits is an error, not a literal
percent sign. Guessing here would make "/a%2" and "/a%252" ambiguous.

=============================================================================
"""

import os
from typing import Union


_HEX_DIGITS = frozenset(b"0123456789abcdefABCDEF")

# RFC 3986 unreserved characters
_UNRESERVED = frozenset(
    b"ABCDEFGHIJKLMNOPQRSTUVWXYZ"
    b"abcdefghijklmnopqrstuvwxyz"
    b"0123456789"
    b"-._~"
)


class MalformedEncoding(ValueError):
    """Raised when a "%" is not followed by two hex digits, or a str path can't be encoded."""

    def __init__(self, message: str, position: int):
        super().__init__(message)
        self.position = position  # Offset of the offending "%" or character


def decode(raw: Union[str, bytes]) -> str:
    """
    Percent-decode a request path.

    Args:
        raw: Encoded path. A str is taken as its UTF-8 bytes.

    Returns:
        The decoded, filesystem-native path.

    Raises:
        MalformedEncoding: On a truncated or non-hex "%" escape, or a lone
            surrogate in a str path.

    Examples:
        >>> decode("/a+b/%2F")
        '/a b//'
    """
    if isinstance(raw, str):
        try:
            data = raw.encode("utf-8", "surrogateescape")
        except UnicodeEncodeError as e:
            raise MalformedEncoding(f"Unencodable character at offset {e.start}", e.start) from e
    else:
        data = raw

    out = bytearray()
    i = 0
    length = len(data)
    while i < length:
        byte = data[i]
        if byte == 0x25:  # "%"
            if i + 3 > length:
                raise MalformedEncoding(f"Truncated escape at offset {i}", i)
            high, low = data[i + 1], data[i + 2]
            if high not in _HEX_DIGITS or low not in _HEX_DIGITS:
                raise MalformedEncoding(f"Invalid escape at offset {i}", i)
            out.append(int(data[i + 1:i + 3], 16))
            i += 3
        elif byte == 0x2B:  # "+"
            out.append(0x20)
            i += 1
        else:
            out.append(byte)
            i += 1

    return os.fsdecode(bytes(out))


def encode(value: Union[str, bytes]) -> str:
    """
    Percent-encode a name for use as a URL path segment.

    Only unreserved characters survive unescaped, so "/" is encoded too;
    the result is always a single segment.

    Examples:
        >>> encode("my file.txt")
        'my%20file.txt'
    """
    data = os.fsencode(value) if isinstance(value, str) else value
    return "".join(
        chr(byte) if byte in _UNRESERVED else f"%{byte:02X}"
        for byte in data
    )
