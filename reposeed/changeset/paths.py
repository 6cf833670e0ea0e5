"""Git's C-style path quoting.

git wraps a path in double quotes and backslash-escapes it when it holds
control characters, ``"`` or ``\\``. Non-ASCII characters are escaped as
octal bytes too, unless ``core.quotePath`` is false.

Contains:
- quote_c_path: Quote a path the way git writes it in patch headers
- unquote_c_path: Recover the literal path from a quoted one
"""

import re

# Paths travel as str holding arbitrary bytes
PATH_ENCODING = "utf-8"
PATH_ENCODING_ERRORS = "surrogateescape"

_ESCAPE_TO_BYTE = {
    "a": 0x07,
    "b": 0x08,
    "t": 0x09,
    "n": 0x0A,
    "v": 0x0B,
    "f": 0x0C,
    "r": 0x0D,
    '"': 0x22,
    "\\": 0x5C,
}
_CHAR_TO_ESCAPE = {chr(byte): f"\\{esc}" for esc, byte in _ESCAPE_TO_BYTE.items()}

_OCTAL_RE = re.compile(r"[0-7]{3}")
_NEEDS_QUOTING_RE = re.compile('[\x00-\x1f\x7f"\\\\\udc80-\udcff]')


def quote_c_path(path: str) -> str:
    """Quote ``path`` if git would, leaving valid non-ASCII characters literal.

    Args:
        path: Literal path (``a/`` or ``b/`` prefix included, if any).

    Returns:
        The path unchanged, or wrapped in quotes with escapes.
    """
    if not _NEEDS_QUOTING_RE.search(path):
        return path

    out = []
    for ch in path:
        if ch in _CHAR_TO_ESCAPE:
            out.append(_CHAR_TO_ESCAPE[ch])
        elif ord(ch) < 0x20 or ord(ch) == 0x7F:
            out.append(f"\\{ord(ch):03o}")
        elif "\udc80" <= ch <= "\udcff":
            # A byte that is not valid UTF-8
            out.append(f"\\{ord(ch) - 0xDC00:03o}")
        else:
            out.append(ch)
    return '"' + "".join(out) + '"'


def unquote_c_path(quoted: str) -> str:
    """Undo git's quoting. Unquoted input is returned unchanged.

    Raises:
        ValueError: If the quoted path holds an unknown escape.
    """
    if len(quoted) < 2 or not (quoted.startswith('"') and quoted.endswith('"')):
        return quoted

    body = quoted[1:-1]
    raw = bytearray()
    i = 0
    while i < len(body):
        ch = body[i]
        if ch != "\\":
            raw += ch.encode(PATH_ENCODING, PATH_ENCODING_ERRORS)
            i += 1
            continue

        escape = body[i + 1:i + 2]
        if escape in _ESCAPE_TO_BYTE:
            raw.append(_ESCAPE_TO_BYTE[escape])
            i += 2
        elif _OCTAL_RE.fullmatch(body[i + 1:i + 4]):
            raw.append(int(body[i + 1:i + 4], 8))
            i += 4
        else:
            raise ValueError(f"Unknown escape in quoted path: {quoted}")

    return raw.decode(PATH_ENCODING, PATH_ENCODING_ERRORS)
