"""Line parsing for dotenv files.

Each line is exactly one of:

- ``KEY=value`` or ``export KEY=value``: an assignment
- ``# comment``: a comment, kept verbatim
- empty or whitespace only: a blank line
- anything else: an invalid line, preserved but never matched
"""

import re

from .models import EnvLine, LineKind

EXPORT_PREFIX = "export "

KEY_PATTERN = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")

# Whitespace followed by # starts an inline comment in unquoted values
INLINE_COMMENT_PATTERN = re.compile(r"\s+#")


def is_valid_key(key: str) -> bool:
    """Check that a key starts with a letter or underscore and has only word characters."""
    return bool(key) and KEY_PATTERN.fullmatch(key) is not None


def process_escape_sequences(value: str) -> str:
    """Decode \\n, \\t, \\r, \\" and \\\\ in a double-quoted value."""
    # Backslash goes last so already decoded sequences are not expanded again
    return (
        value
        .replace("\\n", "\n")
        .replace("\\t", "\t")
        .replace("\\r", "\r")
        .replace('\\"', '"')
        .replace("\\\\", "\\")
    )


def strip_inline_comment(value: str) -> str:
    """Drop a trailing `` # comment`` from an unquoted value."""
    match = INLINE_COMMENT_PATTERN.search(value)
    if match:
        return value[:match.start()].strip()
    return value


def unquote(value: str) -> str:
    """Strip quotes from a raw value and decode it."""
    value = value.strip()

    if value.startswith('"') and value.endswith('"'):
        return process_escape_sequences(value[1:-1])

    # Single quotes are literal
    if value.startswith("'") and value.endswith("'"):
        return value[1:-1]

    return strip_inline_comment(value)


def parse_line(raw: str, line_number: int) -> EnvLine:
    """
    Classify one raw line.

    Args:
        raw: Line content without its newline
        line_number: 1-indexed position in the source

    Returns:
        EnvLine whose kind is assignment, comment, blank or invalid
    """
    stripped = raw.strip()
    if not stripped:
        return EnvLine(raw, line_number, LineKind.BLANK)
    if stripped.startswith("#"):
        return EnvLine(raw, line_number, LineKind.COMMENT)

    line = stripped
    export = False
    if line.startswith(EXPORT_PREFIX):
        export = True
        line = line[len(EXPORT_PREFIX):]

    if "=" not in line:
        return EnvLine(raw, line_number, LineKind.INVALID, export=export)

    key_part, value_part = line.split("=", 1)
    key = key_part.strip()
    if not is_valid_key(key):
        return EnvLine(raw, line_number, LineKind.INVALID, export=export)

    return EnvLine(
        raw,
        line_number,
        LineKind.ASSIGNMENT,
        key=key,
        value=unquote(value_part),
        export=export
    )


def split_source_lines(source: str) -> list[str]:
    """Split source on newlines, dropping line terminators (LF or CRLF)."""
    if not source:
        return []
    pieces = source.split("\n")
    # A trailing newline terminates the last line rather than starting a new one
    if pieces[-1] == "":
        pieces.pop()
    return [piece[:-1] if piece.endswith("\r") else piece for piece in pieces]


def parse_lines(source: str) -> list[EnvLine]:
    """Parse a whole dotenv source into EnvLines numbered from 1."""
    return [
        parse_line(raw, line_number)
        for line_number, raw in enumerate(split_source_lines(source), start=1)
    ]
