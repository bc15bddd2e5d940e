"""
Text Scan — comment-aware helpers shared by every stage of the converter.

  • strip_comments()         — delete every /* ... */ region from a buffer
  • find_substring()         — plain literal search
  • find_whole_word()        — literal search bounded by declarator delimiters
  • find_outside_comments()  — first structural character not inside a comment

None of these understand C syntax; they only know about block comments
and the handful of delimiter characters that surround a declarator name.
"""

import logging

logger = logging.getLogger(__name__)

COMMENT_OPEN = "/*"
COMMENT_CLOSE = "*/"

# A whole-word match must be preceded by whitespace or one of these ...
_WORD_PREFIX = ("*", ",")
# ... and followed by whitespace or one of these.
_WORD_SUFFIX = (";", "[", ")", ",")


# ═══════════════════════════════════════════════════════════════════════
#  Comment Stripper
# ═══════════════════════════════════════════════════════════════════════

def strip_comments(text: str, keep_newlines: bool = False) -> str:
    """Return ``text`` with every ``/* ... */`` region deleted.

    Characters are removed, not blanked, so tokens either side of a
    comment become adjacent.  Nesting is counted: ``/* /* */ */`` is one
    region.  A stray ``*/`` with nothing open is ordinary text, and an
    unterminated ``/*`` swallows the rest of the buffer.

    With ``keep_newlines`` the line breaks inside a comment survive, so the
    result splits into as many lines as ``text``.
    """
    if COMMENT_OPEN not in text:
        return text

    out = []
    depth = 0
    i = 0
    n = len(text)
    while i < n:
        if text.startswith(COMMENT_OPEN, i):
            depth += 1
            i += 2
            continue
        if depth > 0 and text.startswith(COMMENT_CLOSE, i):
            depth -= 1
            i += 2
            continue
        if depth == 0 or (keep_newlines and text[i] == "\n"):
            out.append(text[i])
        i += 1

    if depth > 0:
        logger.debug("Unterminated comment, %d level(s) still open at end of buffer", depth)
    return "".join(out)


def find_outside_comments(text: str, char: str, start: int = 0) -> int:
    """Index of the first ``char`` at or after ``start`` that is not inside
    a block comment, or -1."""
    depth = 0
    i = start
    n = len(text)
    while i < n:
        if text.startswith(COMMENT_OPEN, i):
            depth += 1
            i += 2
            continue
        if depth > 0 and text.startswith(COMMENT_CLOSE, i):
            depth -= 1
            i += 2
            continue
        if depth == 0 and text[i] == char:
            return i
        i += 1
    return -1


# ═══════════════════════════════════════════════════════════════════════
#  Token Locator
# ═══════════════════════════════════════════════════════════════════════

def find_substring(buffer: str, needle: str, start: int = 0) -> int:
    """First index of ``needle`` in ``buffer`` (from ``start``), or -1."""
    if not needle:
        return -1
    return buffer.find(needle, start)


def find_whole_word(buffer: str, needle: str, start: int = 0) -> int:
    """Like find_substring(), but only accepts a match that stands alone as
    a declarator name.

    The character before the match must be whitespace, ``*`` or ``,`` (or
    the match starts the buffer); the character after it must be
    whitespace or one of ``; [ ) ,``.  A parameter ``o`` is therefore not
    found inside ``struct obs``, nor ``w`` inside ``struct wor *w`` until the
    real ``w`` is reached.
    """
    if not needle:
        return -1

    n = len(buffer)
    i = buffer.find(needle, start)
    while i != -1:
        end = i + len(needle)
        before_ok = i == 0 or buffer[i - 1].isspace() or buffer[i - 1] in _WORD_PREFIX
        after_ok = end < n and (buffer[end].isspace() or buffer[end] in _WORD_SUFFIX)
        if before_ok and after_ok:
            return i
        i = buffer.find(needle, i + 1)
    return -1
