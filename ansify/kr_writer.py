"""
K&R Writer — ANSI → K&R emission.

    int add(int a, int b)         int add(a, b)
    {                       →     int a ;
                                  int b ;
                                  {

The parameter list is split on commas at the top nesting level.  Each
parameter's name is the trailing identifier of its span; the full span
(type, stars, name and array brackets) becomes its declaration line.
"""

import logging
from typing import List, Tuple

from ansify.assembler import DefinitionUnit
from ansify.ansi_writer import raw_header, body_tail
from ansify.text_scan import strip_comments, find_whole_word

logger = logging.getLogger(__name__)

EMPTY_LIST_KEYWORDS = ("void", "VOID")


def render_kr(unit: DefinitionUnit) -> List[str]:
    """Rewrite an ANSI unit as a K&R definition."""
    raw = unit.joined()
    scratch = strip_comments(raw)
    header = raw_header(raw)

    open_idx = scratch.find("(")
    close_idx = _matching_paren(scratch, open_idx)
    params_text = scratch[open_idx + 1:close_idx]
    tail = body_tail(unit)

    stripped = params_text.strip()
    if not stripped or stripped in EMPTY_LIST_KEYWORDS:
        return (header + ")\n{" + tail).split("\n")

    # Re-search inside "(...)" so every span has a delimiter on both sides.
    buffer = "(" + params_text + ")"
    names = []
    declarations = []
    for span_start, span_end in split_parameters(params_text):
        span = params_text[span_start:span_end]
        name = parameter_name(span)
        if not name:
            logger.warning("Could not isolate a parameter name in `%s'", span.strip())
            continue
        names.append(name)
        declarations.append(kr_declaration(buffer, name, span_start + 1, span))

    lines = [header + ", ".join(names) + ")"]
    lines.extend(f"{decl} ;" for decl in declarations)
    lines.append("{" + tail)
    return "\n".join(lines).split("\n")


def split_parameters(params_text: str) -> List[Tuple[int, int]]:
    """(start, end) spans of each top-level comma-separated parameter."""
    spans = []
    depth = 0
    start = 0
    for i, ch in enumerate(params_text):
        if ch in "([":
            depth += 1
        elif ch in ")]":
            depth -= 1
        elif ch == "," and depth == 0:
            spans.append((start, i))
            start = i + 1
    spans.append((start, len(params_text)))
    return spans


def parameter_name(span: str) -> str:
    """Trailing identifier of a parameter span, array brackets removed."""
    text = span.strip()
    while text.endswith("]"):
        bracket = text.rfind("[")
        if bracket == -1:
            break
        text = text[:bracket].rstrip()

    i = len(text)
    while i > 0 and not (text[i - 1].isspace() or text[i - 1] == "*"):
        i -= 1
    return text[i:]


def kr_declaration(buffer: str, name: str, span_start: int, span: str) -> str:
    """Type, stars, name and array suffix of ``name`` as one declaration."""
    pos = find_whole_word(buffer, name, span_start)
    if pos == -1:
        return " ".join(span.split())

    start = pos
    while start >= 0 and buffer[start] not in "(,":
        start -= 1
    start += 1

    stop = pos
    depth = 0
    while stop < len(buffer):
        ch = buffer[stop]
        if ch == "[":
            depth += 1
        elif ch == "]":
            depth -= 1
        elif ch in ",)" and depth <= 0:
            break
        stop += 1

    return " ".join(buffer[start:stop].split())


def _matching_paren(text: str, open_idx: int) -> int:
    depth = 0
    for i in range(open_idx, len(text)):
        if text[i] == "(":
            depth += 1
        elif text[i] == ")":
            depth -= 1
            if depth == 0:
                return i
    return len(text)
