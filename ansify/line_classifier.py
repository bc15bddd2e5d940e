"""
Line Classifier — decides whether a source line could start a function
definition.

The classifier is an incremental state machine.  Its counters (brace
depth, quote flags, block-comment depth) run across the whole file, so
every line that is consumed must pass through classify_line(), even when
the caller already knows what the line is.  Each file gets its own
ClassifierState; nothing is shared between runs.
"""

import logging
from dataclasses import dataclass
from enum import Enum

logger = logging.getLogger(__name__)

DIRECTIVE_MARKER = "#"


class LineClass(Enum):
    """Outcome of classifying one line."""
    INTERESTING = "interesting"          # top level, may begin a definition
    NOT_INTERESTING = "not_interesting"  # directive, blank, comment, body, string ...


@dataclass
class ClassifierState:
    """Running lexical counters carried from one line to the next."""
    brace_depth: int = 0
    in_double_quote: bool = False
    in_single_quote: bool = False
    comment_depth: int = 0

    def at_top_level(self) -> bool:
        return (
            self.brace_depth == 0
            and not self.in_double_quote
            and not self.in_single_quote
            and self.comment_depth == 0
        )

    def reset(self):
        self.brace_depth = 0
        self.in_double_quote = False
        self.in_single_quote = False
        self.comment_depth = 0


def classify_line(line: str, state: ClassifierState) -> LineClass:
    """Classify ``line`` (newline already stripped) and update ``state``.

    A line is interesting only if all counters were clear on entry, it is
    not a preprocessor directive, it is not blank, it does not begin with
    a block comment and it contains no ``//``.
    """
    stripped = line.lstrip()

    # Directives are copied verbatim and never touch the counters.
    if stripped.startswith(DIRECTIVE_MARKER):
        return LineClass.NOT_INTERESTING
    if not stripped:
        return LineClass.NOT_INTERESTING

    interesting = state.at_top_level()
    if stripped.startswith("/*"):
        interesting = False

    i = 0
    n = len(line)
    while i < n:
        ch = line[i]
        nxt = line[i + 1] if i + 1 < n else ""
        in_string = state.in_double_quote or state.in_single_quote

        if ch == "/" and nxt == "/":
            interesting = False
            if not in_string and state.comment_depth == 0:
                # Line comment: nothing after this can change the counters.
                break

        if in_string:
            if ch == "\\":
                i += 2
                continue
            if ch == '"' and state.in_double_quote:
                state.in_double_quote = False
            elif ch == "'" and state.in_single_quote:
                state.in_single_quote = False
            i += 1
            continue

        if ch == "/" and nxt == "*":
            state.comment_depth += 1
            i += 2
            continue

        if state.comment_depth > 0:
            if ch == "*" and nxt == "/":
                state.comment_depth -= 1
                i += 2
                continue
            i += 1
            continue

        # Plain code
        if ch == '"':
            state.in_double_quote = True
        elif ch == "'":
            state.in_single_quote = True
        elif ch == "{":
            state.brace_depth += 1
        elif ch == "}":
            state.brace_depth -= 1
        i += 1

    if state.brace_depth < 0:
        logger.debug("Brace depth went negative (%d) on line: %s", state.brace_depth, line)

    return LineClass.INTERESTING if interesting else LineClass.NOT_INTERESTING


def is_interesting(line: str, state: ClassifierState) -> bool:
    """Boolean convenience wrapper around classify_line()."""
    return classify_line(line, state) is LineClass.INTERESTING
