"""
Definition Assembler — gathers the lines of one candidate definition.

Once the classifier flags a line that contains a ``(``, the assembler keeps
pulling lines until the candidate is terminated by ``;`` or ``{``.  The
discriminator then decides whether the unit is a real function definition
(body brace, or K&R parameter declarations) or just a prototype/extern.
For K&R definitions the assembler carries on to the opening brace.
"""

import logging
from dataclasses import dataclass, field
from typing import Iterator, List

from ansify.line_classifier import ClassifierState, classify_line
from ansify.text_scan import strip_comments

logger = logging.getLogger(__name__)

DEFAULT_MAX_LINES = 50  # lines allowed in a single definition unit


class DefinitionOverflowError(Exception):
    """A candidate definition ran past the configured line limit.

    This is fatal for the run; ``partial_lines`` holds what was collected.
    """

    def __init__(self, partial_lines: List[str], max_lines: int):
        self.partial_lines = list(partial_lines)
        self.max_lines = max_lines
        listing = "\n".join(self.partial_lines)
        super().__init__(
            f"Too many lines in function definition (limit {max_lines}):\n{listing}"
        )


@dataclass
class DefinitionUnit:
    """The lines forming one prototype, extern or function signature."""
    lines: List[str] = field(default_factory=list)
    start_line: int = 0     # 1-indexed line number of the first line

    def joined(self) -> str:
        return "\n".join(self.lines)

    def code_lines(self) -> List[str]:
        """The unit's lines with block comments removed, one per source line."""
        return strip_comments(self.joined(), keep_newlines=True).split("\n")

    @property
    def last_code_line(self) -> str:
        return self.code_lines()[-1] if self.lines else ""

    @property
    def last_line(self) -> str:
        return self.lines[-1] if self.lines else ""


class DefinitionAssembler:
    """Pulls continuation lines for a candidate from a shared line source."""

    def __init__(self, source: Iterator[str], state: ClassifierState,
                 max_lines: int = DEFAULT_MAX_LINES):
        self._source = source
        self._state = state
        self.max_lines = max_lines

    def assemble(self, first_line: str, start_line: int = 0) -> DefinitionUnit:
        """Collect lines up to the first one holding a ``;`` or ``{`` outside comments."""
        unit = DefinitionUnit(lines=[first_line], start_line=start_line)
        while ";" not in unit.last_code_line and "{" not in unit.last_code_line:
            if not self._append(unit):
                break
        return unit

    def complete_body(self, unit: DefinitionUnit) -> DefinitionUnit:
        """Extend a K&R definition through its trailing declarations to ``{``."""
        code = unit.code_lines()
        if ";" in code[-1] and not any("{" in line for line in code):
            while "{" not in unit.last_code_line:
                if not self._append(unit):
                    break
        return unit

    def _append(self, unit: DefinitionUnit) -> bool:
        try:
            line = next(self._source)
        except StopIteration:
            logger.debug("End of input inside definition starting at line %d", unit.start_line)
            return False

        if len(unit.lines) >= self.max_lines:
            raise DefinitionOverflowError(unit.lines + [line], self.max_lines)

        # Keep the running counters honest; the verdict itself is irrelevant here.
        classify_line(line, self._state)
        unit.lines.append(line)
        return True


# ═══════════════════════════════════════════════════════════════════════
#  Function-vs-Prototype Discriminator
# ═══════════════════════════════════════════════════════════════════════

def is_function(unit: DefinitionUnit) -> bool:
    """True if ``unit`` is a function definition rather than a prototype.

    With a ``{`` present the unit is a definition, provided the brace
    follows a parameter list or a K&R declaration (this keeps aggregate
    initialisers such as ``int t[] = { f(1) };`` out).  Without one, the
    last non-blank character before the final ``;`` decides: ``)`` means a
    prototype, anything else a K&R declaration list.  Comments are
    ignored throughout.
    """
    code = unit.code_lines()
    scratch = "\n".join(code)
    brace = scratch.find("{")
    if brace != -1:
        head = scratch[:brace].rstrip()
        return head.endswith(")") or head.endswith(";")

    line_idx = len(code) - 1
    pos = code[line_idx].find(";")
    if pos == -1:
        # Input ended before any terminator.
        return False
    pos -= 1

    while True:
        line = code[line_idx]
        while pos >= 0 and line[pos].isspace():
            pos -= 1
        if pos >= 0:
            return line[pos] != ")"
        line_idx -= 1
        if line_idx < 0:
            return True
        pos = len(code[line_idx]) - 1
