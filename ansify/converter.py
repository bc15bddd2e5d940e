"""
Converter — the line-by-line driver.

  1. Every line goes through the classifier.
  2. An interesting line with a ``(`` outside comments starts a candidate;
     the assembler gathers it into a DefinitionUnit.
  3. Prototypes and externs are copied through; function definitions are
     handed to the writer for the requested mode.
  4. Everything else is copied through unchanged (nothing at all is copied
     in prototype mode).

Results are returned as a ConversionResult carrying the output lines and
any non-fatal diagnostics.  DefinitionOverflowError is the only exception
that escapes a run.
"""

import os
import logging
from enum import Enum
from typing import Iterable, List, Optional

from pydantic import BaseModel

from ansify.assembler import (
    DEFAULT_MAX_LINES,
    DefinitionAssembler,
    DefinitionUnit,
    is_function,
)
from ansify.ansi_writer import (
    is_ansi,
    render_ansi,
    prototype_from_ansi,
    function_label,
)
from ansify.kr_writer import render_kr
from ansify.line_classifier import ClassifierState, is_interesting
from ansify.source_reader import LineSource, read_source_lines, split_source
from ansify.text_scan import strip_comments

logger = logging.getLogger(__name__)


class ConversionMode(str, Enum):
    ANSI = "ansi"               # K&R → ANSI
    KR = "kr"                   # ANSI → K&R
    PROTOTYPES = "prototypes"   # prototypes only

    @property
    def description(self) -> str:
        return {
            ConversionMode.ANSI: "ANSI",
            ConversionMode.KR: "Kernighan and Ritchie",
            ConversionMode.PROTOTYPES: "prototypes",
        }[self]


class Diagnostic(BaseModel):
    kind: str                           # "parameter_not_found"
    message: str
    parameter: Optional[str] = None
    function: Optional[str] = None
    line_number: int = 0


class ConversionResult(BaseModel):
    mode: ConversionMode
    lines: List[str] = []
    diagnostics: List[Diagnostic] = []
    definitions_seen: int = 0
    definitions_converted: int = 0

    @property
    def text(self) -> str:
        return "".join(line + "\n" for line in self.lines)

    def to_markdown(self) -> str:
        md = f"**Mode**: {self.mode.description}\n"
        md += f"**Function definitions**: {self.definitions_seen} "
        md += f"({self.definitions_converted} converted)\n"
        if self.diagnostics:
            md += "\n#### ⚠ Diagnostics\n"
            for d in self.diagnostics:
                md += f"- line {d.line_number}: {d.message}\n"
        return md


# ═══════════════════════════════════════════════════════════════════════
#  Driver
# ═══════════════════════════════════════════════════════════════════════

def process_lines(
    lines: Iterable[str],
    mode: ConversionMode = ConversionMode.ANSI,
    max_lines: int = DEFAULT_MAX_LINES,
) -> ConversionResult:
    """Convert a sequence of source lines.

    Args:
        lines:      Source lines, with or without their trailing newline.
        mode:       Output style.
        max_lines:  Largest number of lines one definition may span.

    Raises:
        DefinitionOverflowError: a candidate definition exceeded max_lines.
        ValueError: max_lines is not positive or mode is unknown.
    """
    if max_lines < 1:
        raise ValueError(f"max_lines must be at least 1, got {max_lines}")
    mode = ConversionMode(mode)

    state = ClassifierState()
    source = LineSource(lines)
    assembler = DefinitionAssembler(source, state, max_lines=max_lines)
    result = ConversionResult(mode=mode)
    copy_through = mode is not ConversionMode.PROTOTYPES

    for line in source:
        if not is_interesting(line, state) or "(" not in strip_comments(line):
            # Directive, comment, body, blank line or extern
            if copy_through:
                result.lines.append(line)
            continue

        unit = assembler.assemble(line, source.line_number)
        if not is_function(unit):
            if copy_through:
                result.lines.extend(unit.lines)
            continue

        assembler.complete_body(unit)
        result.definitions_seen += 1
        result.lines.extend(_transcode(unit, mode, result))

    logger.debug(
        "Processed %d line(s): %d definition(s), %d converted, %d diagnostic(s)",
        source.line_number, result.definitions_seen,
        result.definitions_converted, len(result.diagnostics),
    )
    return result


def _transcode(unit: DefinitionUnit, mode: ConversionMode, result: ConversionResult) -> List[str]:
    if mode is ConversionMode.KR:
        if not is_ansi(unit):
            return list(unit.lines)
        result.definitions_converted += 1
        return render_kr(unit)

    if is_ansi(unit):
        if mode is ConversionMode.ANSI:
            return list(unit.lines)
        return prototype_from_ansi(unit)

    rendering = render_ansi(unit, prototype=mode is ConversionMode.PROTOTYPES)
    result.definitions_converted += 1
    label = function_label(rendering.header)
    for name in rendering.missing:
        result.diagnostics.append(Diagnostic(
            kind="parameter_not_found",
            message=f"Parameter `{name}' was not found in definitions for function: {label}",
            parameter=name,
            function=label,
            line_number=unit.start_line,
        ))
    return rendering.lines


def convert_text(
    text: str,
    mode: ConversionMode = ConversionMode.ANSI,
    max_lines: int = DEFAULT_MAX_LINES,
) -> ConversionResult:
    """Convert a whole C source held in memory."""
    return process_lines(split_source(text), mode=mode, max_lines=max_lines)


def convert_file(
    input_path: str,
    output_path: Optional[str] = None,
    mode: ConversionMode = ConversionMode.ANSI,
    max_lines: int = DEFAULT_MAX_LINES,
    dry_run: bool = False,
) -> ConversionResult:
    """Convert ``input_path`` and write the result to ``output_path``.

    With no output path (or dry_run) nothing is written; the caller gets
    the ConversionResult either way.

    Raises:
        SourceReadError: the input could not be read.
        DefinitionOverflowError: a definition exceeded max_lines.
    """
    lines = read_source_lines(input_path)
    result = process_lines(lines, mode=mode, max_lines=max_lines)

    if output_path and not dry_run:
        out_dir = os.path.dirname(os.path.abspath(output_path))
        os.makedirs(out_dir, exist_ok=True)
        with open(output_path, "w", encoding="utf-8", newline="\n") as f:
            f.write(result.text)
        logger.info(
            "Wrote %s (%d definition(s) converted, %d diagnostic(s))",
            output_path, result.definitions_converted, len(result.diagnostics),
        )
    elif output_path:
        logger.info("[Dry Run] Would write %d line(s) to %s", len(result.lines), output_path)

    return result
