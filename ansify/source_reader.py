"""
Source Reader — the line source that feeds the converter.

Guards:
  • Skips binary files (null-byte check)
  • Handles encoding errors gracefully (undecodable bytes are replaced)
  • Strips the line terminator (LF or CRLF) before a line is classified
"""

import os
import logging
from typing import Iterable, Iterator, List

logger = logging.getLogger(__name__)

BINARY_PROBE_BYTES = 8192


class SourceReadError(Exception):
    """The input file could not be read as C source text."""


class LineSource:
    """Sequential, numbered line reader over any iterable of text lines.

    The converter's main loop and the definition assembler pull from the
    same LineSource, so ``line_number`` always names the line most
    recently handed out (1-indexed; 0 before the first line).
    """

    def __init__(self, lines: Iterable[str]):
        self._lines: Iterator[str] = iter(lines)
        self.line_number = 0

    def __iter__(self):
        return self

    def __next__(self) -> str:
        line = next(self._lines)
        self.line_number += 1
        if line.endswith("\n"):
            line = line[:-1]
        if line.endswith("\r"):
            line = line[:-1]
        return line


def split_source(text: str) -> List[str]:
    """Split C text into lines on LF only.

    ``str.splitlines()`` would also break on form feeds and other
    separators that legitimately appear inside old C sources.
    """
    if not text:
        return []
    lines = text.split("\n")
    if lines[-1] == "":
        lines.pop()
    return lines


def read_source_lines(file_path: str) -> List[str]:
    """Read a C source file and return its lines without terminators.

    Raises SourceReadError for missing, non-regular or binary files.
    """
    if not os.path.isfile(file_path):
        raise SourceReadError(f"Input file not found: {file_path}")
    try:
        with open(file_path, "rb") as fb:
            head = fb.read(BINARY_PROBE_BYTES)
        if b"\x00" in head:
            logger.warning("Skipping binary file: %s", file_path)
            raise SourceReadError(f"Input file looks binary: {file_path}")
        with open(file_path, "r", encoding="utf-8", errors="replace", newline="") as f:
            text = f.read()
    except OSError as e:
        logger.error("Error reading %s: %s", file_path, e)
        raise SourceReadError(f"Cannot read {file_path}: {e}") from e

    return [line.rstrip("\r") for line in split_source(text)]
