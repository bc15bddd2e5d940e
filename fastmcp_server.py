"""
ANSI C Converter — MCP Server

Exposes tools via the Model Context Protocol:

  1. convert_source       — convert C text held in memory (ANSI / K&R / prototypes)
  2. convert_file         — convert a file on disk, optionally in place
  3. generate_prototypes  — list the prototypes for every definition in a file
  4. verify_conversion    — round-trip + syntax check of a K&R source
"""

from mcp.server.fastmcp import FastMCP
import os
import sys
import logging

# Ensure the ansify package is importable when run from a checkout
sys.path.append(os.path.dirname(os.path.abspath(__file__)))

from ansify.assembler import DEFAULT_MAX_LINES, DefinitionOverflowError
from ansify.converter import ConversionMode, ConversionResult, convert_file as _convert_file, convert_text
from ansify.signature_checker import has_syntax_errors, verify_round_trip
from ansify.source_reader import SourceReadError

logger = logging.getLogger(__name__)

# ═══════════════════════════════════════════════════════════════════════
#  Server Setup
# ═══════════════════════════════════════════════════════════════════════

mcp = FastMCP("ANSI C Converter")


def _parse_mode(mode: str):
    """Return (ConversionMode, error_message).  Exactly one is non-None."""
    try:
        return ConversionMode(mode.strip().lower()), None
    except ValueError:
        valid = ", ".join(m.value for m in ConversionMode)
        return None, f"Error: Unknown mode `{mode}`. Expected one of: {valid}"


def _format_result(result: ConversionResult, title: str) -> str:
    md = f"## {title}\n\n"
    md += result.to_markdown()
    md += "\n```c\n" + result.text + "```\n"
    return md


# ═══════════════════════════════════════════════════════════════════════
#  Tool 1 — Convert Source
# ═══════════════════════════════════════════════════════════════════════

@mcp.tool()
def convert_source(source: str, mode: str = "ansi", max_lines: int = DEFAULT_MAX_LINES) -> str:
    """
    Converts C source text between K&R and ANSI function definition styles.

    Args:
        source:     The C source text.
        mode:       "ansi" (K&R → ANSI), "kr" (ANSI → K&R) or
                    "prototypes" (emit prototypes only).
        max_lines:  Maximum number of lines a single definition may span.
    """
    conv_mode, err = _parse_mode(mode)
    if err:
        return err
    try:
        result = convert_text(source, conv_mode, max_lines)
    except DefinitionOverflowError as e:
        return f"Error: {e}"
    except ValueError as e:
        return f"Error: {e}"
    return _format_result(result, f"Converted to {conv_mode.description}")


# ═══════════════════════════════════════════════════════════════════════
#  Tool 2 — Convert File
# ═══════════════════════════════════════════════════════════════════════

@mcp.tool()
def convert_file(input_path: str, output_path: str = "", mode: str = "ansi",
                 dry_run: bool = False) -> str:
    """
    Converts a C file on disk.

    If output_path is empty the input file is rewritten in place, but only
    when the converted text parses at least as cleanly as the original.
    Prototype mode always needs an output_path.

    Args:
        input_path:   Path to the C source file.
        output_path:  Destination file; empty to convert in place.
        mode:         "ansi", "kr" or "prototypes".
        dry_run:      Report what would change without writing anything.
    """
    conv_mode, err = _parse_mode(mode)
    if err:
        return err
    if not os.path.exists(input_path):
        return f"Error: Input file not found at {input_path}"

    in_place = not output_path
    if in_place and conv_mode is ConversionMode.PROTOTYPES:
        return (
            "Error: Prototype generation cannot overwrite the source file; "
            "give an output_path or use generate_prototypes."
        )
    try:
        if in_place:
            result = _convert_file(input_path, None, conv_mode, dry_run=True)
        else:
            result = _convert_file(input_path, output_path, conv_mode, dry_run=dry_run)
    except (SourceReadError, DefinitionOverflowError) as e:
        return f"Error: {e}"

    if in_place and not dry_run:
        with open(input_path, "r", encoding="utf-8", errors="replace") as f:
            original = f.read()
        if has_syntax_errors(result.text) and not has_syntax_errors(original):
            return (
                f"Error: Conversion of `{input_path}` produced text that does not parse; "
                f"file left unchanged.\n\n" + result.to_markdown()
            )
        with open(input_path, "w", encoding="utf-8", newline="\n") as f:
            f.write(result.text)
        logger.info("Converted %s in place", input_path)

    target = input_path if in_place else output_path
    prefix = "[Dry Run] Would write" if dry_run else "Wrote"
    return f"{prefix} `{target}`\n\n" + result.to_markdown()


# ═══════════════════════════════════════════════════════════════════════
#  Tool 3 — Generate Prototypes
# ═══════════════════════════════════════════════════════════════════════

@mcp.tool()
def generate_prototypes(input_path: str) -> str:
    """
    Returns ANSI prototypes for every function defined in a C file,
    whichever style the definitions are written in.

    Args:
        input_path: Path to the C source file.
    """
    try:
        result = _convert_file(input_path, None, ConversionMode.PROTOTYPES)
    except (SourceReadError, DefinitionOverflowError) as e:
        return f"Error: {e}"
    return _format_result(result, f"Prototypes — `{input_path}`")


# ═══════════════════════════════════════════════════════════════════════
#  Tool 4 — Verify Conversion
# ═══════════════════════════════════════════════════════════════════════

@mcp.tool()
def verify_conversion(source: str) -> str:
    """
    Converts K&R source to ANSI and back again, then uses tree-sitter to
    confirm that every parameter keeps its type and the output parses.

    Args:
        source: C source text with K&R (or ANSI) definitions.
    """
    try:
        report = verify_round_trip(source)
    except DefinitionOverflowError as e:
        return f"Error: {e}"
    return report.to_markdown()


if __name__ == "__main__":
    # Debug: Print loaded tools to stderr (visible in MCP logs)
    try:
        if hasattr(mcp, "_tool_manager") and hasattr(mcp._tool_manager, "_tools"):
            tools = mcp._tool_manager._tools.keys()
            print(f"DEBUG: ANSI C Converter starting with {len(tools)} tools: {list(tools)}", file=sys.stderr)
        else:
            print("DEBUG: ANSI C Converter starting (cannot inspect tools)", file=sys.stderr)
    except Exception as e:
        print(f"DEBUG: Error inspecting tools: {e}", file=sys.stderr)

    mcp.run()
