"""
ANSI Writer — style detection and K&R → ANSI / prototype emission.

A K&R definition names its parameters in the parenthesised list and
declares their types afterwards:

    void setpt(p, x, y)
    struct point *p;
    int x, y;
    {

For each name in the list the writer finds the declaration that mentions
it as a whole word, then splices ``<type> <stars><name><array>``:

    void setpt(struct point *p,
                int x,
                int y)
    {

Comments inside a converted definition are dropped; the function header
(everything up to the opening parenthesis) is copied from the original
text untouched.
"""

import logging
from dataclasses import dataclass, field
from typing import List

from ansify.assembler import DefinitionUnit
from ansify.text_scan import strip_comments, find_whole_word, find_outside_comments

logger = logging.getLogger(__name__)

IMPLICIT_TYPE = "int"   # C89 type of an undeclared K&R parameter


@dataclass
class ParameterBinding:
    """A K&R parameter name and where its declaration was found."""
    name: str
    offset: int             # index of the name inside the declaration text, -1 if missing


@dataclass
class AnsiRendering:
    """Output lines for one unit plus any parameters that had no declaration."""
    lines: List[str]
    header: str = ""
    missing: List[str] = field(default_factory=list)


# ═══════════════════════════════════════════════════════════════════════
#  Style detection
# ═══════════════════════════════════════════════════════════════════════

def is_ansi(unit: DefinitionUnit) -> bool:
    """A unit is already ANSI when nothing before its body brace holds a ``;``."""
    scratch = strip_comments(unit.joined())
    brace = scratch.find("{")
    head = scratch if brace == -1 else scratch[:brace]
    return ";" not in head


def raw_header(raw: str) -> str:
    """Original text up to and including the parameter list's ``(``."""
    paren = find_outside_comments(raw, "(")
    if paren == -1:
        return raw
    return raw[:paren + 1]


def body_tail(unit: DefinitionUnit) -> str:
    """Whatever followed the opening ``{`` on its line."""
    line = unit.last_line
    brace = find_outside_comments(line, "{")
    if brace == -1:
        return ""
    return line[brace + 1:]


def function_label(header: str) -> str:
    """``int foo(`` → ``int foo()``, used in diagnostics."""
    return " ".join(header.split()) + ")"


# ═══════════════════════════════════════════════════════════════════════
#  Rendering
# ═══════════════════════════════════════════════════════════════════════

def prototype_from_ansi(unit: DefinitionUnit) -> List[str]:
    """Cut an ANSI definition at its ``{`` and terminate it with ``;``.

    A brace on a line of its own closes the previous line instead.  The
    line that receives the ``;`` loses its comments.
    """
    out = []
    previous = ""
    for raw, code in zip(unit.lines, unit.code_lines()):
        brace = code.find("{")
        if brace == -1:
            out.append(raw)
            previous = code
            continue
        head = code[:brace].rstrip()
        if head or not out:
            out.append(head + ";")
        else:
            out[-1] = previous.rstrip() + ";"
        break
    return out


def split_kr_names(param_list: str) -> List[str]:
    """``a, b ,c`` → ``['a', 'b', 'c']``."""
    return [name.strip() for name in param_list.split(",") if name.strip()]


def render_ansi(unit: DefinitionUnit, prototype: bool = False) -> AnsiRendering:
    """Rewrite a K&R unit as an ANSI definition (or a prototype)."""
    raw = unit.joined()
    scratch = strip_comments(raw)
    header = raw_header(raw)

    open_idx = scratch.find("(")
    close_idx = scratch.find(")", open_idx + 1)
    if close_idx == -1:
        close_idx = len(scratch)
    brace_idx = scratch.find("{", close_idx)
    if brace_idx == -1:
        brace_idx = len(scratch)

    names = split_kr_names(scratch[open_idx + 1:close_idx])
    declarations = scratch[close_idx + 1:brace_idx]

    last_header_line = header.split("\n")[-1]
    indent = " " * (len(last_header_line) + 1)

    rendering = AnsiRendering(lines=[], header=header)
    params = []
    for name in names:
        binding = ParameterBinding(name=name, offset=find_whole_word(declarations, name))
        if binding.offset == -1:
            logger.warning(
                "Parameter `%s' was not found in definitions for function: %s",
                name, function_label(header),
            )
            rendering.missing.append(name)
            params.append(f"{IMPLICIT_TYPE} {name}")
            continue
        params.append(ansi_parameter(declarations, binding))

    text = header + (",\n" + indent).join(params)
    if prototype:
        text += ");"
    else:
        text += ")\n{" + body_tail(unit)

    rendering.lines = text.split("\n")
    return rendering


def ansi_parameter(declarations: str, binding: ParameterBinding) -> str:
    """Build ``<type> <stars><name><array>`` for one located parameter."""
    name = binding.name
    pos = binding.offset
    n = len(declarations)

    # Start of the declaration: just past the previous ';' (or buffer start).
    start = pos
    while start > 0 and declarations[start] != ";":
        start -= 1
    if declarations[start] == ";":
        start += 1
    while start < pos and declarations[start].isspace():
        start += 1

    # Several names sharing one type: the type ends before the first comma.
    stop = pos
    comma = declarations.find(",", start, pos + 1)
    if comma != -1:
        stop = comma
    while stop < n and declarations[stop] not in ",;":
        stop += 1

    type_text = _leading_type(declarations, start, stop)
    if not type_text:
        type_text = IMPLICIT_TYPE

    return f"{type_text} {_stars_before(declarations, pos)}{name}{_array_suffix(declarations, pos + len(name))}"


def _leading_type(declarations: str, start: int, stop: int) -> str:
    """Type text of the declarator ending just before ``stop``.

    Drops the first declarator (its array brackets, its name and its stars)
    so only the shared type specifiers remain.
    """
    end = stop
    while end > start and declarations[end - 1].isspace():
        end -= 1
    while end > start and declarations[end - 1] == "]":
        bracket = declarations.rfind("[", start, end)
        if bracket == -1:
            break
        end = bracket
        while end > start and declarations[end - 1].isspace():
            end -= 1
    while end > start and not (declarations[end - 1].isspace() or declarations[end - 1] == "*"):
        end -= 1
    while end > start and (declarations[end - 1].isspace() or declarations[end - 1] == "*"):
        end -= 1
    return declarations[start:end]


def _stars_before(declarations: str, pos: int) -> str:
    stars = ""
    i = pos - 1
    while i >= 0 and (declarations[i].isspace() or declarations[i] == "*"):
        if declarations[i] == "*":
            stars += "*"
        i -= 1
    return stars


def _array_suffix(declarations: str, end: int) -> str:
    stop = end
    while stop < len(declarations) and declarations[stop] not in ",;":
        stop += 1
    suffix = declarations[end:stop].strip()
    if suffix.startswith("["):
        return suffix
    return ""
