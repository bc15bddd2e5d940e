"""
Signature Checker — AST-based verification of converted output using
tree-sitter.

The converter itself is purely lexical.  This module gives an independent
opinion on its output:
  • does the converted file still parse as C?
  • which parameter names and types does each function really have?
  • does K&R → ANSI → K&R → ANSI preserve every name → type association?

tree-sitter reads ANSI parameter lists reliably, so bindings are always
compared between two ANSI renderings.
"""

import re
import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional

import tree_sitter_c as tsc
from tree_sitter import Language, Parser, Node

from ansify.assembler import DEFAULT_MAX_LINES
from ansify.converter import ConversionMode, convert_text

logger = logging.getLogger(__name__)

C_LANGUAGE = Language(tsc.language())
_parser = Parser(C_LANGUAGE)


# ═══════════════════════════════════════════════════════════════════════
#  Data types
# ═══════════════════════════════════════════════════════════════════════

@dataclass
class ParamInfo:
    """One parameter as tree-sitter sees it."""
    name: str
    type_str: str           # declaration with the name removed, normalised


@dataclass
class FunctionSignature:
    name: str
    params: List[ParamInfo] = field(default_factory=list)
    is_definition: bool = True
    line: int = 0           # 1-indexed

    def bindings(self) -> Dict[str, str]:
        return {p.name: p.type_str for p in self.params}


@dataclass
class RoundTripReport:
    functions_checked: int = 0
    mismatches: List[str] = field(default_factory=list)
    ansi_has_errors: bool = False
    round_trip_has_errors: bool = False
    diagnostics: List[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not (self.mismatches or self.ansi_has_errors or self.round_trip_has_errors)

    def to_markdown(self) -> str:
        md = "### Round-trip Verification\n"
        md += f"**Result**: {'PASS' if self.ok else 'FAIL'}\n"
        md += f"**Functions checked**: {self.functions_checked}\n"
        if self.ansi_has_errors:
            md += "- ANSI output does not parse cleanly\n"
        if self.round_trip_has_errors:
            md += "- Round-tripped output does not parse cleanly\n"
        for m in self.mismatches:
            md += f"- {m}\n"
        for d in self.diagnostics:
            md += f"- ⚠ {d}\n"
        return md


# ═══════════════════════════════════════════════════════════════════════
#  Parsing helpers
# ═══════════════════════════════════════════════════════════════════════

def _parse(source: str):
    data = source.encode("utf-8")
    return data, _parser.parse(data)


def _node_text(node: Node, source: bytes) -> str:
    return source[node.start_byte:node.end_byte].decode("utf-8", errors="replace")


def _normalise_type(type_str: str) -> str:
    s = re.sub(r"\s+", " ", type_str).strip()
    s = re.sub(r"\s*(\*+)\s*", r" \1", s)
    s = re.sub(r"\s*\[", "[", s)
    return s.strip()


def _function_declarator(node: Optional[Node]) -> Optional[Node]:
    """Descend through pointer/parenthesised declarators to the function one."""
    while node is not None:
        if node.type == "function_declarator":
            return node
        if node.type in ("pointer_declarator", "parenthesized_declarator", "attributed_declarator"):
            node = node.child_by_field_name("declarator") or (
                node.named_children[-1] if node.named_children else None
            )
            continue
        return None
    return None


def _first_identifier(node: Optional[Node]) -> Optional[Node]:
    if node is None:
        return None
    if node.type == "identifier":
        return node
    for child in node.children:
        found = _first_identifier(child)
        if found is not None:
            return found
    return None


def _param_info(node: Node, source: bytes) -> Optional[ParamInfo]:
    ident = _first_identifier(node.child_by_field_name("declarator"))
    if ident is None:
        return None     # `void`, or an unnamed parameter in a prototype
    full = _node_text(node, source)
    rel_start = ident.start_byte - node.start_byte
    rel_end = ident.end_byte - node.start_byte
    raw = source[node.start_byte:node.end_byte]
    type_bytes = raw[:rel_start] + raw[rel_end:]
    type_str = _normalise_type(type_bytes.decode("utf-8", errors="replace"))
    logger.debug("param %s: %s (from %r)", _node_text(ident, source), type_str, full)
    return ParamInfo(name=_node_text(ident, source), type_str=type_str)


# ═══════════════════════════════════════════════════════════════════════
#  Public API
# ═══════════════════════════════════════════════════════════════════════

def has_syntax_errors(source: str) -> bool:
    _, tree = _parse(source)
    return tree.root_node.has_error


def extract_signatures(source: str) -> List[FunctionSignature]:
    """Top-level function definitions and prototypes with their parameters."""
    data, tree = _parse(source)
    signatures = []
    for node in tree.root_node.named_children:
        if node.type == "function_definition":
            declarators = [node.child_by_field_name("declarator")]
            is_definition = True
        elif node.type == "declaration":
            declarators = node.children_by_field_name("declarator")
            is_definition = False
        else:
            continue

        for decl in declarators:
            func = _function_declarator(decl)
            if func is None:
                continue
            name_node = _first_identifier(func.child_by_field_name("declarator"))
            params_node = func.child_by_field_name("parameters")
            if name_node is None or params_node is None:
                continue
            sig = FunctionSignature(
                name=_node_text(name_node, data),
                is_definition=is_definition,
                line=node.start_point[0] + 1,
            )
            for child in params_node.named_children:
                if child.type == "parameter_declaration":
                    info = _param_info(child, data)
                    if info:
                        sig.params.append(info)
            signatures.append(sig)
    return signatures


def verify_round_trip(kr_source: str, max_lines: int = DEFAULT_MAX_LINES) -> RoundTripReport:
    """Check that ANSI and K&R conversions agree on every parameter's type.

    Raises DefinitionOverflowError like the converter does.
    """
    report = RoundTripReport()

    first = convert_text(kr_source, ConversionMode.ANSI, max_lines)
    back = convert_text(first.text, ConversionMode.KR, max_lines)
    second = convert_text(back.text, ConversionMode.ANSI, max_lines)

    for result in (first, back, second):
        report.diagnostics.extend(d.message for d in result.diagnostics)

    report.ansi_has_errors = has_syntax_errors(first.text)
    report.round_trip_has_errors = has_syntax_errors(second.text)

    before = {s.name: s for s in extract_signatures(first.text) if s.is_definition}
    after = {s.name: s for s in extract_signatures(second.text) if s.is_definition}
    report.functions_checked = len(before)

    for name, sig in before.items():
        other = after.get(name)
        if other is None:
            report.mismatches.append(f"`{name}` disappeared after the round trip")
            continue
        if [p.name for p in sig.params] != [p.name for p in other.params]:
            report.mismatches.append(
                f"`{name}` parameter order changed: "
                f"{[p.name for p in sig.params]} → {[p.name for p in other.params]}"
            )
            continue
        for param in sig.params:
            new_type = other.bindings()[param.name]
            if new_type != param.type_str:
                report.mismatches.append(
                    f"`{name}`: `{param.name}` was `{param.type_str}`, now `{new_type}`"
                )

    if not report.ok:
        logger.warning("Round trip found %d mismatch(es)", len(report.mismatches))
    return report
