"""Mermaid syntax checks and best-effort repair."""

from __future__ import annotations

import re

from loguru import logger

from mermaid_watch.schemas import DiagramError, DiagramErrorKind, FixResult

SUPPORTED_TYPES: tuple[str, ...] = (
    "flowchart",
    "graph",
    "sequenceDiagram",
    "classDiagram",
    "stateDiagram",
    "gantt",
    "pie",
    "erDiagram",
    "journey",
    "gitgraph",
    "mindmap",
    "timeline",
    "quadrantChart",
    "requirement",
    "C4Context",
    "C4Container",
    "C4Component",
    "C4Dynamic",
    "C4Deployment",
)

# Longest first-line that is still treated as a diagram type declaration.
MAX_DECLARATION_LENGTH = 50

_LEADING_IDENT = re.compile(r"^(\w+)")
# A node definition: a run of non-syntax characters immediately followed by "[".
_NODE_DEF = re.compile(r"([^\s\[\](){}<>|\"'`;,&]+)(\[)")
# Link text written without spaces: --, ==, -.-, ~~~ and similar runs.
_CONNECTOR = re.compile(r"[-=.~]{2,}")
_INVALID_ID_CHARS = re.compile(r"[^A-Za-z0-9_]")
_VALID_ARROW = re.compile(r"--[->]|==>")
_BARE_DOUBLE_DASH = re.compile(r"(?<![<\-])--(?![->])")
_LABEL = re.compile(r"\[([^\[\]]*[^\w\s\[\]][^\[\]]*)\]")


def sanitize_node_id(node_id: str) -> str:
    """Replace characters Mermaid rejects in ids and avoid a leading digit."""
    sanitized = _INVALID_ID_CHARS.sub("_", node_id)
    return re.sub(r"^[0-9]", r"_\g<0>", sanitized)


def _split_node_token(token: str) -> tuple[str, str]:
    """Split "A--B" style tokens into (connector prefix, node id)."""
    parts = list(_CONNECTOR.finditer(token))
    if not parts:
        return "", token
    cut = parts[-1].end()
    return token[:cut], token[cut:]


def _node_ids(line: str) -> list[str]:
    ids = []
    for match in _NODE_DEF.finditer(line):
        _, node_id = _split_node_token(match.group(1))
        if node_id:
            ids.append(node_id)
    return ids


def detect_errors(code: str) -> list[DiagramError]:
    """Detect common Mermaid syntax errors.

    Args:
        code: Diagram source text

    Returns:
        Errors in check order: unsupported type, per-line node and arrow
        problems, then whole-source syntax problems
    """
    errors: list[DiagramError] = []
    lines = code.split("\n")

    first_line = lines[0].strip() if lines else ""
    match = _LEADING_IDENT.match(first_line)
    diagram_type = match.group(1) if match else ""
    if diagram_type and diagram_type not in SUPPORTED_TYPES and len(first_line) < MAX_DECLARATION_LENGTH:
        errors.append(DiagramError(
            kind=DiagramErrorKind.UNSUPPORTED,
            message=f"Unsupported diagram type: {diagram_type}",
            line=1,
            suggestion=f"Try one of: {', '.join(SUPPORTED_TYPES[:5])}",
        ))

    for index, line in enumerate(lines, start=1):
        for node_id in _node_ids(line):
            if _INVALID_ID_CHARS.search(node_id):
                errors.append(DiagramError(
                    kind=DiagramErrorKind.NODE,
                    message=(
                        f"Invalid node ID: {node_id}. Node IDs should contain only "
                        "alphanumeric characters and underscores."
                    ),
                    line=index,
                    suggestion=f"Use a valid ID like: {_INVALID_ID_CHARS.sub('_', node_id)}",
                ))

        if "--" in line and not _VALID_ARROW.search(line):
            errors.append(DiagramError(
                kind=DiagramErrorKind.ARROW,
                message="Incomplete arrow syntax. Use --> or ---> for connections.",
                line=index,
                suggestion="Replace -- with --> or --->",
            ))

    if "flowchart" in code and "-->" not in code and "---" not in code:
        errors.append(DiagramError(
            kind=DiagramErrorKind.SYNTAX,
            message="Flowchart detected but no connections found.",
            suggestion="Add connections using --> or ---",
        ))

    return errors


def _fix_node_ids(code: str) -> tuple[str, bool]:
    changed = False

    def replace(match: re.Match[str]) -> str:
        nonlocal changed
        prefix, node_id = _split_node_token(match.group(1))
        if not node_id or not _INVALID_ID_CHARS.search(node_id):
            return match.group(0)
        changed = True
        return f"{prefix}{sanitize_node_id(node_id)}{match.group(2)}"

    return _NODE_DEF.sub(replace, code), changed


def _quote_labels(code: str) -> tuple[str, bool]:
    changed = False

    def replace(match: re.Match[str]) -> str:
        nonlocal changed
        label = match.group(1)
        # [*] is a state terminal
        if label == "*":
            return match.group(0)
        if label.startswith('"') or label.endswith('"'):
            return match.group(0)
        changed = True
        return f'["{label}"]'

    return _LABEL.sub(replace, code), changed


def attempt_auto_fix(code: str, errors: list[DiagramError]) -> FixResult:
    """Attempt to auto-fix the errors found by detect_errors.

    Node and arrow errors are dropped from the result only when their own
    fix pass rewrote the source; other kinds are always kept.

    Args:
        code: Original diagram source
        errors: Errors reported for that source

    Returns:
        FixResult with the rewritten source when any pass changed it
    """
    fixed_code = code
    kinds = {error.kind for error in errors}

    node_fixed = False
    if DiagramErrorKind.NODE in kinds:
        fixed_code, node_fixed = _fix_node_ids(fixed_code)

    arrow_fixed = False
    if DiagramErrorKind.ARROW in kinds:
        fixed_code = _BARE_DOUBLE_DASH.sub("-->", fixed_code)
        arrow_fixed = True

    fixed_code, labels_fixed = _quote_labels(fixed_code)
    fixed = node_fixed or arrow_fixed or labels_fixed

    suggestions = [
        f"Line {error.line or '?'}: {error.suggestion}"
        for error in errors
        if error.suggestion
    ]

    resolved = set()
    if node_fixed:
        resolved.add(DiagramErrorKind.NODE)
    if arrow_fixed:
        resolved.add(DiagramErrorKind.ARROW)

    remaining = [error for error in errors if error.kind not in resolved]
    if fixed:
        logger.debug(f"Auto-fixed diagram source, {len(errors) - len(remaining)} error(s) resolved")

    return FixResult(
        fixed=fixed,
        fixed_code=fixed_code if fixed else None,
        errors=remaining,
        suggestions=suggestions,
    )


def validate_and_fix(code: str) -> FixResult:
    """Validate diagram source and repair what can be repaired."""
    errors = detect_errors(code)
    if not errors:
        return FixResult(fixed=False, errors=[], suggestions=[])
    return attempt_auto_fix(code, errors)
