"""Static reader for configuration objects exported by JS/TS modules.

Test-runner configs are executable modules. Rather than running them, the
module is parsed with tree-sitter and its exported object literal is converted
to Python data. Supported export shapes::

    export default { ... }
    export default defineConfig({ ... })
    export default defineConfig(() => ({ ... }))
    module.exports = { ... }
    const config = { ... }; export default config

Values that cannot be known without evaluation (calls, references to imports,
template strings with substitutions) become ``None``.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING, Any

from doccov.parsing.treesitter import detect_language, node_text, parse_code

if TYPE_CHECKING:
    import tree_sitter

logger = logging.getLogger(__name__)

_ESCAPES = {"n": "\n", "t": "\t", "r": "\r", "0": "\0", "b": "\b", "f": "\f", "v": "\v"}

# Node types that wrap a single expression without changing its value.
_TRANSPARENT = frozenset(
    {"parenthesized_expression", "satisfies_expression", "as_expression", "non_null_expression"}
)


class JSLiteralError(ValueError):
    """Raised when a module has syntax errors or exports no readable object."""


def read_module_export(path: str | Path) -> dict[str, Any]:
    """Read a JS/TS module from disk and return its exported config object.

    Raises:
        OSError: If the file cannot be read.
        JSLiteralError: If the module cannot be read statically.
    """
    file_path = Path(path)
    language = detect_language(file_path)
    if language not in ("javascript", "typescript", "tsx"):
        language = "javascript"
    return parse_module_export(file_path.read_bytes(), language)


def parse_module_export(source: bytes, language: str = "javascript") -> dict[str, Any]:
    """Return the object exported by a module's source."""
    root = parse_code(source, language).root_node
    if root.has_error:
        raise JSLiteralError("Module has syntax errors")

    bindings = _top_level_bindings(root)
    exported = _find_export(root)
    if exported is None:
        raise JSLiteralError("Module has no default export or module.exports assignment")

    value = _resolve_config_node(exported, bindings)
    if not isinstance(value, dict):
        raise JSLiteralError("Module export is not an object literal")
    return value


# ── Export discovery ─────────────────────────────────────────────


def _find_export(root: tree_sitter.Node) -> tree_sitter.Node | None:
    for child in root.named_children:
        if child.type == "export_statement":
            value = child.child_by_field_name("value")
            if value is not None:
                return value
            # `export default config` parses with the identifier as a plain child
            if any(c.type == "default" for c in child.children):
                named = [c for c in child.named_children if c.type != "comment"]
                if named:
                    return named[-1]
        elif child.type == "expression_statement":
            expr = child.named_children[0] if child.named_children else None
            if expr is not None and expr.type == "assignment_expression":
                left = expr.child_by_field_name("left")
                if node_text(left).replace(" ", "") == "module.exports":
                    return expr.child_by_field_name("right")
    return None


def _top_level_bindings(root: tree_sitter.Node) -> dict[str, tree_sitter.Node]:
    bindings: dict[str, tree_sitter.Node] = {}
    for child in root.named_children:
        decl = child
        if child.type == "export_statement":
            decl = child.child_by_field_name("declaration") or child
        if decl.type not in ("lexical_declaration", "variable_declaration"):
            continue
        for declarator in decl.named_children:
            if declarator.type != "variable_declarator":
                continue
            name = declarator.child_by_field_name("name")
            value = declarator.child_by_field_name("value")
            if name is not None and value is not None and name.type == "identifier":
                bindings[node_text(name)] = value
    return bindings


def _resolve_config_node(
    node: tree_sitter.Node, bindings: dict[str, tree_sitter.Node], depth: int = 0
) -> Any:
    """Unwrap ``defineConfig(...)`` calls, arrow functions and identifiers."""
    max_depth = 8
    if depth > max_depth:
        return None

    if node.type in _TRANSPARENT:
        inner = _first_named(node)
        return _resolve_config_node(inner, bindings, depth + 1) if inner else None

    if node.type == "identifier":
        target = bindings.get(node_text(node))
        return _resolve_config_node(target, bindings, depth + 1) if target else None

    if node.type == "call_expression":
        args = node.child_by_field_name("arguments")
        first = _first_named(args) if args is not None else None
        return _resolve_config_node(first, bindings, depth + 1) if first else None

    if node.type in ("arrow_function", "function_expression", "function"):
        body = node.child_by_field_name("body")
        if body is None:
            return None
        if body.type == "statement_block":
            for stmt in body.named_children:
                if stmt.type == "return_statement":
                    returned = _first_named(stmt)
                    return _resolve_config_node(returned, bindings, depth + 1) if returned else None
            return None
        return _resolve_config_node(body, bindings, depth + 1)

    return to_python(node, bindings)


# ── Literal conversion ───────────────────────────────────────────


def to_python(node: tree_sitter.Node, bindings: dict[str, tree_sitter.Node] | None = None) -> Any:
    """Convert a literal expression node to Python data.

    Objects become dicts, arrays lists, strings str, numbers int/float,
    ``true``/``false`` bool, ``null``/``undefined`` None. Anything else is None.
    """
    bindings = bindings or {}
    kind = node.type

    if kind == "object":
        return _object_to_dict(node, bindings)
    if kind == "array":
        return [
            to_python(item, bindings)
            for item in node.named_children
            if item.type not in ("comment", "spread_element")
        ]
    if kind == "string":
        return _string_value(node)
    if kind == "template_string":
        if any(c.type == "template_substitution" for c in node.named_children):
            return None
        return node_text(node)[1:-1]
    if kind == "number":
        return _number_value(node_text(node))
    if kind == "true":
        return True
    if kind == "false":
        return False
    if kind in ("null", "undefined"):
        return None
    if kind == "unary_expression":
        operator = node.child_by_field_name("operator")
        argument = node.child_by_field_name("argument")
        value = to_python(argument, bindings) if argument is not None else None
        if isinstance(value, int | float) and not isinstance(value, bool):
            op = node_text(operator)
            if op == "-":
                return -value
            if op == "+":
                return value
        return None
    if kind in _TRANSPARENT:
        inner = _first_named(node)
        return to_python(inner, bindings) if inner else None
    if kind == "identifier":
        name = node_text(node)
        if name == "undefined":
            return None
        target = bindings.get(name)
        return to_python(target, {}) if target is not None else None
    return None


def _object_to_dict(
    node: tree_sitter.Node, bindings: dict[str, tree_sitter.Node]
) -> dict[str, Any]:
    result: dict[str, Any] = {}
    for child in node.named_children:
        if child.type == "pair":
            key_node = child.child_by_field_name("key")
            value_node = child.child_by_field_name("value")
            key = _key_name(key_node) if key_node is not None else None
            if key is None:
                continue
            result[key] = to_python(value_node, bindings) if value_node is not None else None
        elif child.type == "shorthand_property_identifier":
            name = node_text(child)
            target = bindings.get(name)
            result[name] = to_python(target, {}) if target is not None else None
        elif child.type == "spread_element":
            spread = _first_named(child)
            value = to_python(spread, bindings) if spread is not None else None
            if isinstance(value, dict):
                result.update(value)
    return result


def _key_name(node: tree_sitter.Node) -> str | None:
    if node.type == "string":
        return _string_value(node)
    if node.type in ("property_identifier", "identifier", "number"):
        return node_text(node)
    # computed keys need evaluation
    return None


def _string_value(node: tree_sitter.Node) -> str:
    parts: list[str] = []
    for child in node.named_children:
        if child.type == "string_fragment":
            parts.append(node_text(child))
        elif child.type == "escape_sequence":
            seq = node_text(child)[1:]
            parts.append(_ESCAPES.get(seq, seq))
    return "".join(parts)


def _number_value(text: str) -> int | float | None:
    cleaned = text.replace("_", "")
    try:
        if cleaned.lower().startswith(("0x", "0o", "0b")):
            return int(cleaned, 0)
        if any(ch in cleaned for ch in ".eE"):
            return float(cleaned)
        return int(cleaned)
    except ValueError:
        logger.debug("Unreadable numeric literal: %s", text)
        return None


def _first_named(node: tree_sitter.Node) -> tree_sitter.Node | None:
    for child in node.named_children:
        if child.type != "comment":
            return child
    return None
