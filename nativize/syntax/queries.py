"""Read-only helpers over syntax nodes."""

from __future__ import annotations

import re
from typing import List, Optional

from .nodes import Node

LITERAL_TYPES = frozenset({"number", "true", "false", "null", "undefined"})

_SIMPLE_ESCAPES = {
    "n": "\n",
    "r": "\r",
    "t": "\t",
    "b": "\b",
    "f": "\f",
    "v": "\v",
    "0": "\0",
    "'": "'",
    '"': '"',
    "\\": "\\",
    "`": "`",
    "$": "$",
}


def unparenthesize(node: Optional[Node]) -> Optional[Node]:
    """Strip any number of enclosing parentheses."""
    while node is not None and node.type == "parenthesized_expression":
        inner = node.named_children
        inner = [c for c in inner if c.type != "comment"]
        if len(inner) != 1:
            return node
        node = inner[0]
    return node


def call_arguments(call: Node) -> List[Node]:
    """Argument expressions of a call or ``new`` expression, comments excluded."""
    args = call.child("arguments")
    if args is None or args.type != "arguments":
        return []
    return [c for c in args.children if c.named and c.type != "comment"]


def has_spread(call: Node) -> bool:
    return any(a.type == "spread_element" for a in call_arguments(call))


def property_name(node: Node) -> Optional[str]:
    """Name accessed by a ``member_expression`` with a plain identifier property."""
    if node is None or node.type != "member_expression":
        return None
    prop = node.child("property")
    if prop is None or prop.type != "property_identifier":
        return None
    return prop.text


def is_optional(node: Node) -> bool:
    return node.child("optional_chain") is not None or any(
        c.text == "?." for c in node.children if not c.named
    )


def is_identifier(node: Optional[Node], name: Optional[str] = None) -> bool:
    if node is None or node.type != "identifier":
        return False
    return name is None or node.text == name


_ESCAPE = re.compile(
    r"\\(?:x([0-9a-fA-F]{2})|u\{([0-9a-fA-F]+)\}|u([0-9a-fA-F]{4})|(\r\n|[\s\S]))"
)


def _decode_escape(match) -> str:
    digits = match.group(1) or match.group(2) or match.group(3)
    if digits:
        return chr(int(digits, 16))
    char = match.group(4)
    if char in _SIMPLE_ESCAPES:
        return _SIMPLE_ESCAPES[char]
    if char in ("\n", "\r\n", "\r", "\u2028", "\u2029"):
        return ""
    if char in "123456789":
        raise ValueError("legacy octal escape")
    return char


def string_value(node: Optional[Node]) -> Optional[str]:
    """
    Decoded value of a string literal or a template without substitutions.

    Returns None for every other node, and for strings containing escape
    sequences that cannot be decoded unambiguously (legacy octal escapes).
    """
    if node is None or node.type not in ("string", "template_string"):
        return None
    if any(c.type == "template_substitution" for c in node.children):
        return None
    raw = node.code[1:-1]
    if re.search(r"\\0[0-9]", raw):
        return None
    try:
        return _ESCAPE.sub(_decode_escape, raw)
    except ValueError:
        return None


def is_string_literal(node: Optional[Node]) -> bool:
    return string_value(node) is not None


def is_literal(node: Optional[Node]) -> bool:
    """Immutable, side-effect free primitive literal."""
    if node is None:
        return False
    if node.type in LITERAL_TYPES:
        return True
    return is_string_literal(node)


def is_function_literal(node: Optional[Node]) -> bool:
    return node is not None and node.type in (
        "function_expression",
        "function",
        "arrow_function",
        "generator_function",
    )


def statement_of(node: Node) -> Optional[Node]:
    """The ``expression_statement`` directly holding ``node``, looking through parentheses."""
    parent = node.parent
    while parent is not None and parent.type == "parenthesized_expression":
        parent = parent.parent
    if parent is not None and parent.type == "expression_statement":
        return parent
    return None
