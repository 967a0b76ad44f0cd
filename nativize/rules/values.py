"""
Static evidence about the runtime type of an expression.

Only shapes whose type is certain from the source count: literals, results
of well-known methods on such literals, and names bound once to such a value
and never used in a way that could change it.
"""

from typing import AbstractSet, Optional

from ..safety.alias_resolver import resolve_binding
from ..safety.scopes import find_binding, iter_writes, references
from ..syntax.nodes import Node
from ..syntax.queries import is_identifier, is_optional, property_name, unparenthesize

STRING_METHODS_RETURNING_STRING = frozenset(
    {
        "slice",
        "substr",
        "substring",
        "toLowerCase",
        "toUpperCase",
        "trim",
        "trimStart",
        "trimEnd",
        "trimLeft",
        "trimRight",
        "repeat",
        "padStart",
        "padEnd",
        "concat",
        "replace",
        "replaceAll",
    }
)

ARRAY_METHODS_RETURNING_ARRAY = frozenset(
    {"slice", "map", "filter", "flat", "flatMap", "reverse", "sort"}
)

# Array members that neither create holes nor let the array escape.
NON_MUTATING_ARRAY_MEMBERS = frozenset(
    {
        "length",
        "push",
        "indexOf",
        "includes",
        "forEach",
        "map",
        "filter",
        "some",
        "every",
        "find",
        "findIndex",
        "join",
        "slice",
        "reduce",
    }
)

READING_CALLS = frozenset({"inArray", "each", "grep", "map", "indexOf", "includes"})


def is_global(name: str, at: Node) -> bool:
    """True when ``name`` is undeclared at ``at`` and never assigned in the file."""
    scope, _ = find_binding(name, at)
    if scope is not None:
        return False
    return not any(written == name for written, _ in iter_writes(at.root()))


def method_receiver(call: Optional[Node], names: AbstractSet[str]) -> Optional[Node]:
    """Receiver of ``receiver.name(...)`` when ``name`` is in ``names``."""
    if call is None or call.type != "call_expression":
        return None
    callee = unparenthesize(call.child("function"))
    if callee is None or is_optional(call) or is_optional(callee):
        return None
    if property_name(callee) not in names:
        return None
    return unparenthesize(callee.child("object"))


def is_string_expression(node: Optional[Node]) -> bool:
    node = unparenthesize(node)
    if node is None:
        return False
    if node.type in ("string", "template_string"):
        return True
    receiver = method_receiver(node, STRING_METHODS_RETURNING_STRING)
    return receiver is not None and is_string_expression(receiver)


def _has_holes(array: Node) -> bool:
    expect_element = True
    for child in array.children:
        if child.type in ("comment", "[", "]"):
            continue
        if child.type == ",":
            if expect_element:
                return True
            expect_element = True
        else:
            expect_element = False
    return False


def _is_reading_call(call: Optional[Node]) -> bool:
    """Calls known to only read the arrays passed to them."""
    return method_receiver(call, READING_CALLS) is not None


def _is_dense_array_binding(ident: Node) -> bool:
    init = resolve_binding(ident.code, ident)
    if init is None or not is_array_expression(init, follow_bindings=False):
        return False
    scope, _ = find_binding(ident.code, ident)
    for ref in references(ident.code, scope):
        holder = ref
        while holder.parent is not None and holder.parent.type == "parenthesized_expression":
            holder = holder.parent
        parent = holder.parent
        if parent is None:
            return False
        if parent.type == "member_expression" and parent.child("object") is holder:
            if property_name(parent) not in NON_MUTATING_ARRAY_MEMBERS:
                return False
            outer = parent.parent
            if outer is not None and outer.type in (
                "assignment_expression",
                "augmented_assignment_expression",
                "update_expression",
            ):
                if outer.child("left") is parent or outer.child("argument") is parent:
                    return False
            continue
        if parent.type == "for_in_statement" and parent.child("right") is holder:
            continue
        if parent.type == "arguments" and _is_reading_call(parent.parent):
            continue
        return False
    return True


def is_array_expression(node: Optional[Node], follow_bindings: bool = True) -> bool:
    """True for an expression that certainly evaluates to a dense array."""
    node = unparenthesize(node)
    if node is None:
        return False
    if node.type == "array":
        return not _has_holes(node)
    if node.type == "identifier":
        return follow_bindings and _is_dense_array_binding(node)
    if node.type == "call_expression":
        callee = unparenthesize(node.child("function"))
        if (
            callee is not None
            and property_name(callee) in ("from", "of")
            and is_identifier(callee.child("object"), "Array")
            and is_global("Array", node)
        ):
            return True
    receiver = method_receiver(node, ARRAY_METHODS_RETURNING_ARRAY)
    return receiver is not None and is_array_expression(receiver, follow_bindings)


def is_primitive_literal(node: Optional[Node]) -> bool:
    """A literal whose strict and SameValueZero comparisons agree (never NaN)."""
    node = unparenthesize(node)
    if node is None:
        return False
    return node.type in ("number", "true", "false", "null") or is_string_expression(node)
