"""
Rules for legacy language idioms with a standard replacement.

Receivers are only rewritten when their type is evident from the source:
``indexOf`` and ``substr`` exist on more than arrays and strings, and the
replacements do not.
"""

import logging

from ..safety.alias_resolver import resolve_binding
from ..syntax import builders as b
from ..syntax.nodes import Node
from ..syntax.queries import (
    call_arguments,
    has_spread,
    is_identifier,
    is_optional,
    property_name,
    string_value,
    unparenthesize,
)
from .base import RuleContext, rule
from .comparisons import integer_value, match_equality, match_existence_check
from .values import (
    is_array_expression,
    is_global,
    is_primitive_literal,
    is_string_expression,
    method_receiver,
)

logger = logging.getLogger(__name__)

# Constructors whose instances iterate the way Array.from copies them.
ITERABLE_CONSTRUCTORS = frozenset({"Set", "Map"})


@rule("legacy")
def math_pow_to_exponentiation(root: Node, context: RuleContext) -> bool:
    """Math.pow(a, b) -> a ** b"""
    modified = False
    for call in root.find("call_expression"):
        if not call.is_attached(root):
            continue
        callee = unparenthesize(call.child("function"))
        if property_name(callee) != "pow" or is_optional(call) or is_optional(callee):
            continue
        if not is_identifier(callee.child("object"), "Math") or not is_global("Math", call):
            continue
        args = call_arguments(call)
        if len(args) != 2 or has_spread(call):
            continue
        call.replace_with(b.binary(args[0], "**", args[1]))
        logger.debug("Rewrote Math.pow call to exponentiation")
        modified = True
    return modified


@rule("legacy")
def substr_to_slice(root: Node, context: RuleContext) -> bool:
    """str.substr(start[, length]) -> str.slice(start[, end])"""
    modified = False
    for call in root.find("call_expression"):
        if not call.is_attached(root):
            continue
        receiver = method_receiver(call, {"substr"})
        if receiver is None or not is_string_expression(receiver) or has_spread(call):
            continue
        args = call_arguments(call)
        if len(args) > 2:
            continue
        if len(args) == 2:
            start, length = integer_value(args[0]), integer_value(args[1])
            if start is None or length is None or start < 0 or length < 0:
                continue
            new_args = [b.number(start), b.number(start + length)]
        else:
            new_args = list(args)
        call.replace_with(b.method_call(receiver, "slice", new_args))
        logger.debug("Rewrote substr call to slice")
        modified = True
    return modified


def _is_primitive_value(node: Node) -> bool:
    """A primitive literal, or a name bound once to one."""
    node = unparenthesize(node)
    if node is not None and node.type == "identifier":
        node = resolve_binding(node.code, node)
    return is_primitive_literal(node)


def _is_index_of_call(node: Node) -> bool:
    receiver = method_receiver(node, {"indexOf"})
    if receiver is None or has_spread(node) or len(call_arguments(node)) != 1:
        return False
    arg = call_arguments(node)[0]
    if is_string_expression(receiver):
        # String.prototype.includes throws on a RegExp.
        return _is_primitive_value(arg)
    return is_array_expression(receiver) and is_primitive_literal(arg)


@rule("legacy")
def index_of_to_includes(root: Node, context: RuleContext) -> bool:
    """x.indexOf(y) !== -1 -> x.includes(y)"""
    modified = False
    for node in root.find("binary_expression"):
        if not node.is_attached(root):
            continue
        match = match_existence_check(node, _is_index_of_call)
        if match is None:
            continue
        call, negated = match
        callee = unparenthesize(call.child("function"))
        replacement = b.method_call(callee.child("object"), "includes", call_arguments(call))
        if negated:
            replacement = b.unary("!", replacement)
        node.replace_with(replacement)
        logger.debug("Rewrote indexOf comparison to includes")
        modified = True
    return modified


def _is_string_index_of_call(node: Node) -> bool:
    receiver = method_receiver(node, {"indexOf"})
    if receiver is None or not is_string_expression(receiver) or has_spread(node):
        return False
    args = call_arguments(node)
    return len(args) == 1 and _is_primitive_value(args[0])


@rule("legacy")
def index_of_to_starts_with(root: Node, context: RuleContext) -> bool:
    """str.indexOf(x) === 0 -> str.startsWith(x)"""
    modified = False
    for node in root.find("binary_expression"):
        if not node.is_attached(root):
            continue
        match = match_equality(node, _is_string_index_of_call)
        if match is None or integer_value(match[1]) != 0:
            continue
        call, _, negated = match
        receiver = method_receiver(call, {"indexOf"})
        replacement = b.method_call(receiver, "startsWith", call_arguments(call))
        if negated:
            replacement = b.unary("!", replacement)
        node.replace_with(replacement)
        logger.debug("Rewrote indexOf prefix check to startsWith")
        modified = True
    return modified


def _is_string_prefix_call(node: Node) -> bool:
    receiver = method_receiver(node, {"substring"})
    if receiver is None or not is_string_expression(receiver) or has_spread(node):
        return False
    args = call_arguments(node)
    return len(args) == 2 and integer_value(args[0]) == 0


def _utf16_length(value: str) -> int:
    return len(value.encode("utf-16-le")) // 2


def _is_length_of(end: Node, prefix: Node) -> bool:
    """True when ``end`` is the length of the string ``prefix``."""
    end = unparenthesize(end)
    value = string_value(prefix)
    if value is not None:
        return integer_value(end) == _utf16_length(value)
    if prefix.type != "identifier" or end is None or end.type != "member_expression":
        return False
    if property_name(end) != "length" or is_optional(end):
        return False
    if not is_identifier(end.child("object"), prefix.code):
        return False
    return is_string_expression(resolve_binding(prefix.code, prefix))


@rule("legacy")
def substring_to_starts_with(root: Node, context: RuleContext) -> bool:
    """str.substring(0, x.length) === x -> str.startsWith(x)"""
    modified = False
    for node in root.find("binary_expression"):
        if not node.is_attached(root):
            continue
        match = match_equality(node, _is_string_prefix_call)
        if match is None:
            continue
        call, prefix, negated = match
        if not _is_length_of(call_arguments(call)[1], prefix):
            continue
        receiver = method_receiver(call, {"substring"})
        replacement = b.method_call(receiver, "startsWith", [prefix])
        if negated:
            replacement = b.unary("!", replacement)
        node.replace_with(replacement)
        logger.debug("Rewrote substring prefix check to startsWith")
        modified = True
    return modified


def _is_iterable(node: Node) -> bool:
    """An expression whose iteration yields what Array.from would copy."""
    node = unparenthesize(node)
    if node is None:
        return False
    if is_array_expression(node) or is_string_expression(node):
        return True
    if node.type == "new_expression":
        constructor = unparenthesize(node.child("constructor"))
        return (
            constructor is not None
            and constructor.type == "identifier"
            and constructor.code in ITERABLE_CONSTRUCTORS
            and is_global(constructor.code, node)
        )
    receiver = method_receiver(node, {"querySelectorAll"})
    return is_identifier(receiver, "document") and is_global("document", node)


@rule("legacy")
def array_from_to_spread(root: Node, context: RuleContext) -> bool:
    """Array.from(iterable) -> [...iterable]"""
    modified = False
    for call in root.find("call_expression"):
        if not call.is_attached(root):
            continue
        receiver = method_receiver(call, {"from"})
        if not is_identifier(receiver, "Array") or not is_global("Array", call):
            continue
        args = call_arguments(call)
        if len(args) != 1 or has_spread(call) or not _is_iterable(args[0]):
            continue
        call.replace_with(b.array_literal([b.spread_element(args[0])]))
        logger.debug("Rewrote Array.from call to spread")
        modified = True
    return modified


def _is_module(root: Node) -> bool:
    return any(c.type in ("import_statement", "export_statement") for c in root.children)


def _is_use_strict(statement: Node) -> bool:
    if statement.type != "expression_statement":
        return False
    exprs = [c for c in statement.children if c.named and c.type != "comment"]
    return len(exprs) == 1 and exprs[0].type == "string" and string_value(exprs[0]) == "use strict"


@rule("legacy")
def remove_use_strict(root: Node, context: RuleContext) -> bool:
    """Drop "use strict" directives from ES modules"""
    if root.type != "program" or not _is_module(root):
        return False
    modified = False
    for statement in list(root.children):
        if statement.type == "comment" or statement.type == "hash_bang_line":
            continue
        if not _is_use_strict(statement):
            if statement.type == "expression_statement" and _is_directive(statement):
                continue
            break
        statement.remove()
        logger.debug("Removed 'use strict' directive from module")
        modified = True
    return modified


def _is_directive(statement: Node) -> bool:
    exprs = [c for c in statement.children if c.named and c.type != "comment"]
    return len(exprs) == 1 and exprs[0].type == "string"
