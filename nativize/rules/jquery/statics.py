"""
Rules for the static utilities hung off the factory (``$.each`` and friends).

The native array methods skip holes where jQuery walks every index, so the
collection argument must be an array with no holes, as far as the source
shows.
"""

import logging
from typing import Optional

from ...safety import is_factory_identifier
from ...syntax import builders as b
from ...syntax.nodes import Node
from ...syntax.queries import call_arguments, is_optional, property_name, unparenthesize
from ..base import RuleContext, rule
from ..comparisons import match_existence_check
from ..values import is_array_expression, is_primitive_literal, is_string_expression
from ._common import (
    is_function_value,
    may_return_false,
    result_is_discarded,
    return_values,
    simple_parameters,
    static_calls,
    uses_arguments,
    uses_this,
)

logger = logging.getLogger(__name__)

# Unary operators whose result is never null or an array.
SCALAR_UNARY_OPERATORS = frozenset({"!", "-", "+", "~", "typeof"})

SHORT_CIRCUIT_OPERATORS = frozenset({"&&", "||", "??"})


def _each_callback_ok(func: Node) -> bool:
    """A callback whose return value and ``this`` jQuery would ignore."""
    body = func.child("body")
    if body is None or body.type != "statement_block":
        return False
    if may_return_false(func):
        return False
    return func.type == "arrow_function" or not uses_this(func)


@rule("jquery")
def each_to_for_each(root: Node, context: RuleContext) -> bool:
    """$.each(arr, function (i, v) {...}) -> arr.forEach(function (v, i) {...})"""
    modified = False
    for call, _, args in static_calls(root, {"each"}, context):
        if len(args) != 2 or not result_is_discarded(call):
            continue
        if not is_array_expression(args[0]) or not is_function_value(args[1]):
            continue
        func = unparenthesize(args[1])
        params = simple_parameters(func)
        if params is None or len(params) not in (0, 2) or not _each_callback_ok(func):
            continue
        if len(params) == 2:
            index, value = params
            index.parent.replace_with(b.formal_parameters([value, index]))
        call.replace_with(b.method_call(args[0], "forEach", [args[1]]))
        logger.debug("Rewrote $.each to forEach")
        modified = True
    return modified


@rule("jquery")
def grep_to_filter(root: Node, context: RuleContext) -> bool:
    """$.grep(arr, fn) -> arr.filter(fn)"""
    modified = False
    for call, _, args in static_calls(root, {"grep"}, context):
        if len(args) != 2 or not is_array_expression(args[0]) or not is_function_value(args[1]):
            continue
        func = unparenthesize(args[1])
        params = simple_parameters(func)
        # filter passes the array as a third argument.
        if params is None or len(params) > 2:
            continue
        if func.type != "arrow_function" and uses_arguments(func):
            continue
        call.replace_with(b.method_call(args[0], "filter", [args[1]]))
        logger.debug("Rewrote $.grep to filter")
        modified = True
    return modified


def _is_scalar(node: Optional[Node]) -> bool:
    """An expression that never yields null, undefined or an array."""
    node = unparenthesize(node)
    if node is None:
        return False
    if node.type in ("number", "string", "template_string", "true", "false", "update_expression"):
        return True
    if node.type == "binary_expression":
        if node.child("operator").code in SHORT_CIRCUIT_OPERATORS:
            return _is_scalar(node.child("left")) and _is_scalar(node.child("right"))
        return True
    if node.type == "unary_expression":
        return node.child("operator").code in SCALAR_UNARY_OPERATORS
    if node.type == "ternary_expression":
        return _is_scalar(node.child("consequence")) and _is_scalar(node.child("alternative"))
    return is_string_expression(node)


def _returns_scalar(func: Node) -> bool:
    body = func.child("body")
    if body is None:
        return False
    if body.type != "statement_block":
        return _is_scalar(body)
    statements = [c for c in body.named_children if c.type != "comment"]
    # Falling off the end returns undefined.
    if not statements or statements[-1].type != "return_statement":
        return False
    return all(_is_scalar(value) for value in return_values(func))


@rule("jquery")
def map_to_array_map(root: Node, context: RuleContext) -> bool:
    """$.map(arr, fn) -> arr.map(fn)"""
    modified = False
    for call, _, args in static_calls(root, {"map"}, context):
        if len(args) != 2 or not is_array_expression(args[0]) or not is_function_value(args[1]):
            continue
        func = unparenthesize(args[1])
        params = simple_parameters(func)
        # map passes the array as a third argument.
        if params is None or len(params) > 2:
            continue
        if func.type != "arrow_function" and uses_arguments(func):
            continue
        # jQuery drops null results and flattens arrays.
        if func.type == "generator_function" or not _returns_scalar(func):
            continue
        call.replace_with(b.method_call(args[0], "map", [args[1]]))
        logger.debug("Rewrote $.map to Array.prototype.map")
        modified = True
    return modified


@rule("jquery")
def trim_to_string_trim(root: Node, context: RuleContext) -> bool:
    """$.trim(str) -> str.trim()"""
    modified = False
    for call, _, args in static_calls(root, {"trim"}, context):
        if len(args) != 1 or not is_string_expression(args[0]):
            continue
        call.replace_with(b.method_call(args[0], "trim"))
        logger.debug("Rewrote $.trim to String.prototype.trim")
        modified = True
    return modified


@rule("jquery")
def in_array_to_includes(root: Node, context: RuleContext) -> bool:
    """$.inArray(v, arr) !== -1 -> arr.includes(v)"""

    def is_in_array_call(node: Node) -> bool:
        if node.type != "call_expression" or is_optional(node):
            return False
        callee = unparenthesize(node.child("function"))
        if callee is None or property_name(callee) != "inArray" or is_optional(callee):
            return False
        if not is_factory_identifier(callee.child("object"), context.factory_names):
            return False
        args = call_arguments(node)
        return len(args) == 2 and is_primitive_literal(args[0]) and is_array_expression(args[1])

    modified = False
    for node in root.find("binary_expression"):
        if not node.is_attached(root):
            continue
        match = match_existence_check(node, is_in_array_call)
        if match is None:
            continue
        call, negated = match
        value, array = call_arguments(call)
        replacement = b.method_call(array, "includes", [value])
        if negated:
            replacement = b.unary("!", replacement)
        node.replace_with(replacement)
        logger.debug("Rewrote $.inArray comparison to includes")
        modified = True
    return modified
