"""
Constructors for new syntax nodes.

Every builder takes ownership of the nodes passed to it: operands are
re-parented and lose their leading whitespace. Operands that are not primary
expressions are parenthesised where the surrounding operator requires it.
"""

from __future__ import annotations

import json
from typing import Iterable, List, Optional, Sequence, Tuple, Union

from .nodes import Node, leaf, needs_parentheses, parenthesized, token

WORD_OPERATORS = frozenset({"typeof", "void", "delete", "await"})


def _take(node: Node, field: Optional[str] = None, prefix: str = "") -> Node:
    if node.parent is not None:
        node.detach()
    node.prefix = prefix
    node.field = field
    return node


def _operand(node: Node, parent_type: str, field: str) -> Node:
    if needs_parentheses(node, Node(parent_type), field):
        return parenthesized(node)
    return node


def identifier(name: str) -> Node:
    return leaf("identifier", name)


def property_identifier(name: str) -> Node:
    return leaf("property_identifier", name)


def string_literal(value: str, quote: str = '"') -> Node:
    """Build a string literal with ``value`` escaped for ``quote``."""
    body = json.dumps(value, ensure_ascii=False)[1:-1]
    if quote == "'":
        body = body.replace('\\"', '"').replace("'", "\\'")
    children = [token(quote)]
    if body:
        children.append(leaf("string_fragment", body))
    children.append(token(quote))
    return Node("string", children=children)


def number(value: Union[int, str]) -> Node:
    return leaf("number", str(value))


def member(obj: Node, prop: Union[str, Node], optional: bool = False) -> Node:
    """``obj.prop`` (or ``obj?.prop``)."""
    obj = _operand(_take(obj), "member_expression", "object")
    if isinstance(prop, str):
        prop = property_identifier(prop)
    node = Node("member_expression")
    node.append(_take(obj, "object"))
    node.append(token("?." if optional else ".", field="optional_chain" if optional else None))
    node.append(_take(prop, "property"))
    return node


def arguments(args: Sequence[Node]) -> Node:
    node = Node("arguments", children=[token("(")])
    for i, arg in enumerate(args):
        if i:
            node.append(token(","))
        node.append(_take(arg, prefix=" " if i else ""))
    node.append(token(")"))
    return node


def call(callee: Node, args: Sequence[Node] = ()) -> Node:
    callee = _operand(_take(callee), "call_expression", "function")
    node = Node("call_expression")
    node.append(_take(callee, "function"))
    node.append(_take(arguments(args), "arguments"))
    return node


def method_call(obj: Node, name: str, args: Sequence[Node] = ()) -> Node:
    """``obj.name(args)``."""
    return call(member(obj, name), args)


def new_expression(constructor: Node, args: Sequence[Node] = ()) -> Node:
    constructor = _operand(_take(constructor), "new_expression", "constructor")
    node = Node("new_expression", children=[token("new")])
    node.append(_take(constructor, "constructor", prefix=" "))
    node.append(_take(arguments(args), "arguments"))
    return node


def assignment(left: Node, right: Node, operator: str = "=") -> Node:
    if operator == "=":
        node = Node("assignment_expression")
        op = token("=", prefix=" ")
    else:
        node = Node("augmented_assignment_expression")
        op = token(operator, prefix=" ", field="operator")
    node.append(_take(left, "left"))
    node.append(op)
    node.append(_take(right, "right", prefix=" "))
    return node


def binary(left: Node, operator: str, right: Node) -> Node:
    """
    Build ``left <operator> right``.

    Any operand that is itself a binary (or looser) expression is wrapped in
    parentheses so the result never depends on precedence tables. The left
    operand of ``**`` may not be a unary expression either.
    """
    left = _take(left)
    right = _take(right)
    if needs_parentheses(left, Node("binary_expression"), "left") or (
        operator == "**" and left.type in ("unary_expression", "await_expression")
    ):
        left = parenthesized(left)
    if needs_parentheses(right, Node("binary_expression"), "right"):
        right = parenthesized(right)
    node = Node("binary_expression")
    node.append(_take(left, "left"))
    node.append(token(operator, prefix=" ", field="operator"))
    node.append(_take(right, "right", prefix=" "))
    return node


def unary(operator: str, argument: Node) -> Node:
    argument = _operand(_take(argument), "unary_expression", "argument")
    node = Node("unary_expression")
    node.append(token(operator, field="operator"))
    node.append(_take(argument, "argument", prefix=" " if operator in WORD_OPERATORS else ""))
    return node


def formal_parameters(params: Iterable[Node]) -> Node:
    node = Node("formal_parameters", children=[token("(")])
    for i, param in enumerate(params):
        if i:
            node.append(token(","))
        node.append(_take(param, prefix=" " if i else ""))
    node.append(token(")"))
    return node


def object_literal(pairs: List[Tuple[str, Node]]) -> Node:
    """``{ key: value, ... }`` with identifier keys."""
    node = Node("object", children=[token("{")])
    for i, (key, value) in enumerate(pairs):
        if i:
            node.append(token(","))
        pair = Node("pair", prefix=" ")
        pair.append(property_identifier(key)).field = "key"
        pair.append(token(":"))
        pair.append(_take(value, "value", prefix=" "))
        node.append(pair)
    node.append(token("}", prefix=" " if pairs else ""))
    return node


def expression_statement(expr: Node) -> Node:
    node = Node("expression_statement")
    node.append(_take(expr))
    node.append(token(";"))
    return node


def boolean(value: bool) -> Node:
    text = "true" if value else "false"
    return leaf(text, text)


def spread_element(argument: Node) -> Node:
    argument = _operand(_take(argument), "spread_element", "argument")
    node = Node("spread_element", children=[token("...")])
    node.append(_take(argument))
    return node


def array_literal(elements: Sequence[Node]) -> Node:
    node = Node("array", children=[token("[")])
    for i, element in enumerate(elements):
        if i:
            node.append(token(","))
        node.append(_take(element, prefix=" " if i else ""))
    node.append(token("]"))
    return node


def arrow_function(params: Iterable[Node], body: Node) -> Node:
    """``(params) => body`` with an expression body."""
    node = Node("arrow_function")
    node.append(_take(formal_parameters(params), "parameters"))
    node.append(token("=>", prefix=" "))
    body = _take(body)
    if body.type in ("object", "sequence_expression"):
        body = parenthesized(body)
    node.append(_take(body, "body", prefix=" "))
    return node
