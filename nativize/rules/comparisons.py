"""Shared matching for ``index(...) !== -1`` style comparisons."""

from typing import Callable, Optional, Tuple

from ..syntax.nodes import Node
from ..syntax.queries import unparenthesize

# (operator, constant, index call on the left) -> negated?
_EXISTENCE_OPERATORS = {
    ("!==", -1, True): False,
    ("!=", -1, True): False,
    (">", -1, True): False,
    ("===", -1, True): True,
    ("==", -1, True): True,
    ("<=", -1, True): True,
    (">=", 0, True): False,
    ("<", 0, True): True,
    ("!==", -1, False): False,
    ("!=", -1, False): False,
    ("<", -1, False): False,
    ("===", -1, False): True,
    ("==", -1, False): True,
    (">=", -1, False): True,
    ("<=", 0, False): False,
    (">", 0, False): True,
}


def integer_value(node: Optional[Node]) -> Optional[int]:
    """Value of a decimal integer literal, optionally negated (``-1``)."""
    node = unparenthesize(node)
    if node is None:
        return None
    sign = 1
    if node.type == "unary_expression":
        operator = node.child("operator")
        if operator is None or operator.code != "-":
            return None
        sign = -1
        node = unparenthesize(node.child("argument"))
        if node is None:
            return None
    if node.type != "number" or not node.code.isdigit():
        return None
    return sign * int(node.code)


def match_existence_check(
    node: Node, is_index_call: Callable[[Node], bool]
) -> Optional[Tuple[Node, bool]]:
    """
    Match ``call OP constant`` (either side) where OP tests for "found".

    Args:
        node: A ``binary_expression``.
        is_index_call: Predicate selecting the index-returning call.

    Returns:
        ``(call, negated)`` or None. ``negated`` is True for the "not found"
        forms such as ``=== -1`` and ``< 0``.
    """
    if node.type != "binary_expression":
        return None
    operator = node.child("operator")
    left = unparenthesize(node.child("left"))
    right = unparenthesize(node.child("right"))
    if operator is None or left is None or right is None:
        return None

    if is_index_call(left):
        call, constant, call_on_left = left, integer_value(right), True
    elif is_index_call(right):
        call, constant, call_on_left = right, integer_value(left), False
    else:
        return None
    if constant is None:
        return None
    negated = _EXISTENCE_OPERATORS.get((operator.code, constant, call_on_left))
    if negated is None:
        return None
    return call, negated


# operator -> negated?
_EQUALITY_OPERATORS = {"===": False, "==": False, "!==": True, "!=": True}


def match_equality(
    node: Node, is_call: Callable[[Node], bool]
) -> Optional[Tuple[Node, Node, bool]]:
    """
    Match ``call === other`` or ``other === call`` (and the loose and negated forms).

    Returns:
        ``(call, other, negated)`` or None.
    """
    if node.type != "binary_expression":
        return None
    operator = node.child("operator")
    left = unparenthesize(node.child("left"))
    right = unparenthesize(node.child("right"))
    if operator is None or left is None or right is None:
        return None
    negated = _EQUALITY_OPERATORS.get(operator.code)
    if negated is None:
        return None
    if is_call(left):
        return left, right, negated
    if is_call(right):
        return right, left, negated
    return None
