"""
Initializer safety: may this particular factory call be folded into its argument?

The guard looks at one occurrence of ``$(x)`` (by node identity) and the
context it sits in. Folding is allowed only where the caller can account for
every use of the wrapper value:

- as the receiver of a member access (``$(x).foo``), the fold replaces
  exactly that use;
- as a discarded expression statement, nothing observes the value;
- as the initializer of a variable, every reference to that variable must
  head a chain that could itself be folded (see ``chain_is_foldable``).

Every other position (an argument, a return value, an operand) is unsafe.
"""

from typing import AbstractSet, Optional

from ..syntax.nodes import Node
from ..syntax.queries import call_arguments, is_literal, unparenthesize
from .alias_resolver import is_duplicable, is_stable_reference, resolve_binding
from .chain_checker import chain_is_foldable
from .members import DEFAULT_TRANSFORMABLE_MEMBERS
from .scopes import find_binding, references
from .wrapper_classifier import is_factory_call

__all__ = [
    "is_duplicable",
    "is_safe_to_transform_initializer",
    "is_stable_reference",
]


def _context(call: Node) -> Node:
    node = call
    while node.parent is not None and node.parent.type == "parenthesized_expression":
        node = node.parent
    return node


def _declarator_is_safe(declarator: Node, call: Node, allowed: AbstractSet[str]) -> bool:
    target = declarator.child("name")
    if target is None or target.type != "identifier":
        return False
    name = target.code

    scope, decls = find_binding(name, target)
    if scope is None or len(decls) != 1:
        return False
    # A module-level ``$name`` is treated as a shared global.
    if name.startswith("$") and scope.type == "program":
        return False
    if unparenthesize(resolve_binding(name, target)) is not call:
        return False

    for ref in references(name, scope):
        if ref.type != "identifier" or not chain_is_foldable(ref, allowed):
            return False
    return True


def is_safe_to_transform_initializer(
    root: Node,
    call: Optional[Node],
    copies: int = 1,
    allowed: Optional[AbstractSet[str]] = None,
    factory_names: Optional[AbstractSet[str]] = None,
) -> bool:
    """
    Decide whether the factory call ``call`` may be replaced by its argument.

    Args:
        root: Program node of the file.
        call: The specific factory call occurrence.
        copies: How many times the rewrite will emit the argument. More than
            one copy is only allowed for literal arguments.
        allowed: Member names a variable holding the wrapper may be used with.
        factory_names: Names treated as the jQuery factory.

    Returns:
        True only when the fold provably preserves behavior.
    """
    call = unparenthesize(call)
    if call is None or not call.is_attached(root):
        return False
    if not is_factory_call(call, factory_names):
        return False

    args = call_arguments(call)
    if len(args) != 1:
        return False
    if copies > 1 and not is_literal(unparenthesize(args[0])):
        return False

    holder = _context(call)
    parent = holder.parent
    if parent is None:
        return False
    if parent.type == "member_expression" and parent.child("object") is holder:
        return True
    if parent.type == "variable_declarator" and parent.child("value") is holder:
        names = DEFAULT_TRANSFORMABLE_MEMBERS if allowed is None else allowed
        return _declarator_is_safe(parent, call, names)
    if parent.type == "expression_statement":
        return True
    return False
