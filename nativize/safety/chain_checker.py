"""
Chain safety: does every step chained onto a wrapper call stay transformable?

A chain is the run of member accesses and calls that use the wrapper as
their receiver, e.g. ``$(el).find(".x").show()``. Eliminating the wrapper
changes the receiver of every step, so one step outside the allow-set
rejects the whole chain.
"""

from dataclasses import dataclass
from typing import AbstractSet, List, Optional

from ..syntax.nodes import Node
from ..syntax.queries import call_arguments, is_optional, property_name, statement_of
from .members import DEFAULT_TRANSFORMABLE_MEMBERS, NO_ARGUMENT_MEMBERS


@dataclass
class ChainStep:
    """One ``.name`` access, and the call of it when the step is a method call."""

    name: str
    member: Node
    call: Optional[Node] = None

    @property
    def node(self) -> Node:
        return self.call if self.call is not None else self.member


def _climb_parentheses(node: Node) -> Node:
    while node.parent is not None and node.parent.type == "parenthesized_expression":
        node = node.parent
    return node


def chain_steps(call: Node) -> Optional[List[ChainStep]]:
    """
    Collect the chain rooted at ``call``.

    Returns:
        The steps from innermost to outermost, or None when the chain
        contains a step that cannot be named (computed ``[...]`` access,
        private ``#field``, optional chaining, or a call of the wrapper
        value itself).
    """
    steps: List[ChainStep] = []
    current = _climb_parentheses(call)
    while True:
        parent = current.parent
        if parent is None:
            break
        if parent.type == "subscript_expression" and parent.child("object") is current:
            return None
        if parent.type == "call_expression" and parent.child("function") is current:
            return None
        if parent.type != "member_expression" or parent.child("object") is not current:
            break
        name = property_name(parent)
        if name is None or is_optional(parent):
            return None

        member = _climb_parentheses(parent)
        grand = member.parent
        if (
            grand is not None
            and grand.type == "call_expression"
            and grand.child("function") is member
        ):
            if is_optional(grand):
                return None
            steps.append(ChainStep(name, parent, grand))
            current = _climb_parentheses(grand)
        else:
            steps.append(ChainStep(name, parent))
            current = member
    return steps


def all_chain_steps_transformable(
    call: Optional[Node], allowed: Optional[AbstractSet[str]] = None
) -> bool:
    """
    True when every step chained onto ``call`` is in the allow-set.

    A chain with no steps at all is trivially transformable.

    Args:
        call: A wrapper-factory call expression.
        allowed: Allow-set of member names; the default DOM set when None.
    """
    if call is None or call.type != "call_expression":
        return False
    steps = chain_steps(call)
    if steps is None:
        return False
    names = DEFAULT_TRANSFORMABLE_MEMBERS if allowed is None else allowed
    return all(step.name in names for step in steps)


def chain_anchor(call: Node) -> Node:
    """Outermost node of the chain rooted at ``call`` (``call`` itself without steps)."""
    steps = chain_steps(call)
    if not steps:
        return call
    return steps[-1].node


def chain_is_foldable(node: Node, allowed: Optional[AbstractSet[str]] = None) -> bool:
    """
    True when the wrapper at ``node`` may be replaced by the element it wraps.

    The chain must be non-empty and fully allow-listed. A step named in
    ``NO_ARGUMENT_MEMBERS`` must be called without arguments and must be the
    last step, its value discarded by an expression statement.
    """
    steps = chain_steps(node)
    if not steps:
        return False
    names = DEFAULT_TRANSFORMABLE_MEMBERS if allowed is None else allowed
    last = len(steps) - 1
    for index, step in enumerate(steps):
        if step.name not in names:
            return False
        if step.name in NO_ARGUMENT_MEMBERS:
            if step.call is None or call_arguments(step.call):
                return False
            if index != last or statement_of(step.call) is None:
                return False
    return True
