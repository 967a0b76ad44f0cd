"""DOM manipulation rules."""

import logging
from typing import Optional

from ...safety.alias_resolver import resolve_binding
from ...syntax import builders as b
from ...syntax.nodes import Node
from ...syntax.queries import call_arguments, is_optional, property_name, unparenthesize
from ..base import RuleContext, rule
from ._common import method_calls, receiver_target, result_is_discarded

logger = logging.getLogger(__name__)

# jQuery method -> ChildNode / ParentNode method of the same name
INSERTION_METHODS = frozenset({"append", "prepend", "before", "after"})

NODE_FACTORIES = frozenset({"createElement", "createTextNode", "cloneNode"})


def is_new_node(node: Optional[Node], follow: bool = True) -> bool:
    """``document.createElement(...)`` and friends, or a name bound once to one."""
    node = unparenthesize(node)
    if node is None:
        return False
    if node.type == "identifier":
        return follow and is_new_node(resolve_binding(node.code, node), follow=False)
    if node.type != "call_expression" or is_optional(node):
        return False
    callee = unparenthesize(node.child("function"))
    return (
        callee is not None
        and callee.type == "member_expression"
        and not is_optional(callee)
        and property_name(callee) in NODE_FACTORIES
    )


@rule("jquery")
def remove_and_empty_to_native(root: Node, context: RuleContext) -> bool:
    """$(el).remove() / .empty() -> el.remove() / el.replaceChildren()"""
    modified = False
    for call, member, name in method_calls(root, {"remove", "empty"}):
        if call_arguments(call) or not result_is_discarded(call):
            continue
        target = receiver_target(member, root, context)
        if target is None:
            continue
        method = "remove" if name == "remove" else "replaceChildren"
        call.replace_with(b.method_call(target, method))
        logger.debug("Rewrote .%s() to %s()", name, method)
        modified = True
    return modified


@rule("jquery")
def insertion_to_native(root: Node, context: RuleContext) -> bool:
    """$(el).append(node) -> el.append(node), for freshly created nodes"""
    modified = False
    for call, member, name in method_calls(root, INSERTION_METHODS):
        args = call_arguments(call)
        if len(args) != 1 or not is_new_node(args[0]) or not result_is_discarded(call):
            continue
        target = receiver_target(member, root, context)
        if target is None:
            continue
        call.replace_with(b.method_call(target, name, args))
        logger.debug("Rewrote .%s() with a node argument", name)
        modified = True
    return modified
