"""
DOM traversal rules.

Traversal methods return a new wrapper, so the native lookup is wrapped
again: ``$(el).parent()`` becomes ``$(el.parentElement)``. The result keeps
jQuery semantics for whatever the chain does next, and the element rules can
then fold the new wrapper when its use allows it.
"""

import logging
import re
from typing import Optional

from ...safety import is_duplicable, wrapped_argument
from ...syntax import builders as b
from ...syntax.nodes import Node
from ...syntax.queries import call_arguments, string_value, unparenthesize
from ..base import RuleContext, rule
from ..values import is_global
from ._common import factory_name_for, is_native_selector, method_calls, receiver_target, rewrap

logger = logging.getLogger(__name__)

SIBLING_PROPERTIES = {
    "parent": "parentElement",
    "next": "nextElementSibling",
    "prev": "previousElementSibling",
    "children": "children",
}

# querySelectorAll matches against the whole document, jQuery's find against
# the element's subtree; they agree only on selectors without combinators.
COMBINATOR = re.compile(r"[\s>+~,]")

SIBLING = "sibling"


def _rewrite(call: Node, member: Node, root: Node, context: RuleContext, build) -> bool:
    factory = factory_name_for(member, root, context)
    if factory is None:
        return False
    target = receiver_target(member, root, context)
    if target is None:
        return False
    call.replace_with(rewrap(factory, build(target)))
    return True


@rule("jquery")
def sibling_traversal_to_element_properties(root: Node, context: RuleContext) -> bool:
    """$(el).parent() / .next() / .prev() / .children() -> $(el.parentElement) ..."""
    modified = False
    for call, member, name in method_calls(root, SIBLING_PROPERTIES.keys()):
        if call_arguments(call):
            continue
        prop = SIBLING_PROPERTIES[name]
        if _rewrite(call, member, root, context, lambda target: b.member(target, prop)):
            logger.debug("Rewrote .%s() to %s", name, prop)
            modified = True
    return modified


@rule("jquery")
def closest_to_native_closest(root: Node, context: RuleContext) -> bool:
    """$(el).closest(".x") -> $(el.closest(".x"))"""
    modified = False
    for call, member, _ in method_calls(root, {"closest"}):
        args = call_arguments(call)
        if len(args) != 1 or not is_native_selector(string_value(args[0])):
            continue
        selector = args[0]
        if _rewrite(call, member, root, context, lambda t: b.method_call(t, "closest", [selector])):
            logger.debug("Rewrote .closest() to native closest")
            modified = True
    return modified


@rule("jquery")
def find_to_query_selector_all(root: Node, context: RuleContext) -> bool:
    """$(el).find(".x") -> $(el.querySelectorAll(".x"))"""
    modified = False
    for call, member, _ in method_calls(root, {"find"}):
        args = call_arguments(call)
        if len(args) != 1:
            continue
        value = string_value(args[0])
        if not is_native_selector(value) or COMBINATOR.search(value):
            continue
        selector = args[0]
        if _rewrite(
            call, member, root, context, lambda t: b.method_call(t, "querySelectorAll", [selector])
        ):
            logger.debug("Rewrote .find(%r) to querySelectorAll", value)
            modified = True
    return modified


def _siblings_of(target: Node, selector: Optional[Node]) -> Node:
    """Elements sharing ``target``'s parent, ``target`` excluded, in document order."""
    other = target.clone()
    parent = b.member(target, "parentNode")
    children = b.binary(b.member(parent, "children", optional=True), "??", b.array_literal([]))
    test = b.binary(b.identifier(SIBLING), "!==", other)
    if selector is not None:
        test = b.binary(test, "&&", b.method_call(b.identifier(SIBLING), "matches", [selector]))
    predicate = b.arrow_function([b.identifier(SIBLING)], test)
    listed = b.method_call(b.identifier("Array"), "from", [children])
    return b.method_call(listed, "filter", [predicate])


@rule("jquery")
def siblings_to_filtered_children(root: Node, context: RuleContext) -> bool:
    """$(el).siblings([".x"]) -> $(Array.from(el.parentNode?.children ?? []).filter(...))"""
    modified = False
    for call, member, _ in method_calls(root, {"siblings"}):
        args = call_arguments(call)
        if len(args) > 1:
            continue
        selector = args[0] if args else None
        if selector is not None:
            value = string_value(selector)
            if not is_native_selector(value) or COMBINATOR.search(value):
                continue
        if not is_global("Array", call):
            continue
        # The element is emitted twice and must not be shadowed by the arrow parameter.
        receiver = unparenthesize(member.child("object"))
        arg = unparenthesize(wrapped_argument(receiver, root, context.factory_names))
        if arg is None or arg.type not in ("identifier", "this") or arg.code == SIBLING:
            continue
        if not is_duplicable(arg, member):
            continue
        factory = factory_name_for(member, root, context)
        if factory is None:
            continue
        target = receiver_target(member, root, context)
        if target is None:
            continue
        call.replace_with(rewrap(factory, _siblings_of(target, selector)))
        logger.debug("Rewrote .siblings() to a filtered children list")
        modified = True
    return modified
