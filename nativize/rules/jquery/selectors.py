"""
Selector and wrapper elimination rules.

These rules remove the factory call itself. Each one asks the chain checker
whether every use of the wrapper value stays within an allow-set, and the
initializer guard whether this occurrence can be folded at all.
"""

import logging
import re
from typing import AbstractSet, List, Optional

from ...safety import (
    NODE_LIST_MEMBERS,
    chain_is_foldable,
    is_element_argument,
    is_factory_call,
    is_safe_to_transform_initializer,
    wrapper_target,
)
from ...safety.scopes import find_binding, iter_writes
from ...syntax import builders as b
from ...syntax.nodes import Node
from ...syntax.queries import call_arguments, string_value, unparenthesize
from ..base import RuleContext, rule
from ..values import is_global
from ._common import (
    ID_SELECTOR,
    get_element_by_id,
    id_selector,
    is_function_value,
    is_native_selector,
    may_return_false,
    method_calls,
    result_is_discarded,
    simple_parameters,
    this_references,
    uses_arguments,
)

logger = logging.getLogger(__name__)

# The ".name" form jQuery resolves with getElementsByClassName, restricted to
# names querySelectorAll accepts unescaped.
CLASS_SELECTOR = re.compile(r"^\.-?[A-Za-z_][\w-]*$", re.ASCII)


def _factory_calls(root: Node, context: RuleContext):
    for call in list(root.find("call_expression")):
        if call.is_attached(root) and is_factory_call(call, context.factory_names):
            yield call


def _initializes_variable(call: Node) -> bool:
    holder = call
    while holder.parent is not None and holder.parent.type == "parenthesized_expression":
        holder = holder.parent
    parent = holder.parent
    return parent is not None and parent.type == "variable_declarator" and parent.child("value") is holder


def _may_fold(call: Node, root: Node, context: RuleContext, allowed: AbstractSet[str]) -> bool:
    if not is_safe_to_transform_initializer(
        root, call, allowed=allowed, factory_names=context.factory_names
    ):
        return False
    return chain_is_foldable(call, allowed) or _initializes_variable(call)


@rule("jquery")
def id_selector_to_get_element_by_id(root: Node, context: RuleContext) -> bool:
    """$("#id").focus() -> document.getElementById("id").focus()"""
    modified = False
    for call in _factory_calls(root, context):
        element_id = id_selector(call_arguments(call)[0])
        if element_id is None or not is_global("document", call):
            continue
        if not _may_fold(call, root, context, context.transformable_members):
            continue
        call.replace_with(get_element_by_id(element_id))
        logger.debug("Rewrote $(%r) to getElementById", "#" + element_id)
        modified = True
    return modified


@rule("jquery")
def class_selector_to_query_selector_all(root: Node, context: RuleContext) -> bool:
    """$(".cls").length -> document.querySelectorAll(".cls").length"""
    modified = False
    for call in _factory_calls(root, context):
        selector = call_arguments(call)[0]
        value = string_value(selector)
        if value is None or not CLASS_SELECTOR.match(value) or not is_global("document", call):
            continue
        if not _may_fold(call, root, context, NODE_LIST_MEMBERS):
            continue
        call.replace_with(b.method_call(b.identifier("document"), "querySelectorAll", [selector]))
        logger.debug("Rewrote $(%r) to querySelectorAll", value)
        modified = True
    return modified


def _is_document_query(value: Optional[str]) -> bool:
    """A selector jQuery hands to the native selector engine unchanged."""
    return (
        is_native_selector(value)
        and bool(value.strip())
        and "<" not in value
        and not ID_SELECTOR.match(value)
    )


def _each_callback_parameters(func: Node) -> Optional[List[Node]]:
    """
    Parameters of an ``each`` callback that forEach may call instead.

    jQuery passes ``(index, element)`` and binds ``this`` to the element;
    forEach passes ``(element, index)``. A function that reads ``this`` must
    name the element so ``this`` can be replaced by it.
    """
    if func.type not in ("function_expression", "function", "arrow_function"):
        return None
    body = func.child("body")
    if body is None or body.type != "statement_block":
        return None
    params = simple_parameters(func)
    if params is None or len(params) not in (0, 2) or may_return_false(func):
        return None
    if func.type == "arrow_function":
        return params
    if uses_arguments(func):
        return None
    this_nodes = this_references(func)
    if not this_nodes:
        return params
    if not params:
        return None
    element = params[1]
    if any(written == element.code for written, _ in iter_writes(func)):
        return None
    for node in this_nodes:
        scope, _ = find_binding(element.code, node)
        if scope is not func:
            return None
    return params


@rule("jquery")
def each_to_node_list_for_each(root: Node, context: RuleContext) -> bool:
    """$(".item").each(function (i, el) {...}) -> document.querySelectorAll(".item").forEach(...)"""
    modified = False
    for call, member, _ in method_calls(root, {"each"}):
        args = call_arguments(call)
        if len(args) != 1 or not result_is_discarded(call) or not is_function_value(args[0]):
            continue
        factory = unparenthesize(member.child("object"))
        if not is_factory_call(factory, context.factory_names):
            continue
        selector = call_arguments(factory)[0]
        if not _is_document_query(string_value(selector)) or not is_global("document", call):
            continue
        if not is_safe_to_transform_initializer(root, factory, factory_names=context.factory_names):
            continue
        func = unparenthesize(args[0])
        params = _each_callback_parameters(func)
        if params is None:
            continue
        if params:
            index, element = params
            if func.type != "arrow_function":
                for node in this_references(func):
                    node.replace_with(b.identifier(element.code))
            index.parent.replace_with(b.formal_parameters([element, index]))
        query = b.method_call(b.identifier("document"), "querySelectorAll", [selector])
        call.replace_with(b.method_call(query, "forEach", [args[0]]))
        logger.debug("Rewrote .each() over a selector to NodeList forEach")
        modified = True
    return modified


@rule("jquery")
def unwrap_element_chains(root: Node, context: RuleContext) -> bool:
    """$(el).focus() -> el.focus(), when every chained member is allow-listed"""
    modified = False
    for call in _factory_calls(root, context):
        arg = call_arguments(call)[0]
        if not is_element_argument(arg):
            continue
        if not chain_is_foldable(call, context.transformable_members):
            continue
        if not is_safe_to_transform_initializer(root, call, factory_names=context.factory_names):
            continue
        target = wrapper_target(call, root, context.factory_names)
        if target is None:
            continue
        call.replace_with(target)
        logger.debug("Eliminated wrapper around %s", target.code)
        modified = True
    return modified
