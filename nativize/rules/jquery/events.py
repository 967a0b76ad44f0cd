"""Event binding and dispatch rules."""

import logging
import re
from typing import Optional

from ...safety import is_factory_call, is_safe_to_transform_initializer
from ...safety.alias_resolver import resolve_binding
from ...safety.scopes import find_binding, iter_writes
from ...syntax import builders as b
from ...syntax.nodes import Node
from ...syntax.queries import call_arguments, is_identifier, string_value, unparenthesize
from ..base import RuleContext, rule
from ..values import is_global
from ._common import (
    is_function_value,
    may_return_false,
    method_calls,
    receiver_target,
    result_is_discarded,
)

logger = logging.getLogger(__name__)

# A single, un-namespaced event type.
EVENT_NAME = re.compile(r"^[A-Za-z][\w:-]*$")


def _event_name(node: Node) -> Optional[str]:
    value = string_value(node)
    if value is None or not EVENT_NAME.match(value):
        return None
    return value


def _handler_function(node: Node) -> Optional[Node]:
    """The function a handler expression denotes, when it is defined in this file."""
    node = unparenthesize(node)
    if is_function_value(node):
        return node
    if node is None or node.type != "identifier":
        return None
    init = unparenthesize(resolve_binding(node.code, node))
    if is_function_value(init):
        return init
    scope, decls = find_binding(node.code, node)
    if scope is None or len(decls) != 1:
        return None
    declaration = decls[0].declarator
    if declaration is None or declaration.type != "function_declaration":
        return None
    if any(name == node.code for name, _ in iter_writes(scope)):
        return None
    return declaration


def _has_parameters(func: Node) -> bool:
    if func.child("parameter") is not None:
        return True
    params = func.child("parameters")
    return params is not None and any(c.named and c.type != "comment" for c in params.children)


def _is_plain_handler(node: Node) -> bool:
    func = _handler_function(node)
    return func is not None and not may_return_false(func)


@rule("jquery")
def on_to_add_event_listener(root: Node, context: RuleContext) -> bool:
    """$(el).on("click", fn) -> el.addEventListener("click", fn)"""
    modified = False
    for call, member, _ in method_calls(root, {"on"}):
        args = call_arguments(call)
        if len(args) != 2 or _event_name(args[0]) is None:
            continue
        if not _is_plain_handler(args[1]) or not result_is_discarded(call):
            continue
        target = receiver_target(member, root, context)
        if target is None:
            continue
        call.replace_with(b.method_call(target, "addEventListener", args))
        logger.debug("Rewrote .on(%r) to addEventListener", string_value(args[0]))
        modified = True
    return modified


@rule("jquery")
def off_to_remove_event_listener(root: Node, context: RuleContext) -> bool:
    """$(el).off("click", handler) -> el.removeEventListener("click", handler)"""
    modified = False
    for call, member, _ in method_calls(root, {"off"}):
        args = call_arguments(call)
        if len(args) != 2 or _event_name(args[0]) is None:
            continue
        if unparenthesize(args[1]).type != "identifier" or not _is_plain_handler(args[1]):
            continue
        if not result_is_discarded(call):
            continue
        target = receiver_target(member, root, context)
        if target is None:
            continue
        call.replace_with(b.method_call(target, "removeEventListener", args))
        logger.debug("Rewrote .off(%r) to removeEventListener", string_value(args[0]))
        modified = True
    return modified


@rule("jquery")
def trigger_to_dispatch_event(root: Node, context: RuleContext) -> bool:
    """$(el).trigger("change") -> el.dispatchEvent(new Event("change", { bubbles: true }))"""
    modified = False
    for call, member, _ in method_calls(root, {"trigger"}):
        args = call_arguments(call)
        if len(args) != 1 or _event_name(args[0]) is None or not result_is_discarded(call):
            continue
        if not is_global("Event", call):
            continue
        target = receiver_target(member, root, context)
        if target is None:
            continue
        options = b.object_literal([("bubbles", b.boolean(True))])
        event = b.new_expression(b.identifier("Event"), [args[0], options])
        call.replace_with(b.method_call(target, "dispatchEvent", [event]))
        logger.debug("Rewrote .trigger(%r) to dispatchEvent", string_value(args[0]))
        modified = True
    return modified


def _dom_content_loaded(handler: Node) -> Node:
    document = b.identifier("document")
    return b.method_call(
        document, "addEventListener", [b.string_literal("DOMContentLoaded"), handler]
    )


@rule("jquery")
def ready_to_dom_content_loaded(root: Node, context: RuleContext) -> bool:
    """$(document).ready(fn) / $(fn) -> document.addEventListener("DOMContentLoaded", fn)"""
    modified = False
    names = context.factory_names

    for call, member, _ in method_calls(root, {"ready"}):
        args = call_arguments(call)
        receiver = unparenthesize(member.child("object"))
        if len(args) != 1 or not result_is_discarded(call):
            continue
        func = _handler_function(args[0])
        if func is None or _has_parameters(func):
            continue
        if not is_factory_call(receiver, names):
            continue
        wrapped = unparenthesize(call_arguments(receiver)[0])
        if not is_identifier(wrapped, "document") or not is_global("document", call):
            continue
        call.replace_with(_dom_content_loaded(args[0]))
        logger.debug("Rewrote $(document).ready() to DOMContentLoaded listener")
        modified = True

    for call in root.find("call_expression"):
        if not call.is_attached(root) or not is_factory_call(call, names):
            continue
        handler = call_arguments(call)[0]
        if not is_function_value(handler) or _has_parameters(unparenthesize(handler)):
            continue
        if not result_is_discarded(call) or not is_global("document", call):
            continue
        if not is_safe_to_transform_initializer(root, call, factory_names=names):
            continue
        call.replace_with(_dom_content_loaded(handler))
        logger.debug("Rewrote $(fn) to DOMContentLoaded listener")
        modified = True
    return modified
