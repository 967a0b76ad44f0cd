"""classList rules."""

import logging

from ...syntax import builders as b
from ...syntax.nodes import Node
from ...syntax.queries import call_arguments, string_value
from ..base import RuleContext, rule
from ._common import method_calls, receiver_target, result_is_discarded, single_token

logger = logging.getLogger(__name__)

CLASS_LIST_METHODS = {"addClass": "add", "removeClass": "remove"}


@rule("jquery")
def add_remove_class_to_class_list(root: Node, context: RuleContext) -> bool:
    """$(el).addClass("a b") -> el.classList.add("a", "b")"""
    modified = False
    for call, member, name in method_calls(root, CLASS_LIST_METHODS.keys()):
        args = call_arguments(call)
        if len(args) != 1 or not result_is_discarded(call):
            continue
        value = string_value(args[0])
        if value is None:
            continue
        classes = value.split()
        if not classes:
            continue
        target = receiver_target(member, root, context)
        if target is None:
            continue
        class_list = b.member(target, "classList")
        call.replace_with(
            b.method_call(class_list, CLASS_LIST_METHODS[name], [b.string_literal(c) for c in classes])
        )
        logger.debug("Rewrote .%s(%r) to classList", name, value)
        modified = True
    return modified


@rule("jquery")
def toggle_class_to_class_list(root: Node, context: RuleContext) -> bool:
    """$(el).toggleClass("a") -> el.classList.toggle("a")"""
    modified = False
    for call, member, _ in method_calls(root, {"toggleClass"}):
        args = call_arguments(call)
        if len(args) != 1 or not result_is_discarded(call):
            continue
        if single_token(args[0]) is None:
            continue
        target = receiver_target(member, root, context)
        if target is None:
            continue
        call.replace_with(b.method_call(b.member(target, "classList"), "toggle", [args[0]]))
        logger.debug("Rewrote .toggleClass() to classList.toggle")
        modified = True
    return modified


@rule("jquery")
def has_class_to_class_list_contains(root: Node, context: RuleContext) -> bool:
    """$(el).hasClass("a") -> el.classList.contains("a")"""
    modified = False
    for call, member, _ in method_calls(root, {"hasClass"}):
        args = call_arguments(call)
        if len(args) != 1 or single_token(args[0]) is None:
            continue
        target = receiver_target(member, root, context)
        if target is None:
            continue
        call.replace_with(b.method_call(b.member(target, "classList"), "contains", [args[0]]))
        logger.debug("Rewrote .hasClass() to classList.contains")
        modified = True
    return modified
