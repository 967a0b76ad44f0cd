"""Visibility and inline style rules."""

import logging
import re

from ...safety import wrapped_argument
from ...syntax import builders as b
from ...syntax.nodes import Node
from ...syntax.queries import call_arguments, is_identifier, string_value, unparenthesize
from ..base import RuleContext, rule
from ..values import is_global
from ._common import method_calls, receiver_target, result_is_discarded

logger = logging.getLogger(__name__)

DISPLAY_VALUES = {"show": "", "hide": "none"}

# jQuery measures the window through the root element.
CLIENT_SIZES = {"width": "clientWidth", "height": "clientHeight"}

CSS_NAME = re.compile(r"^-?-?[A-Za-z][A-Za-z0-9-]*$")

# "+=10px" is relative to the current value in jQuery.
RELATIVE_VALUE = re.compile(r"^[+-]=")


def kebab_case(name: str) -> str:
    """``backgroundColor`` -> ``background-color``; custom properties are kept."""
    if name.startswith("--"):
        return name
    return re.sub(r"[A-Z]", lambda m: "-" + m.group(0).lower(), name)


@rule("jquery")
def show_hide_to_style_display(root: Node, context: RuleContext) -> bool:
    """$(el).show() / .hide() -> el.style.display = "" / "none" """
    modified = False
    for call, member, name in method_calls(root, DISPLAY_VALUES.keys()):
        if call_arguments(call) or not result_is_discarded(call):
            continue
        target = receiver_target(member, root, context)
        if target is None:
            continue
        style = b.member(b.member(target, "style"), "display")
        call.replace_with(b.assignment(style, b.string_literal(DISPLAY_VALUES[name])))
        logger.debug("Rewrote .%s() to style.display", name)
        modified = True
    return modified


@rule("jquery")
def css_to_style(root: Node, context: RuleContext) -> bool:
    """$(el).css(name[, "value"]) -> getComputedStyle / style.setProperty"""
    modified = False
    for call, member, _ in method_calls(root, {"css"}):
        args = call_arguments(call)
        if not args or len(args) > 2:
            continue
        prop = string_value(args[0])
        if prop is None or not CSS_NAME.match(prop):
            continue
        if len(args) == 2:
            value = string_value(args[1])
            if value is None or RELATIVE_VALUE.match(value) or not result_is_discarded(call):
                continue
        elif not is_global("getComputedStyle", call):
            continue

        target = receiver_target(member, root, context)
        if target is None:
            continue
        name = b.string_literal(kebab_case(prop))
        if len(args) == 2:
            replacement = b.method_call(b.member(target, "style"), "setProperty", [name, args[1]])
        else:
            computed = b.call(b.identifier("getComputedStyle"), [target])
            replacement = b.method_call(computed, "getPropertyValue", [name])
        call.replace_with(replacement)
        logger.debug("Rewrote .css(%r) to native style access", prop)
        modified = True
    return modified


@rule("jquery")
def window_size_to_client_size(root: Node, context: RuleContext) -> bool:
    """$(window).width() / .height() -> document.documentElement.clientWidth / clientHeight"""
    modified = False
    for call, member, name in method_calls(root, CLIENT_SIZES.keys()):
        if call_arguments(call):
            continue
        receiver = unparenthesize(member.child("object"))
        arg = unparenthesize(wrapped_argument(receiver, root, context.factory_names))
        if not is_identifier(arg, "window") or not is_global("window", arg):
            continue
        if not is_global("document", call):
            continue
        element = b.member(b.identifier("document"), "documentElement")
        call.replace_with(b.member(element, CLIENT_SIZES[name]))
        logger.debug("Rewrote $(window).%s() to %s", name, CLIENT_SIZES[name])
        modified = True
    return modified
