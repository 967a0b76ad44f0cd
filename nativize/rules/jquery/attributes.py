"""Attribute, property and content accessor rules."""

import logging
import re
from typing import Optional

from ...syntax import builders as b
from ...syntax.nodes import Node
from ...syntax.queries import call_arguments, string_value, unparenthesize
from ..base import RuleContext, rule
from ._common import (
    is_function_value,
    method_calls,
    receiver_target,
    result_is_discarded,
    single_token,
)

logger = logging.getLogger(__name__)

# jQuery accessor -> native property
CONTENT_PROPERTIES = {"val": "value", "text": "textContent", "html": "innerHTML"}

# jQuery.propFix
PROP_FIX = {
    "for": "htmlFor",
    "class": "className",
    "tabindex": "tabIndex",
    "readonly": "readOnly",
    "maxlength": "maxLength",
    "cellspacing": "cellSpacing",
    "cellpadding": "cellPadding",
    "rowspan": "rowSpan",
    "colspan": "colSpan",
    "usemap": "useMap",
    "frameborder": "frameBorder",
    "contenteditable": "contentEditable",
}

IDENTIFIER_NAME = re.compile(r"^[A-Za-z_$][\w$]*$")

# Markup jQuery's html() hands to append() instead of innerHTML.
NOT_INNER_HTML = re.compile(
    r"<(script|style|link|option|optgroup|thead|tbody|tfoot|colgroup|caption|col|tr|td|th)\b",
    re.IGNORECASE,
)


def is_string_valued(node: Optional[Node]) -> bool:
    """Expression that evaluates to a non-null string or number."""
    node = unparenthesize(node)
    if node is None:
        return False
    if node.type in ("string", "template_string", "number"):
        return True
    if node.type == "binary_expression":
        operator = node.child("operator")
        if operator is None or operator.code != "+":
            return False
        operands = [unparenthesize(node.child("left")), unparenthesize(node.child("right"))]
        if any(o is not None and o.type in ("string", "template_string") for o in operands):
            return True
        return all(is_string_valued(o) for o in operands)
    return False


@rule("jquery")
def attr_to_get_set_attribute(root: Node, context: RuleContext) -> bool:
    """$(el).attr(name[, value]) -> el.getAttribute(name) / el.setAttribute(name, value)"""
    modified = False
    for call, member, _ in method_calls(root, {"attr"}):
        args = call_arguments(call)
        if not args or len(args) > 2 or single_token(args[0]) is None:
            continue
        if len(args) == 2 and not (is_string_valued(args[1]) and result_is_discarded(call)):
            continue
        target = receiver_target(member, root, context)
        if target is None:
            continue
        method = "setAttribute" if len(args) == 2 else "getAttribute"
        call.replace_with(b.method_call(target, method, args))
        logger.debug("Rewrote .attr() to %s", method)
        modified = True
    return modified


@rule("jquery")
def remove_attr_to_remove_attribute(root: Node, context: RuleContext) -> bool:
    """$(el).removeAttr(name) -> el.removeAttribute(name)"""
    modified = False
    for call, member, _ in method_calls(root, {"removeAttr"}):
        args = call_arguments(call)
        if len(args) != 1 or single_token(args[0]) is None or not result_is_discarded(call):
            continue
        target = receiver_target(member, root, context)
        if target is None:
            continue
        call.replace_with(b.method_call(target, "removeAttribute", args))
        logger.debug("Rewrote .removeAttr() to removeAttribute")
        modified = True
    return modified


@rule("jquery")
def prop_to_direct_property(root: Node, context: RuleContext) -> bool:
    """$(el).prop("checked"[, value]) -> el.checked [= value]"""
    modified = False
    for call, member, _ in method_calls(root, {"prop"}):
        args = call_arguments(call)
        if not args or len(args) > 2:
            continue
        name = string_value(args[0])
        if name is None or not IDENTIFIER_NAME.match(name):
            continue
        if len(args) == 2 and (is_function_value(args[1]) or not result_is_discarded(call)):
            continue
        target = receiver_target(member, root, context)
        if target is None:
            continue
        access = b.member(target, PROP_FIX.get(name, name))
        replacement = b.assignment(access, args[1]) if len(args) == 2 else access
        call.replace_with(replacement)
        logger.debug("Rewrote .prop(%r) to direct property access", name)
        modified = True
    return modified


def _setter_value_ok(name: str, value: Node, call: Node) -> bool:
    if is_function_value(value) or not result_is_discarded(call):
        return False
    if name == "html":
        markup = string_value(value)
        return markup is not None and not NOT_INNER_HTML.search(markup)
    if name == "val":
        # Arrays select options and null clears the field.
        return is_string_valued(value)
    return True


@rule("jquery")
def content_accessors_to_properties(root: Node, context: RuleContext) -> bool:
    """$(el).val() / .text() / .html() -> el.value / el.textContent / el.innerHTML"""
    modified = False
    for call, member, name in method_calls(root, CONTENT_PROPERTIES.keys()):
        args = call_arguments(call)
        if len(args) > 1:
            continue
        if args and not _setter_value_ok(name, args[0], call):
            continue
        target = receiver_target(member, root, context)
        if target is None:
            continue
        access = b.member(target, CONTENT_PROPERTIES[name])
        replacement = b.assignment(access, args[0]) if args else access
        call.replace_with(replacement)
        logger.debug("Rewrote .%s() to %s", name, CONTENT_PROPERTIES[name])
        modified = True
    return modified
