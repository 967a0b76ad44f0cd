"""Helpers shared by the jQuery rules."""

import re
from typing import AbstractSet, Iterator, List, Optional, Tuple

from ...safety import (
    Provenance,
    classify,
    is_element_argument,
    is_factory_identifier,
    is_safe_to_transform_initializer,
    wrapped_argument,
    wrapper_target,
)
from ...safety.scopes import FUNCTION_TYPES, find_binding
from ...syntax import builders as b
from ...syntax.nodes import Node
from ...syntax.queries import (
    call_arguments,
    has_spread,
    is_function_literal,
    is_optional,
    property_name,
    statement_of,
    string_value,
    unparenthesize,
)
from ..base import RuleContext
from ..values import is_global

# jQuery selector extensions that native selector APIs reject.
JQUERY_PSEUDOS = re.compile(
    r":(visible|hidden|first|last|eq|gt|lt|even|odd|contains|has|input|button|"
    r"checkbox|radio|text|password|submit|reset|image|file|header|animated|parent|selected)\b"
)

SIMPLE_TOKEN = re.compile(r"^[^\s]+$")

# The "#id" form jQuery resolves with getElementById.
ID_SELECTOR = re.compile(r"^#[\w-]+$", re.ASCII)


def method_calls(root: Node, names: AbstractSet[str]) -> Iterator[Tuple[Node, Node, str]]:
    """
    Yield ``(call, member, name)`` for every ``receiver.name(...)`` call.

    Candidates are collected up front; those detached by an earlier rewrite
    in the same pass are skipped.
    """
    candidates = []
    for call in root.find("call_expression"):
        member = unparenthesize(call.child("function"))
        if member is None or member.type != "member_expression":
            continue
        name = property_name(member)
        if name in names and not is_optional(call) and not is_optional(member):
            candidates.append((call, member, name))
    for call, member, name in candidates:
        if call.is_attached(root) and not has_spread(call):
            yield call, member, name


def static_calls(
    root: Node, names: AbstractSet[str], context: RuleContext
) -> Iterator[Tuple[Node, str, List[Node]]]:
    """Yield ``(call, name, args)`` for ``$.name(...)`` calls on the factory."""
    for call, member, name in method_calls(root, names):
        if is_factory_identifier(member.child("object"), context.factory_names):
            yield call, name, call_arguments(call)


def result_is_discarded(call: Node) -> bool:
    """True when ``call`` is a whole expression statement."""
    return statement_of(call) is not None


def receiver_target(member: Node, root: Node, context: RuleContext) -> Optional[Node]:
    """
    The element a jQuery method call operates on, ready to be moved.

    A direct ``$("#id")`` receiver becomes ``document.getElementById("id")``.

    Args:
        member: The ``receiver.method`` member expression.
        root: Program node.
        context: Rule context with factory names.

    Returns:
        The node to use in place of the wrapper, or None when the receiver is
        not a wrapper around a single element.
    """
    receiver = unparenthesize(member.child("object"))
    names = context.factory_names
    provenance = classify(receiver, root, names)
    if provenance is Provenance.UNKNOWN:
        return None
    arg = wrapped_argument(receiver, root, names)
    element_id = id_selector(arg)
    if element_id is not None:
        # jQuery looks "#id" up when the wrapper is built.
        if provenance is not Provenance.DIRECT or not is_global("document", receiver):
            return None
    elif not is_element_argument(arg):
        return None
    if provenance is Provenance.DIRECT and not is_safe_to_transform_initializer(
        root, receiver, factory_names=names
    ):
        return None
    if element_id is not None:
        return get_element_by_id(element_id)
    return wrapper_target(receiver, root, names)


def factory_name_for(member: Node, root: Node, context: RuleContext) -> Optional[str]:
    """
    Name of the factory that built the receiver of ``member``.

    Returns None unless the same name still denotes the factory at ``member``,
    so a rewrap built with it calls the same function.
    """
    receiver = unparenthesize(member.child("object"))
    arg = wrapped_argument(receiver, root, context.factory_names)
    if arg is None:
        return None
    factory = arg.parent.parent
    callee = factory.child("function")
    if callee is None or callee.type != "identifier":
        return None
    if factory is not receiver:
        use_scope, _ = find_binding(callee.code, member)
        init_scope, _ = find_binding(callee.code, factory)
        if use_scope is not init_scope:
            return None
    return callee.code


def rewrap(factory: str, expr: Node) -> Node:
    """``$(expr)``."""
    return b.call(b.identifier(factory), [expr])


def single_token(node: Optional[Node]) -> Optional[str]:
    """Value of a string literal holding one non-empty, whitespace-free token."""
    value = string_value(node)
    if value is None or not SIMPLE_TOKEN.match(value):
        return None
    return value


def is_native_selector(value: Optional[str]) -> bool:
    return bool(value) and not JQUERY_PSEUDOS.search(value)


def _own_nodes(func: Node, enter_arrows: bool) -> Iterator[Node]:
    """Nodes under ``func`` outside nested functions, arrows optionally included."""
    stack = list(reversed(func.children))
    while stack:
        node = stack.pop()
        yield node
        if node.type in FUNCTION_TYPES and not (enter_arrows and node.type == "arrow_function"):
            continue
        stack.extend(reversed(node.children))


def _search(func: Node, predicate, enter_arrows: bool) -> bool:
    return any(predicate(node) for node in _own_nodes(func, enter_arrows))


def this_references(func: Node) -> List[Node]:
    """``this`` nodes bound by ``func``."""
    return [n for n in _own_nodes(func, enter_arrows=True) if n.type == "this"]


def return_values(func: Node) -> List[Optional[Node]]:
    """Argument of each return statement of ``func``; None for a bare ``return``."""
    values: List[Optional[Node]] = []
    for node in _own_nodes(func, enter_arrows=False):
        if node.type == "return_statement":
            exprs = [c for c in node.children if c.named and c.type != "comment"]
            values.append(exprs[0] if exprs else None)
    return values


def uses_this(func: Node) -> bool:
    """``this`` or ``arguments`` as seen by ``func`` itself."""
    return _search(
        func,
        lambda n: n.type == "this" or (n.type == "identifier" and n.code == "arguments"),
        enter_arrows=True,
    )


def may_return_false(func: Node) -> bool:
    """
    True when ``func`` may return ``false``, which jQuery treats as a signal.

    A block body qualifies with any ``return <value>`` other than ``true``.
    An expression-bodied arrow qualifies only when its body is ``false``.
    """
    body = func.child("body")
    if func.type == "arrow_function" and body is not None and body.type != "statement_block":
        return unparenthesize(body).type == "false"

    def matches(node: Node) -> bool:
        if node.type != "return_statement":
            return False
        exprs = [c for c in node.children if c.named and c.type != "comment"]
        return bool(exprs) and unparenthesize(exprs[0]).type != "true"

    return _search(func, matches, enter_arrows=False)


def is_function_value(node: Optional[Node]) -> bool:
    return is_function_literal(unparenthesize(node))


def id_selector(node: Optional[Node]) -> Optional[str]:
    """``"id"`` for a ``"#id"`` string literal."""
    value = string_value(node)
    if value is None or not ID_SELECTOR.match(value):
        return None
    return value[1:]


def get_element_by_id(element_id: str) -> Node:
    return b.method_call(b.identifier("document"), "getElementById", [b.string_literal(element_id)])


def uses_arguments(func: Node) -> bool:
    """``arguments`` as seen by ``func`` itself."""
    return _search(
        func, lambda n: n.type == "identifier" and n.code == "arguments", enter_arrows=True
    )


def simple_parameters(func: Node) -> Optional[List[Node]]:
    """Parameters of ``func`` when all are plain identifiers, else None."""
    single = func.child("parameter")
    if single is not None:
        return [single] if single.type == "identifier" else None
    params = func.child("parameters")
    if params is None:
        return None
    named = [c for c in params.children if c.named and c.type != "comment"]
    if any(c.type != "identifier" for c in named):
        return None
    return named
