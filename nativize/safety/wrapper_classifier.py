"""
Wrapper classification: does an expression denote a jQuery wrapper object?

An expression is a wrapper when it is a call to the factory (``$(x)`` or
``jQuery(x)``) with exactly one argument, or a plain identifier whose only
binding is initialized with such a call. Everything else is Unknown.
"""

from enum import Enum
from typing import AbstractSet, Optional

from ..syntax.nodes import Node
from ..syntax.queries import (
    call_arguments,
    is_identifier,
    is_optional,
    property_name,
    string_value,
    unparenthesize,
)
from .alias_resolver import is_stable_reference, resolve_binding
from .members import COLLECTION_MEMBERS, DEFAULT_FACTORY_NAMES, ELEMENT_RETURNING_METHODS
from .scopes import find_binding, has_dynamic_scope, in_with_statement, iter_writes, precedes

MAX_ELEMENT_DEPTH = 8

NOT_ELEMENTS = frozenset({"undefined", "NaN", "Infinity", "arguments"})

FACTORY_MODULES = frozenset({"jquery"})


class Provenance(Enum):
    """How an expression came to hold a wrapper."""

    DIRECT = "direct"  # a factory call
    BOUND = "bound"  # an identifier bound to a factory call
    UNKNOWN = "unknown"


def _factory_names(factory_names: Optional[AbstractSet[str]]) -> AbstractSet[str]:
    return DEFAULT_FACTORY_NAMES if factory_names is None else factory_names


def _is_require_of_factory(init: Optional[Node], names: AbstractSet[str]) -> bool:
    """``require("jquery")`` or ``window.jQuery``."""
    init = unparenthesize(init)
    if init is None:
        return False
    if init.type == "call_expression" and is_identifier(init.child("function"), "require"):
        args = call_arguments(init)
        return len(args) == 1 and string_value(args[0]) in FACTORY_MODULES
    if init.type == "member_expression":
        obj = init.child("object")
        return is_identifier(obj, "window") and property_name(init) in names
    return False


def _is_iife_factory_parameter(decl_node: Node, index: int, names: AbstractSet[str]) -> bool:
    """``(function ($) { ... })(jQuery)``: the parameter receives the factory."""
    func = decl_node.parent.parent if decl_node.parent is not None else None
    if func is None:
        return False
    call = func.parent
    while call is not None and call.type == "parenthesized_expression":
        call = call.parent
    if call is None or call.type != "call_expression":
        return False
    if unparenthesize(call.child("function")) is not func:
        return False
    args = call_arguments(call)
    if index >= len(args):
        return False
    arg = args[index]
    return arg.type == "identifier" and arg.code in names and _factory_binding_ok(arg.code, arg, names)


def _factory_binding_ok(name: str, at: Node, names: AbstractSet[str]) -> bool:
    """True when ``name`` at ``at`` still refers to the jQuery factory."""
    if in_with_statement(at):
        return False
    scope, decls = find_binding(name, at)
    if scope is None:
        # Global factory: nothing in the file may assign to it.
        root = at.root()
        if has_dynamic_scope(root):
            return False
        return not any(written == name for written, _ in iter_writes(root))
    if len(decls) != 1 or has_dynamic_scope(scope):
        return False
    if any(written == name for written, _ in iter_writes(scope)):
        return False
    decl = decls[0]
    if decl.kind == "import":
        source = decl.declarator.child("source") if decl.declarator is not None else None
        return string_value(source) in FACTORY_MODULES
    if decl.kind in ("var", "let", "const") and not decl.destructured:
        return _is_require_of_factory(decl.init, names)
    if decl.kind == "param" and decl.declarator is decl.identifier:
        params = decl.identifier.parent
        if params is None or params.type != "formal_parameters":
            return False
        named = [c for c in params.children if c.named and c.type != "comment"]
        return _is_iife_factory_parameter(decl.identifier, named.index(decl.identifier), names)
    return False


def is_factory_call(node: Optional[Node], factory_names: Optional[AbstractSet[str]] = None) -> bool:
    """``$(x)`` shape: a non-optional call of a factory name with one plain argument."""
    node = unparenthesize(node)
    if node is None or node.type != "call_expression":
        return False
    names = _factory_names(factory_names)
    callee = node.child("function")
    if callee is None or callee.type != "identifier" or callee.code not in names:
        return False
    if is_optional(node):
        return False
    args = call_arguments(node)
    if len(args) != 1 or args[0].type == "spread_element":
        return False
    return _factory_binding_ok(callee.code, node, names)


def _is_module_level_dollar(name: str, scope: Optional[Node]) -> bool:
    return name.startswith("$") and scope is not None and scope.type == "program"


def classify(
    expr: Optional[Node], root: Node, factory_names: Optional[AbstractSet[str]] = None
) -> Provenance:
    """
    Derive the wrapper provenance of ``expr`` from the current tree.

    Args:
        expr: Expression to classify; must be attached to ``root``.
        root: Program node of the file.
        factory_names: Names treated as the jQuery factory.

    Returns:
        DIRECT for a factory call, BOUND for an identifier resolving to one,
        UNKNOWN otherwise.
    """
    expr = unparenthesize(expr)
    if expr is None or not expr.is_attached(root):
        return Provenance.UNKNOWN
    if is_factory_call(expr, factory_names):
        return Provenance.DIRECT
    if expr.type != "identifier":
        return Provenance.UNKNOWN

    name = expr.code
    scope, decls = find_binding(name, expr)
    if _is_module_level_dollar(name, scope):
        return Provenance.UNKNOWN
    init = resolve_binding(name, expr)
    if init is None or not is_factory_call(init, factory_names):
        return Provenance.UNKNOWN
    if not precedes(decls[0].declarator, expr):
        return Provenance.UNKNOWN
    return Provenance.BOUND


def is_wrapper_expression(
    expr: Optional[Node], root: Node, factory_names: Optional[AbstractSet[str]] = None
) -> bool:
    return classify(expr, root, factory_names) is not Provenance.UNKNOWN


def wrapped_argument(
    expr: Node, root: Node, factory_names: Optional[AbstractSet[str]] = None
) -> Optional[Node]:
    """The argument node of the factory call behind ``expr`` (still in place in the tree)."""
    provenance = classify(expr, root, factory_names)
    if provenance is Provenance.DIRECT:
        return call_arguments(unparenthesize(expr))[0]
    if provenance is Provenance.BOUND:
        ident = unparenthesize(expr)
        init = unparenthesize(resolve_binding(ident.code, ident))
        return call_arguments(init)[0]
    return None


def wrapper_target(
    expr: Node, root: Node, factory_names: Optional[AbstractSet[str]] = None
) -> Optional[Node]:
    """
    Node a rewrite may put in place of the wrapper ``expr``.

    For a direct factory call this is the live argument node, which the
    caller moves. For an alias it is a fresh copy of the initializer's
    argument, and only when that argument is a literal or a reference whose
    value is the same at the alias' declaration and at ``expr``.
    """
    provenance = classify(expr, root, factory_names)
    if provenance is Provenance.UNKNOWN:
        return None
    arg = wrapped_argument(expr, root, factory_names)
    if arg is None:
        return None
    if provenance is Provenance.DIRECT:
        return arg
    if not is_stable_reference(arg, unparenthesize(expr)):
        return None
    return arg.clone()


def is_element_argument(node: Optional[Node], depth: int = 0) -> bool:
    """
    True when a wrapped argument denotes a DOM node rather than a selector.

    Strings, HTML snippets, functions, arrays and collection members are
    rejected. Identifiers are followed through their binding; an unresolved
    identifier (a parameter, a global) is accepted as an element reference.
    """
    node = unparenthesize(node)
    if node is None or depth > MAX_ELEMENT_DEPTH:
        return False
    if node.type == "this":
        return True
    if node.type == "identifier":
        if node.code in NOT_ELEMENTS:
            return False
        init = resolve_binding(node.code, node)
        if init is None:
            _, decls = find_binding(node.code, node)
            return not decls or all(_is_opaque_element_binding(d) for d in decls)
        return is_element_argument(init, depth + 1)
    if node.type == "member_expression":
        name = property_name(node)
        return name is not None and name not in COLLECTION_MEMBERS and not is_optional(node)
    if node.type == "subscript_expression":
        return not is_optional(node)
    if node.type == "call_expression":
        callee = unparenthesize(node.child("function"))
        return (
            callee is not None
            and callee.type == "member_expression"
            and property_name(callee) in ELEMENT_RETURNING_METHODS
            and not is_optional(node)
        )
    return False


def _is_opaque_element_binding(decl) -> bool:
    """Parameters and ``for (x of ...)`` loop variables are taken to hold elements."""
    if decl.kind in ("param", "catch"):
        return not decl.destructured
    declarator = decl.declarator
    if declarator is not None and declarator.type == "for_in_statement":
        operator = declarator.child("operator")
        return operator is not None and operator.code == "of" and declarator.child("left") is decl.identifier
    return False


def is_factory_identifier(node: Optional[Node], factory_names: Optional[AbstractSet[str]] = None) -> bool:
    """``$`` in ``$.each(...)``: an identifier still bound to the factory."""
    node = unparenthesize(node)
    names = _factory_names(factory_names)
    if node is None or node.type != "identifier" or node.code not in names:
        return False
    return _factory_binding_ok(node.code, node, names)
