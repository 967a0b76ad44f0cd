"""
Alias resolution: map an identifier to its single, never-reassigned initializer.
"""

from typing import Optional

from ..syntax.nodes import Node
from ..syntax.queries import is_literal, unparenthesize
from .scopes import (
    find_binding,
    has_dynamic_scope,
    in_with_statement,
    iter_writes,
    precedes,
    this_scope,
)

RESOLVABLE_KINDS = frozenset({"var", "let", "const"})


def resolve_binding(name: str, scope: Node) -> Optional[Node]:
    """
    Find the initializer an identifier is bound to.

    The nearest enclosing scope that declares ``name`` wins. A result is
    returned only when that scope holds exactly one simple declaration of
    ``name`` with an initializer and nothing anywhere under that scope
    assigns to ``name`` again. The check ignores the position of the use
    site, so a write after the use still invalidates the binding.

    Args:
        name: Identifier name to resolve.
        scope: The scope node (or any node) the name is used within.

    Returns:
        The initializer expression node, or None when the binding is unknown.
    """
    if not name or in_with_statement(scope):
        return None

    declaring_scope, decls = find_binding(name, scope)
    if declaring_scope is None or len(decls) != 1:
        return None

    decl = decls[0]
    if decl.kind not in RESOLVABLE_KINDS or decl.destructured or decl.init is None:
        return None
    if decl.declarator is None or decl.declarator.child("name") is not decl.identifier:
        return None

    if has_dynamic_scope(declaring_scope):
        return None
    for written, _ in iter_writes(declaring_scope):
        if written == name:
            return None

    return decl.init


def _stable_binding(name: str, node: Node, use_site: Node) -> bool:
    if in_with_statement(node) or in_with_statement(use_site):
        return False
    scope, decls = find_binding(name, node)
    use_scope, _ = find_binding(name, use_site)
    if scope is not use_scope:
        return False
    owner = scope if scope is not None else node.root()
    if has_dynamic_scope(owner):
        return False
    if any(written == name for written, _ in iter_writes(owner)):
        return False
    if scope is None:
        return True
    if len(decls) != 1:
        return False
    decl = decls[0]
    if decl.kind in RESOLVABLE_KINDS:
        declarator = decl.declarator
        if declarator is None:
            return False
        return declarator.type == "for_in_statement" or precedes(declarator, use_site)
    return decl.kind in ("param", "import", "function", "class")


def is_stable_reference(node: Optional[Node], use_site: Node) -> bool:
    """
    True when ``node`` evaluates to the same value when re-evaluated at ``use_site``.

    Literals always do. ``this`` does when both positions share the same
    ``this`` binding. An identifier does when it resolves to the same
    never-written binding at both positions.
    """
    node = unparenthesize(node)
    if node is None:
        return False
    if is_literal(node):
        return True
    if node.type == "this":
        return this_scope(node) is this_scope(use_site)
    if node.type == "identifier":
        if node.code in ("undefined", "arguments"):
            return False
        return _stable_binding(node.code, node, use_site)
    return False


def is_duplicable(node: Optional[Node], use_site: Optional[Node] = None) -> bool:
    """
    True when ``node`` may appear more than once in a rewrite's output.

    Without ``use_site`` only immutable literals qualify; with it, a stable
    reference (see ``is_stable_reference``) qualifies as well.
    """
    if is_literal(unparenthesize(node)):
        return True
    return use_site is not None and is_stable_reference(node, use_site)
