"""
Lexical scope model for a single JavaScript file.

Everything here is recomputed from the live tree on every call. Rules mutate
the tree between queries, so no declaration table outlives the query that
built it.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterator, List, Optional, Tuple

from ..syntax.nodes import Node
from ..syntax.queries import unparenthesize

FUNCTION_TYPES = frozenset(
    {
        "function_declaration",
        "function_expression",
        "function",
        "generator_function",
        "generator_function_declaration",
        "arrow_function",
        "method_definition",
    }
)

BLOCK_SCOPE_TYPES = frozenset(
    {"for_statement", "for_in_statement", "catch_clause", "class_body", "switch_body"}
)

PATTERN_TYPES = frozenset(
    {
        "object_pattern",
        "array_pattern",
        "assignment_pattern",
        "object_assignment_pattern",
        "rest_pattern",
        "pair_pattern",
    }
)


@dataclass
class Declaration:
    """A single binding introduced somewhere in the file."""

    name: str
    kind: str  # var, let, const, function, class, param, catch, import
    identifier: Node
    scope: Node
    declarator: Optional[Node] = None
    init: Optional[Node] = None
    destructured: bool = False


DeclarationIndex = Dict[Tuple[int, str], List[Declaration]]


def is_scope(node: Node) -> bool:
    if node.type == "program" or node.type in FUNCTION_TYPES:
        return True
    if node.type == "statement_block":
        return node.parent is None or node.parent.type not in FUNCTION_TYPES
    return node.type in BLOCK_SCOPE_TYPES


def enclosing_scope(node: Node) -> Optional[Node]:
    """Nearest scope strictly above ``node``."""
    for ancestor in node.ancestors():
        if is_scope(ancestor):
            return ancestor
    return None


def function_scope(node: Node) -> Optional[Node]:
    """Nearest function or program strictly above ``node`` (the ``var`` target)."""
    for ancestor in node.ancestors():
        if ancestor.type == "program" or ancestor.type in FUNCTION_TYPES:
            return ancestor
    return None


def this_scope(node: Node) -> Optional[Node]:
    """The function that determines the value of ``this`` at ``node``."""
    for ancestor in node.ancestors():
        if ancestor.type == "program":
            return ancestor
        if ancestor.type in FUNCTION_TYPES and ancestor.type != "arrow_function":
            return ancestor
    return None


def scope_chain(node: Node) -> Iterator[Node]:
    """``node`` itself when it is a scope, then every enclosing scope outwards."""
    if is_scope(node):
        yield node
    for ancestor in node.ancestors():
        if is_scope(ancestor):
            yield ancestor


def pattern_identifiers(pattern: Optional[Node]) -> List[Node]:
    """Identifiers bound by a binding or assignment target."""
    found: List[Node] = []
    stack = [pattern] if pattern is not None else []
    while stack:
        node = stack.pop()
        if node.type in ("identifier", "shorthand_property_identifier_pattern"):
            found.append(node)
            continue
        if node.type == "parenthesized_expression":
            inner = unparenthesize(node)
            if inner is not node:
                stack.append(inner)
            continue
        if node.type not in PATTERN_TYPES:
            continue
        for child in reversed(node.children):
            if not child.named or child.type == "comment":
                continue
            if node.type == "pair_pattern" and child.field == "key":
                continue
            if node.type in ("assignment_pattern", "object_assignment_pattern") and child.field == "right":
                continue
            stack.append(child)
    return found


def _is_destructuring(target: Node) -> bool:
    return target.type in PATTERN_TYPES


def _function_params(func: Node) -> List[Node]:
    single = func.child("parameter")
    if single is not None:
        return [single]
    params = func.child("parameters")
    if params is None:
        return []
    return [c for c in params.children if c.named and c.type != "comment"]


def iter_declarations(root: Node) -> Iterator[Declaration]:
    """Every declaration in ``root``'s subtree, attributed to its scope."""
    for node in root.walk():
        t = node.type
        if t in ("variable_declaration", "lexical_declaration"):
            if t == "variable_declaration":
                kind = "var"
                scope = function_scope(node)
            else:
                kind_node = node.child("kind")
                kind = kind_node.code if kind_node is not None else node.children[0].code
                scope = enclosing_scope(node)
            if scope is None:
                continue
            for declarator in node.children:
                if declarator.type != "variable_declarator":
                    continue
                target = declarator.child("name")
                init = declarator.child("value")
                destructured = target is not None and _is_destructuring(target)
                for ident in pattern_identifiers(target):
                    yield Declaration(
                        ident.code, kind, ident, scope, declarator, init, destructured
                    )
        elif t in ("function_declaration", "generator_function_declaration", "class_declaration"):
            name = node.child("name")
            scope = enclosing_scope(node)
            if name is not None and scope is not None:
                kind = "class" if t == "class_declaration" else "function"
                yield Declaration(name.code, kind, name, scope, node)
        elif t in ("function_expression", "function", "generator_function"):
            name = node.child("name")
            if name is not None:
                yield Declaration(name.code, "function", name, node, node)
        if t in FUNCTION_TYPES:
            for param in _function_params(node):
                destructured = param.type != "identifier"
                for ident in pattern_identifiers(param):
                    yield Declaration(ident.code, "param", ident, node, param, None, destructured)
        elif t == "catch_clause":
            param = node.child("parameter")
            for ident in pattern_identifiers(param):
                yield Declaration(ident.code, "catch", ident, node, param, None, param.type != "identifier")
        elif t == "for_in_statement":
            kind_node = node.child("kind")
            if kind_node is not None:
                kind = kind_node.code
                scope = function_scope(node) if kind == "var" else node
                left = node.child("left")
                for ident in pattern_identifiers(left):
                    yield Declaration(ident.code, kind, ident, scope, node, None, True)
        elif t == "import_statement":
            yield from _import_declarations(node)


def _import_declarations(node: Node) -> Iterator[Declaration]:
    program = node.root()
    for sub in node.walk():
        if sub.type == "import_clause":
            for child in sub.children:
                if child.type == "identifier":
                    yield Declaration(child.code, "import", child, program, node)
        elif sub.type == "namespace_import":
            for child in sub.children:
                if child.type == "identifier":
                    yield Declaration(child.code, "import", child, program, node)
        elif sub.type == "import_specifier":
            local = sub.child("alias") or sub.child("name")
            if local is not None and local.type == "identifier":
                yield Declaration(local.code, "import", local, program, node)


def build_index(root: Node) -> DeclarationIndex:
    index: DeclarationIndex = {}
    for decl in iter_declarations(root):
        index.setdefault((id(decl.scope), decl.name), []).append(decl)
    return index


def iter_writes(root: Node) -> Iterator[Tuple[str, Node]]:
    """``(name, identifier)`` for every assignment to a plain name."""
    for node in root.walk():
        t = node.type
        if t in ("assignment_expression", "augmented_assignment_expression"):
            target = unparenthesize(node.child("left"))
        elif t == "update_expression":
            target = unparenthesize(node.child("argument"))
        elif t == "for_in_statement" and node.child("kind") is None:
            target = unparenthesize(node.child("left"))
        else:
            continue
        if target is None:
            continue
        if target.type == "identifier":
            yield target.code, target
        elif _is_destructuring(target):
            for ident in pattern_identifiers(target):
                yield ident.code, ident


def _lookup(index: DeclarationIndex, name: str, at: Node) -> Tuple[Optional[Node], List[Declaration]]:
    for scope in scope_chain(at):
        decls = index.get((id(scope), name))
        if decls:
            return scope, decls
    return None, []


def find_binding(name: str, at: Node) -> Tuple[Optional[Node], List[Declaration]]:
    """
    Resolve ``name`` lexically from ``at``.

    Returns:
        ``(scope, declarations)`` for the nearest scope declaring ``name``,
        or ``(None, [])`` for an undeclared (global) name.
    """
    return _lookup(build_index(at.root()), name, at)


def references(name: str, scope: Node) -> List[Node]:
    """Identifier occurrences under ``scope`` that resolve to ``scope``'s binding of ``name``."""
    index = build_index(scope.root())
    declared_at = {id(d.identifier) for d in index.get((id(scope), name), [])}
    found = []
    for node in scope.walk():
        if node.type not in ("identifier", "shorthand_property_identifier"):
            continue
        if node.code != name or id(node) in declared_at:
            continue
        resolved, _ = _lookup(index, name, node)
        if resolved is scope:
            found.append(node)
    return found


def has_dynamic_scope(scope: Node) -> bool:
    """True when ``with`` or a direct ``eval`` call appears under ``scope``."""
    for node in scope.walk():
        if node.type == "with_statement":
            return True
        if node.type == "call_expression":
            callee = node.child("function")
            if callee is not None and callee.type == "identifier" and callee.code == "eval":
                return True
    return False


def in_with_statement(node: Node) -> bool:
    return any(a.type == "with_statement" for a in node.ancestors())


def _path(node: Node) -> List[int]:
    path = []
    while node.parent is not None:
        path.append(node.parent.index_of(node))
        node = node.parent
    path.reverse()
    return path


def precedes(a: Node, b: Node) -> bool:
    """True when ``a`` starts before ``b`` in source order and does not contain it."""
    pa, pb = _path(a), _path(b)
    if pb[: len(pa)] == pa:
        return False
    return pa < pb
