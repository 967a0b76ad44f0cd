"""
Mutable concrete syntax tree for JavaScript source.

tree-sitter produces an immutable tree, so every parse is converted into a
tree of ``Node`` objects that rules can rewrite in place. The conversion is
lossless: every token (named or anonymous) and every comment becomes a node,
and the whitespace in front of a node is kept in its ``prefix``. Rendering an
untouched tree with ``Node.code`` therefore reproduces the input exactly.

Notes:
- Node identity is plain Python object identity. A node has exactly one
  parent; moving a node into a freshly built node re-parents it.
- ``replace_with`` is the only structural substitution rules need. It keeps
  the leading whitespace of the replaced node and adds parentheses when the
  replacement binds looser than the slot it lands in.
"""

from __future__ import annotations

import logging
from typing import Callable, Iterator, List, Optional

import tree_sitter_javascript as tsjs
from tree_sitter import Language, Parser

from ..errors import JavaScriptSyntaxError

logger = logging.getLogger(__name__)

JS_LANGUAGE = Language(tsjs.language())


# Expressions that can be used as an operand anywhere without parentheses.
PRIMARY_TYPES = frozenset(
    {
        "identifier",
        "this",
        "super",
        "member_expression",
        "subscript_expression",
        "call_expression",
        "parenthesized_expression",
        "string",
        "template_string",
        "number",
        "array",
        "null",
        "true",
        "false",
        "undefined",
        "regex",
    }
)

# Expressions that bind looser than any binary operator.
LOOSE_TYPES = frozenset(
    {
        "assignment_expression",
        "augmented_assignment_expression",
        "sequence_expression",
        "ternary_expression",
        "arrow_function",
        "yield_expression",
        "binary_expression",
    }
)


class Node:
    """A node of the mutable syntax tree."""

    __slots__ = ("type", "named", "field", "text", "children", "prefix", "tail", "parent")

    def __init__(
        self,
        type: str,
        *,
        named: bool = True,
        field: Optional[str] = None,
        text: Optional[str] = None,
        children: Optional[List["Node"]] = None,
        prefix: str = "",
        tail: str = "",
    ) -> None:
        self.type = type
        self.named = named
        self.field = field
        self.text = text
        self.children: List[Node] = []
        self.prefix = prefix
        self.tail = tail
        self.parent: Optional[Node] = None
        for child in children or ():
            self.append(child)

    def __repr__(self) -> str:
        snippet = self.code
        if len(snippet) > 40:
            snippet = snippet[:37] + "..."
        return f"Node({self.type!r}, {snippet!r})"

    # ------------------------------------------------------------------
    # Structure
    # ------------------------------------------------------------------

    @property
    def named_children(self) -> List["Node"]:
        return [c for c in self.children if c.named]

    def child(self, field: str) -> Optional["Node"]:
        """Return the first child stored under ``field``."""
        for c in self.children:
            if c.field == field:
                return c
        return None

    def append(self, child: "Node") -> "Node":
        if child.parent is not None:
            child.detach()
        child.parent = self
        self.children.append(child)
        return child

    def index_of(self, child: "Node") -> int:
        """Position of ``child`` by identity, -1 when it is not a child."""
        for i, c in enumerate(self.children):
            if c is child:
                return i
        return -1

    def ancestors(self) -> Iterator["Node"]:
        node = self.parent
        while node is not None:
            yield node
            node = node.parent

    def root(self) -> "Node":
        node = self
        while node.parent is not None:
            node = node.parent
        return node

    def is_attached(self, root: "Node") -> bool:
        """True when this node is still reachable from ``root``."""
        node = self
        while node.parent is not None:
            if node.parent.index_of(node) < 0:
                return False
            node = node.parent
        return node is root

    # ------------------------------------------------------------------
    # Traversal
    # ------------------------------------------------------------------

    def walk(self) -> Iterator["Node"]:
        """Pre-order traversal of this subtree (self included)."""
        stack = [self]
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.children))

    def find(self, *types: str, predicate: Optional[Callable[["Node"], bool]] = None) -> List["Node"]:
        """Snapshot of all nodes of the given types, in source order."""
        wanted = set(types)
        return [
            n
            for n in self.walk()
            if (not wanted or n.type in wanted) and (predicate is None or predicate(n))
        ]

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    @property
    def code(self) -> str:
        """Source text of this node, without its own prefix."""
        out: List[str] = []
        stack: List[object] = [self]
        while stack:
            item = stack.pop()
            if isinstance(item, str):
                out.append(item)
                continue
            if item.text is not None:
                out.append(item.text)
                continue
            stack.append(item.tail)
            for child in reversed(item.children):
                stack.append(child)
                stack.append(child.prefix)
        return "".join(out)

    def render(self) -> str:
        """Source text including the node's prefix (the whole file for a root)."""
        return self.prefix + self.code

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    def replace_with(self, new: "Node") -> "Node":
        """Substitute ``new`` for this node and return what was inserted."""
        parent = self.parent
        if parent is None:
            raise ValueError("cannot replace a detached node")
        if new.parent is not None:
            new.detach()
        index = parent.index_of(self)
        if index < 0:
            raise ValueError("node is not a child of its recorded parent")

        field = self.field
        if needs_parentheses(new, parent, field):
            new = parenthesized(new)
        new.prefix = self.prefix
        new.field = field
        new.parent = parent
        parent.children[index] = new

        self.parent = None
        self.prefix = ""
        return new

    def remove(self) -> None:
        """Remove this node from its parent, handing its prefix to the next sibling."""
        parent = self.parent
        if parent is None:
            return
        index = parent.index_of(self)
        del parent.children[index]
        if index < len(parent.children):
            parent.children[index].prefix = self.prefix
        self.parent = None

    def detach(self) -> "Node":
        if self.parent is not None:
            index = self.parent.index_of(self)
            if index >= 0:
                del self.parent.children[index]
            self.parent = None
        return self

    def clone(self) -> "Node":
        """Deep copy of this subtree; the copy has no parent."""
        copy = Node(
            self.type,
            named=self.named,
            field=self.field,
            text=self.text,
            prefix=self.prefix,
            tail=self.tail,
        )
        for child in self.children:
            copy.append(child.clone())
        return copy


def token(text: str, prefix: str = "", field: Optional[str] = None) -> Node:
    """Anonymous token such as ``(`` or ``=``."""
    return Node(text, named=False, text=text, prefix=prefix, field=field)


def leaf(type: str, text: str, prefix: str = "", field: Optional[str] = None) -> Node:
    return Node(type, text=text, prefix=prefix, field=field)


def parenthesized(expr: Node) -> Node:
    expr.prefix = ""
    expr.field = None
    return Node("parenthesized_expression", children=[token("("), expr, token(")")])


def needs_parentheses(node: Node, parent: Optional[Node], field: Optional[str]) -> bool:
    """Whether ``node`` must be wrapped to keep its meaning in ``parent``."""
    if parent is None or node.type in PRIMARY_TYPES:
        return False

    ptype = parent.type
    if ptype in ("member_expression", "subscript_expression") and field == "object":
        return True
    if ptype == "call_expression" and field == "function":
        return True
    if ptype == "new_expression" and field == "constructor":
        return True
    if ptype in ("binary_expression", "unary_expression", "update_expression", "await_expression"):
        return node.type in LOOSE_TYPES
    if ptype == "ternary_expression" and field == "condition":
        return node.type in LOOSE_TYPES
    if node.type == "sequence_expression":
        return ptype not in ("expression_statement", "parenthesized_expression", "for_statement")
    if ptype == "expression_statement" and node.type in ("object", "function_expression", "class"):
        return True
    return False


# ----------------------------------------------------------------------
# Parsing
# ----------------------------------------------------------------------


def _decode(data: bytes, start: int, end: int) -> str:
    return data[start:end].decode("utf-8")


def _first_error(ts_root) -> tuple:
    stack = [ts_root]
    while stack:
        node = stack.pop()
        if node.type == "ERROR" or node.is_missing:
            row, col = node.start_point
            return row + 1, col + 1
        if node.has_error:
            stack.extend(reversed(node.children))
    row, col = ts_root.start_point
    return row + 1, col + 1


def parse(source: str) -> Node:
    """
    Parse JavaScript source into a mutable tree.

    Args:
        source: Module or script source text.

    Returns:
        The ``program`` node. ``root.render()`` yields ``source`` unchanged.

    Raises:
        JavaScriptSyntaxError: If tree-sitter reports an error or missing node.
    """
    data = source.encode("utf-8")
    tree = Parser(JS_LANGUAGE).parse(data)
    ts_root = tree.root_node
    if ts_root.has_error:
        line, column = _first_error(ts_root)
        raise JavaScriptSyntaxError(
            f"Invalid JavaScript at line {line}, column {column}", line=line, column=column
        )

    cursor = tree.walk()
    root = Node(ts_root.type, named=True)
    root.prefix = _decode(data, 0, ts_root.start_byte)

    # Each frame: [node, end_byte, end of the last emitted child]
    frames: List[list] = []
    if cursor.goto_first_child():
        frames.append([root, ts_root.end_byte, ts_root.start_byte])
    else:
        root.tail = _decode(data, ts_root.start_byte, ts_root.end_byte)

    while frames:
        ts = cursor.node
        frame = frames[-1]
        node = Node(ts.type, named=ts.is_named, field=cursor.field_name)
        node.prefix = _decode(data, frame[2], ts.start_byte)
        frame[0].append(node)
        frame[2] = ts.end_byte

        if cursor.goto_first_child():
            frames.append([node, ts.end_byte, ts.start_byte])
            continue
        node.text = _decode(data, ts.start_byte, ts.end_byte)

        while not cursor.goto_next_sibling():
            parent, end, last = frames.pop()
            parent.tail = _decode(data, last, end)
            if not frames or not cursor.goto_parent():
                break
        else:
            continue
        if not frames:
            break

    root.tail += _decode(data, ts_root.end_byte, len(data))
    return root
