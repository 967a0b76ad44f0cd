"""
Lossless, mutable JavaScript syntax tree built on tree-sitter.
"""

from ..errors import JavaScriptSyntaxError, NativizeError
from .nodes import Node, parse

__all__ = ["JavaScriptSyntaxError", "NativizeError", "Node", "parse"]
