"""
Rewrite rules.

Importing this package registers every built-in rule: the ``jquery`` group
first, then ``legacy``.
"""

from . import jquery, legacy  # noqa: F401
from .base import (
    Rule,
    RuleContext,
    RuleRegistry,
    UnknownRuleError,
    get_rule_registry,
    rule,
)

__all__ = [
    "Rule",
    "RuleContext",
    "RuleRegistry",
    "UnknownRuleError",
    "get_rule_registry",
    "rule",
]
