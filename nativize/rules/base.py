"""
Rule registry.

A rule is a plain function ``(root, context) -> bool`` that rewrites every
candidate it can prove safe and reports whether it changed the tree. Rules
register themselves with the ``rule`` decorator; the registry keeps them in
registration order, which is the order the engine applies them in.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import AbstractSet, Callable, Dict, Iterable, List, Optional

from ..errors import NativizeError
from ..safety.members import DEFAULT_FACTORY_NAMES, DEFAULT_TRANSFORMABLE_MEMBERS
from ..syntax.nodes import Node

logger = logging.getLogger(__name__)

RuleFunction = Callable[[Node, "RuleContext"], bool]


class UnknownRuleError(NativizeError):
    """Raised when a rule or rule group name is not registered."""

    pass


@dataclass
class RuleContext:
    """Analysis settings handed to every rule."""

    factory_names: AbstractSet[str] = field(default_factory=lambda: DEFAULT_FACTORY_NAMES)
    transformable_members: AbstractSet[str] = field(
        default_factory=lambda: DEFAULT_TRANSFORMABLE_MEMBERS
    )


@dataclass(frozen=True)
class Rule:
    """A registered rewrite rule."""

    name: str
    group: str
    description: str
    apply: RuleFunction

    def __call__(self, root: Node, context: RuleContext) -> bool:
        return self.apply(root, context)


class RuleRegistry:
    """Ordered registry of rewrite rules."""

    def __init__(self) -> None:
        self.rules: Dict[str, Rule] = {}

    def register(self, rule: Rule) -> None:
        if not rule.name:
            raise ValueError("Rule name must be non-empty")
        if rule.name in self.rules:
            raise ValueError(f"Rule already registered: {rule.name}")
        self.rules[rule.name] = rule
        logger.debug("Registered rule: %s (%s)", rule.name, rule.group)

    def get_rule(self, name: str) -> Rule:
        try:
            return self.rules[name]
        except KeyError:
            raise UnknownRuleError(f"Unknown rule: {name}") from None

    @property
    def groups(self) -> List[str]:
        seen: List[str] = []
        for rule in self.rules.values():
            if rule.group not in seen:
                seen.append(rule.group)
        return seen

    def select(
        self, groups: Optional[Iterable[str]] = None, disabled: Iterable[str] = ()
    ) -> List[Rule]:
        """
        Rules of the given groups, in registration order.

        Raises:
            UnknownRuleError: If a group or a disabled rule name is unknown.
        """
        disabled = set(disabled)
        for name in disabled:
            self.get_rule(name)
        wanted = None
        if groups is not None:
            wanted = set(groups)
            unknown = wanted - set(self.groups)
            if unknown:
                raise UnknownRuleError(f"Unknown rule group(s): {', '.join(sorted(unknown))}")
        return [
            r
            for r in self.rules.values()
            if (wanted is None or r.group in wanted) and r.name not in disabled
        ]

    def list_rules(self) -> Dict[str, str]:
        """All registered rules with their descriptions."""
        return {name: r.description for name, r in self.rules.items()}


_rule_registry = RuleRegistry()


def get_rule_registry() -> RuleRegistry:
    """Get the global rule registry with every built-in rule loaded."""
    # Importing the rule modules registers their rules.
    from . import jquery, legacy  # noqa: F401

    return _rule_registry


def rule(group: str, name: Optional[str] = None) -> Callable[[RuleFunction], RuleFunction]:
    """Register the decorated function as a rule of ``group``."""

    def decorator(func: RuleFunction) -> RuleFunction:
        doc = (func.__doc__ or "").strip().splitlines()
        _rule_registry.register(
            Rule(
                name=name or func.__name__.replace("_", "-"),
                group=group,
                description=doc[0] if doc else "",
                apply=func,
            )
        )
        return func

    return decorator
