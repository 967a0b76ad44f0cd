"""
Fixed-point rule engine.

Each pass parses the current source, applies every rule in order to the same
tree and renders the result. Passes repeat until one changes nothing, so the
returned code is stable under another run of the same rules.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from ..rules.base import Rule, RuleContext
from ..syntax.nodes import parse

logger = logging.getLogger(__name__)

DEFAULT_MAX_PASSES = 20


@dataclass
class TransformResult:
    """Outcome of running the engine over one source text."""

    code: str
    modified: bool
    applied_rules: List[str] = field(default_factory=list)
    passes: int = 0
    converged: bool = True


class RuleEngine:
    """Applies an ordered rule list to JavaScript source until nothing changes."""

    def __init__(
        self,
        rules: Sequence[Rule],
        context: Optional[RuleContext] = None,
        max_passes: int = DEFAULT_MAX_PASSES,
    ):
        if max_passes <= 0:
            raise ValueError("max_passes must be positive")
        self.rules = list(rules)
        self.context = context or RuleContext()
        self.max_passes = max_passes

    def run_pass(self, code: str) -> tuple:
        """
        Apply every rule once.

        Returns:
            ``(new_code, applied)`` where ``applied`` lists the rules that
            reported a modification.

        Raises:
            JavaScriptSyntaxError: If ``code`` does not parse.
        """
        root = parse(code)
        applied = []
        for rule in self.rules:
            if rule(root, self.context):
                applied.append(rule.name)
        if not applied:
            return code, applied
        return root.render(), applied

    def run(self, code: str) -> TransformResult:
        """
        Transform ``code`` to a fixed point of the rule list.

        Raises:
            JavaScriptSyntaxError: If the input does not parse.
        """
        applied_rules: List[str] = []
        current = code
        for passes in range(1, self.max_passes + 1):
            new_code, applied = self.run_pass(current)
            logger.debug("Pass %d applied %d rule(s): %s", passes, len(applied), applied)
            for name in applied:
                if name not in applied_rules:
                    applied_rules.append(name)
            if not applied or new_code == current:
                return TransformResult(
                    code=current,
                    modified=current != code,
                    applied_rules=applied_rules,
                    passes=passes,
                )
            current = new_code

        logger.warning(
            "No fixed point after %d passes; returning the last output", self.max_passes
        )
        return TransformResult(
            code=current,
            modified=current != code,
            applied_rules=applied_rules,
            passes=self.max_passes,
            converged=False,
        )
