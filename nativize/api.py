"""
Main API interface for Nativize

Provides a small facade over rule selection, the fixed-point engine and
batch processing, so callers never assemble those pieces themselves.
"""

import logging
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Union

from .config import NativizeConfig
from .orchestration.batch import BatchProcessor, BatchResult, ProcessingMode
from .orchestration.engine import RuleEngine, TransformResult
from .rules import RuleContext, get_rule_registry

logger = logging.getLogger(__name__)


class Nativize:
    """
    Main API class for Nativize.

    The rule list and analysis context are built once from the configuration;
    unknown group or rule names raise ``UnknownRuleError`` here rather than
    halfway through a run.
    """

    def __init__(self, config: Optional[NativizeConfig] = None):
        """
        Initialize Nativize with optional configuration.

        Args:
            config: Optional configuration object. If None, uses default configuration.
        """
        self.config = config or NativizeConfig.default()
        rules_settings = self.config.rules_settings
        self.rules = get_rule_registry().select(
            rules_settings.enabled_groups, rules_settings.disabled_rules
        )
        self.context = RuleContext(
            factory_names=frozenset(self.config.analysis_settings.factory_names),
            transformable_members=self.config.analysis_settings.effective_transformable_members(),
        )
        self.engine = RuleEngine(self.rules, self.context, rules_settings.max_passes)
        logger.debug(f"Nativize initialized with {len(self.rules)} rule(s)")

    def transform(self, code: str) -> TransformResult:
        """
        Rewrite one JavaScript source text.

        Raises:
            JavaScriptSyntaxError: If ``code`` does not parse.
        """
        return self.engine.run(code)

    def process_paths(
        self, paths: Iterable[Union[str, Path]], mode: ProcessingMode = ProcessingMode.WRITE
    ) -> BatchResult:
        """Transform every JavaScript file under ``paths``."""
        return BatchProcessor(self.config).process([str(p) for p in paths], mode)

    def list_rules(self) -> List[Dict[str, Any]]:
        """Registered rules with their group, description and whether they are enabled."""
        enabled = {r.name for r in self.rules}
        return [
            {
                "name": r.name,
                "group": r.group,
                "description": r.description,
                "enabled": r.name in enabled,
            }
            for r in get_rule_registry().rules.values()
        ]


def transform(code: str, config: Optional[NativizeConfig] = None) -> TransformResult:
    """Rewrite ``code`` with the rules enabled in ``config`` (all rules by default)."""
    return Nativize(config).transform(code)
