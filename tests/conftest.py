"""Shared fixtures for the nativize test suite."""

import pytest

from nativize.orchestration.engine import RuleEngine
from nativize.rules import RuleContext, get_rule_registry
from nativize.syntax.nodes import parse


def _nodes(root, code, type=None):
    types = (type,) if type else ()
    return root.find(*types, predicate=lambda n: n.code == code)


@pytest.fixture
def js():
    """Parse JavaScript source into a mutable tree."""
    return parse


@pytest.fixture
def node_by_code():
    """
    Find a node by its exact source text.

    Returns the first match in source order; ``index`` picks a later one.
    """

    def find(root, code, type=None, index=0):
        matches = _nodes(root, code, type)
        assert matches, f"no node {code!r} in {root.code!r}"
        return matches[index]

    return find


@pytest.fixture
def rewrite():
    """
    Run rules to a fixed point and return the output code.

    With no rule names every registered rule runs, in registry order.
    """

    def run(code, *names, **context):
        registry = get_rule_registry()
        rules = [registry.get_rule(n) for n in names] if names else registry.select()
        return RuleEngine(rules, RuleContext(**context)).run(code).code

    return run
