"""
Tests for chain safety checks.
"""

import pytest

from nativize.safety import (
    DEFAULT_TRANSFORMABLE_MEMBERS,
    all_chain_steps_transformable,
    chain_anchor,
    chain_is_foldable,
    chain_steps,
)
from nativize.syntax.nodes import parse

FIND_SHOW = frozenset({"find", "show"})


def _factory_call(source):
    root = parse(source)
    call = root.find("call_expression", predicate=lambda n: n.code.startswith("$("))
    return root, call[-1] if call else None


class TestChainSteps:
    """Tests for chain_steps and chain_anchor."""

    def test_steps_in_order(self):
        """Test that the walk goes from the innermost step outwards."""
        _, call = _factory_call("$(getEl()).find('.x').show();")
        steps = chain_steps(call)
        assert [s.name for s in steps] == ["find", "show"]
        assert all(s.call is not None for s in steps)

    def test_property_step(self):
        _, call = _factory_call("$(el).length;")
        steps = chain_steps(call)
        assert [s.name for s in steps] == ["length"]
        assert steps[0].call is None

    def test_anchor_is_outermost_call(self):
        _, call = _factory_call("$(getEl()).find('.x').show();")
        assert chain_anchor(call).code == "$(getEl()).find('.x').show()"

    def test_anchor_without_steps(self):
        _, call = _factory_call("$(el);")
        assert chain_anchor(call) is call

    def test_parenthesised_receiver(self):
        _, call = _factory_call("($(el)).focus();")
        assert [s.name for s in chain_steps(call)] == ["focus"]

    @pytest.mark.parametrize(
        "source",
        [
            "$(el)['show']();",
            "$(el)?.show();",
            "$(el).show?.();",
            "$(el)();",
        ],
    )
    def test_unnameable_steps(self, source):
        """Test that computed, optional and direct calls give no chain."""
        _, call = _factory_call(source)
        assert chain_steps(call) is None


class TestAllChainStepsTransformable:
    """Tests for all_chain_steps_transformable."""

    def test_all_steps_allowed(self):
        """Test a chain whose every step is allow-listed."""
        _, call = _factory_call("$(getEl()).find('.x').show();")
        assert all_chain_steps_transformable(call, FIND_SHOW)

    def test_unknown_step_poisons_chain(self):
        """Test that one disallowed step rejects the chain even if later ones are allowed."""
        _, call = _factory_call("$(getEl()).unknownMethod().show();")
        assert not all_chain_steps_transformable(call, FIND_SHOW)

    @pytest.mark.parametrize(
        "chain",
        [
            ".bad().find('a').show()",
            ".find('a').bad().show()",
            ".find('a').show().bad()",
            ".find('a').show().bad",
        ],
    )
    def test_poisoning_at_any_position(self, chain):
        _, call = _factory_call(f"$(el){chain};")
        assert not all_chain_steps_transformable(call, FIND_SHOW)

    def test_empty_chain_is_transformable(self):
        _, call = _factory_call("$(el);")
        assert all_chain_steps_transformable(call)

    def test_default_allow_set(self):
        """Test that the default allow-set is used when none is given."""
        _, call = _factory_call("$(el).focus();")
        assert "focus" in DEFAULT_TRANSFORMABLE_MEMBERS
        assert all_chain_steps_transformable(call)
        _, call = _factory_call("$(el).find('a');")
        assert not all_chain_steps_transformable(call)

    def test_computed_step_poisons(self):
        _, call = _factory_call("$(el)['focus']();")
        assert not all_chain_steps_transformable(call, frozenset({"focus"}))

    def test_non_call_input(self):
        root = parse("el.focus();")
        assert not all_chain_steps_transformable(root.find("identifier")[0])
        assert not all_chain_steps_transformable(None)


class TestChainIsFoldable:
    """Tests for chain_is_foldable."""

    @pytest.mark.parametrize(
        "source, expected",
        [
            ("$(el).focus();", True),
            ("$(el).remove();", True),
            ("($(el).blur());", True),
            ("$(el);", False),
            ("var r = $(el).focus();", False),
            ("$(el).focus(handler);", False),
            ("$(el).focus().blur();", False),
            ("$(el).focus;", False),
            ("$(el).show();", False),
        ],
    )
    def test_default_members(self, source, expected):
        _, call = _factory_call(source)
        assert chain_is_foldable(call) is expected

    def test_configured_members(self):
        """Test that a configured allow-set without bare-call members allows chaining."""
        _, call = _factory_call("$(el).find('.x').show();")
        assert chain_is_foldable(call, FIND_SHOW)
