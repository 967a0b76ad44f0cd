"""
Safety analysis for wrapper rewrites.

The functions exported here answer one question for the rule library: does
an expression definitely denote a jQuery wrapper (or the single node it
wraps), so that replacing it with native DOM code cannot change behavior?
Each is a pure query over the current tree; doubtful cases answer "no".
"""

from .alias_resolver import is_duplicable, is_stable_reference, resolve_binding
from .chain_checker import (
    ChainStep,
    all_chain_steps_transformable,
    chain_anchor,
    chain_is_foldable,
    chain_steps,
)
from .initializer_guard import is_safe_to_transform_initializer
from .members import (
    DEFAULT_FACTORY_NAMES,
    DEFAULT_TRANSFORMABLE_MEMBERS,
    NO_ARGUMENT_MEMBERS,
    NODE_LIST_MEMBERS,
)
from .wrapper_classifier import (
    Provenance,
    classify,
    is_element_argument,
    is_factory_call,
    is_factory_identifier,
    is_wrapper_expression,
    wrapped_argument,
    wrapper_target,
)

__all__ = [
    "ChainStep",
    "DEFAULT_FACTORY_NAMES",
    "DEFAULT_TRANSFORMABLE_MEMBERS",
    "NODE_LIST_MEMBERS",
    "NO_ARGUMENT_MEMBERS",
    "Provenance",
    "all_chain_steps_transformable",
    "chain_anchor",
    "chain_is_foldable",
    "chain_steps",
    "classify",
    "is_duplicable",
    "is_element_argument",
    "is_factory_call",
    "is_factory_identifier",
    "is_safe_to_transform_initializer",
    "is_stable_reference",
    "is_wrapper_expression",
    "resolve_binding",
    "wrapped_argument",
    "wrapper_target",
]
