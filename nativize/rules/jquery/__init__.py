"""jQuery rewrite rules, registered in the order the engine applies them."""

from . import (  # noqa: F401
    display,
    classes,
    attributes,
    events,
    traversal,
    manipulation,
    statics,
    selectors,
)
