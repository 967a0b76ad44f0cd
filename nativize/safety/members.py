"""
Name sets shared by the analysis and the rule library.

``DEFAULT_TRANSFORMABLE_MEMBERS`` is the allow-set used when a wrapper is
eliminated outright. A name belongs in it only when the jQuery method and
the DOM element method of that name do the same thing on a single element.
``click`` is absent because jQuery never fires a native click on links;
``submit`` because the native form method skips submit handlers; ``append``
and friends because jQuery parses HTML strings. Configuration may extend the
set with members whose equivalence the project vouches for.
"""

DEFAULT_FACTORY_NAMES = frozenset({"$", "jQuery"})

DEFAULT_TRANSFORMABLE_MEMBERS = frozenset({"focus", "blur", "remove"})

# Methods whose jQuery form takes optional arguments with another meaning
# (``$(el).focus(fn)`` binds a handler) and returns the wrapper while the
# native form returns undefined: they must be called bare, as the last step.
NO_ARGUMENT_MEMBERS = frozenset({"focus", "blur", "click", "remove", "submit", "reset"})

# Members a jQuery collection and a static NodeList share.
NODE_LIST_MEMBERS = frozenset({"length"})

# Member accesses that yield a collection rather than a single element.
COLLECTION_MEMBERS = frozenset(
    {
        "children",
        "childNodes",
        "elements",
        "forms",
        "images",
        "links",
        "options",
        "rows",
        "cells",
        "length",
        "classList",
        "style",
        "dataset",
        "attributes",
    }
)

# Calls known to return a single element (or null).
ELEMENT_RETURNING_METHODS = frozenset(
    {
        "getElementById",
        "querySelector",
        "closest",
        "createElement",
        "elementFromPoint",
        "cloneNode",
    }
)
