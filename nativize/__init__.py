"""
Nativize - rewrite jQuery and legacy JavaScript idioms into native code

A source-to-source tool: every rewrite is checked by a conservative,
file-local safety analysis and left out when its behavior cannot be shown to
be unchanged.
"""

__version__ = "0.1.0"

__all__ = [
    "__version__",
    "Nativize",
    "NativizeConfig",
    "NativizeError",
    "JavaScriptSyntaxError",
    "TransformResult",
    "transform",
]


def __getattr__(name):
    """Lazy loading of the API so ``import nativize`` stays cheap."""
    if name in {"Nativize", "transform"}:
        from .api import Nativize, transform

        return {"Nativize": Nativize, "transform": transform}[name]

    if name == "NativizeConfig":
        from .config import NativizeConfig

        return NativizeConfig

    if name in {"NativizeError", "JavaScriptSyntaxError"}:
        from .errors import JavaScriptSyntaxError, NativizeError

        return {"NativizeError": NativizeError, "JavaScriptSyntaxError": JavaScriptSyntaxError}[name]

    if name == "TransformResult":
        from .orchestration.engine import TransformResult

        return TransformResult

    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
