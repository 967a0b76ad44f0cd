"""
Orchestration module for Nativize

Runs the rule library over source text and files:
- Fixed-point rule engine
- Batch file processing
- Run reporting
"""

__all__ = [
    "BatchProcessor",
    "BatchResult",
    "FileResult",
    "ProcessingMode",
    "RuleEngine",
    "RunReporter",
    "TransformResult",
]


def __getattr__(name: str):
    if name in {"RuleEngine", "TransformResult"}:
        from . import engine

        return getattr(engine, name)
    if name in {"BatchProcessor", "BatchResult", "FileResult", "ProcessingMode"}:
        from . import batch

        return getattr(batch, name)
    if name == "RunReporter":
        from .reporter import RunReporter

        return RunReporter
    raise AttributeError(name)
