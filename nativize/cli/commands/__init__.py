"""
CLI command handlers.

Organized by functional domain:
- transform.py: upgrade, check and diff commands
- config.py: configuration and rule listing commands
"""

from .config import cmd_config, cmd_rules
from .transform import cmd_check, cmd_diff, cmd_upgrade

__all__ = [
    "cmd_check",
    "cmd_config",
    "cmd_diff",
    "cmd_rules",
    "cmd_upgrade",
]
