"""Entry point for running nativize as a module."""

import sys

from .cli_entry import main

if __name__ == "__main__":
    sys.exit(main())
