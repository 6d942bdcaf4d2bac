"""
Module execution entry point.

Allows running with: python -m claimgate_cli
"""

import sys
from claimgate_cli.main import main

if __name__ == "__main__":
    sys.exit(main())
