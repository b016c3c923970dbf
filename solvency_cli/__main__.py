"""
Module execution entry point.

Allows running with: python -m solvency_cli
"""

import sys
from solvency_cli.main import main

if __name__ == "__main__":
    sys.exit(main())
