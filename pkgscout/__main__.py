"""
Entry point for running PkgScout as a module.

Usage:
    python -m pkgscout [path] [options]
"""

import sys

from pkgscout.cli import main

if __name__ == "__main__":
    sys.exit(main())
