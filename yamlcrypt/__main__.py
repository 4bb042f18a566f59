"""
Main entry point for running yamlcrypt as a module.

Usage:
    python -m yamlcrypt [options] [files...]
"""

from .cli import main
import sys

if __name__ == "__main__":
    sys.exit(main())
