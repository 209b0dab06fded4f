"""
golf-search - Main entry point.
This file runs the command-line search from the golfsearch package.
"""
import sys

from golfsearch.cli import main

if __name__ == "__main__":
    sys.exit(main())
