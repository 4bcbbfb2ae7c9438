"""
Entry point for running multinode as a module.

Usage:
    python -m multinode setup
    python -m multinode env 6.17.1 x64
"""

from .cli import main

if __name__ == "__main__":
    main()
