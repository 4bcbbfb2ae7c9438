"""Console output helpers shared by the commands."""

import sys


def print_section(title: str) -> None:
    """Print a formatted section header."""
    print("\n" + "=" * 70)
    print(title)
    print("=" * 70)


def print_error(message: str) -> None:
    print(f"✗ Error: {message}", file=sys.stderr)
