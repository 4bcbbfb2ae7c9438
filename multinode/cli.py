"""
multinode command dispatcher.

Usage:
    multinode setup                  Download and extract every installation
    multinode versions               List configured version/architecture pairs
    multinode env VERSION [ARCH]     Shell using one installation
    multinode test                   Run the test suite against every installation
    multinode build                  Build the native addon for every installation
    multinode clobber                Remove the built addons
"""

import argparse
import sys
from collections.abc import Sequence

from . import build, fetch, shell, suite
from .config import Config, load_config, resolve_root
from .console import print_error
from .errors import FatalError
from .installation import iter_pairs


def versions(config: Config) -> int:
    """Entry point for the ``versions`` command."""
    for version, arch in iter_pairs(config):
        print(f"{version} {arch}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="multinode",
        description="Manage parallel Node.js installations for native addon development",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  multinode setup
  multinode env 6.17.1 x64
  multinode test

Configuration is read from multinode.json in the project root
($MULTINODE_ROOT or the current directory).
        """,
    )
    subparsers = parser.add_subparsers(dest="command", metavar="command", required=True)

    subparsers.add_parser("setup", help="download and extract all configured installations")
    subparsers.add_parser("versions", help="list configured version/architecture pairs")

    env_parser = subparsers.add_parser("env", help="start a shell using one installation")
    env_parser.add_argument("version", help="Node.js version (see `multinode versions`)")
    env_parser.add_argument("arch", nargs="?", default=None, help="architecture (default: first configured)")

    subparsers.add_parser("test", help="run the test suite against every installation")
    subparsers.add_parser("build", help="build the native addon for every installation")
    subparsers.add_parser("clobber", help="remove built addons from every installation")
    return parser


def dispatch(args: argparse.Namespace, config: Config) -> int:
    if args.command == "setup":
        return fetch.setup(config)
    if args.command == "versions":
        return versions(config)
    if args.command == "env":
        return shell.env(config, args.version, args.arch)
    if args.command == "test":
        return suite.test(config)
    if args.command == "build":
        return build.build(config)
    if args.command == "clobber":
        return build.clobber(config)
    raise ValueError(f"Unknown command: {args.command}")


def main(argv: Sequence[str] | None = None) -> None:
    """Main entry point."""
    args = build_parser().parse_args(argv)

    try:
        config = load_config(resolve_root())
        status = dispatch(args, config)
    except FatalError as e:
        print_error(str(e))
        sys.exit(1)
    except KeyboardInterrupt:
        print_error("Interrupted")
        sys.exit(130)

    sys.exit(status)
