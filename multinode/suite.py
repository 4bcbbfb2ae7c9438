"""
Run the project's test suite against every installation.

A failing test run is recorded and the loop moves on; a missing installation or
toolchain aborts the run. The exit status is the number of failed installations.
"""

from dataclasses import dataclass, field
from pathlib import Path

from . import process, toolchain
from .config import Config
from .console import print_section
from .errors import FatalError
from .installation import Installation, iter_installations, require_installed

SUCCESS = "success"
FAIL = "fail"


@dataclass(frozen=True)
class TestResult:
    __test__ = False

    version: str
    platform: str
    arch: str
    outcome: str


@dataclass
class RunReport:
    """Ordered test outcomes plus the number of failures."""

    results: list[TestResult] = field(default_factory=list)
    failures: int = 0

    def record(self, installation: Installation, passed: bool) -> TestResult:
        result = TestResult(
            installation.version,
            installation.platform,
            installation.arch,
            SUCCESS if passed else FAIL,
        )
        self.results.append(result)
        if not passed:
            self.failures += 1
        return result

    def format_summary(self) -> str:
        header = ("VERSION", "PLATFORM", "ARCH", "RESULT")
        rows = [header] + [(r.version, r.platform, r.arch, r.outcome) for r in self.results]
        widths = [max(len(row[i]) for row in rows) for i in range(len(header))]
        lines = ["  ".join(cell.ljust(width) for cell, width in zip(row, widths)).rstrip() for row in rows]
        return "\n".join(lines)


def find_test_files(config: Config) -> list[Path]:
    test_files = sorted(config.root.glob(config.test_glob))
    if not test_files:
        raise FatalError(f"No test files match {config.test_glob} in {config.root}")
    return test_files


def run_tests(config: Config) -> RunReport:
    """Run the test suite once per installation and return the report."""
    if not config.target_dir.is_dir():
        raise FatalError(f"Target directory not found: {config.target_dir} (run `multinode setup` first)")

    test_files = find_test_files(config)
    prefix: str | None = None
    report = RunReport()

    for installation in iter_installations(config):
        require_installed(installation)
        if prefix is None:
            prefix = toolchain.compiler_prefix(config)
        print_section(f"TESTING NODE {installation}")

        env = toolchain.node_environment(config, installation, prefix)
        cmd = [*config.test_runner, *(str(path.relative_to(config.root)) for path in test_files)]
        returncode = process.run(cmd, cwd=config.root, env=env)

        result = report.record(installation, returncode == 0)
        if result.outcome == SUCCESS:
            print(f"✓ {installation}: passed")
        else:
            print(f"✗ {installation}: failed (exit {returncode})")

    return report


def test(config: Config) -> int:
    """Entry point for the ``test`` command. Returns the number of failures."""
    report = run_tests(config)
    print_section("TEST SUMMARY")
    print(report.format_summary())
    print(f"\nFailures: {report.failures}/{len(report.results)}")
    return report.failures
