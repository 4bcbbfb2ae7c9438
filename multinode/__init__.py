"""
Parallel Node.js installations for native addon development.

This package provides tools for:
- Downloading and extracting one Node.js build per configured version/architecture
- Running a project's test suite against every installation
- Building the project's native addon against every installation
- Opening an interactive shell scoped to a single installation

Main modules:
- cli: Command dispatcher (setup, versions, env, test, build, clobber)
- config: Configuration defaults and multinode.json overrides
- installation: Installation paths and the version x architecture cross product
- fetch: Download and extract missing installations
- suite: Per-installation test runs and the summary report
- build: Build and clobber the native addon
- shell: Interactive shell with an installation's environment
"""

from .cli import main

__version__ = "1.0.0"

__all__ = ["main", "__version__"]
