import json
from pathlib import Path

import pytest

from multinode.config import Config
from multinode.installation import Installation


def install(installation: Installation) -> Installation:
    """Create the on-disk layout setup would leave behind."""
    installation.bin_dir.mkdir(parents=True, exist_ok=True)
    installation.executable.write_text("#!/bin/sh\n")
    installation.lib_dir.mkdir(parents=True, exist_ok=True)
    return installation


@pytest.fixture
def project(tmp_path: Path) -> Path:
    root = tmp_path / "addon"
    root.mkdir()
    (root / "package.json").write_text(json.dumps({"name": "addon", "main": "./build/addon"}))
    test_dir = root / "test"
    test_dir.mkdir()
    (test_dir / "basic.test.js").write_text("")
    (test_dir / "errors.test.js").write_text("")
    return root


@pytest.fixture
def config(project: Path) -> Config:
    return Config(
        root=project,
        versions=("1.0.0", "2.0.0"),
        arches=("x86", "x64"),
        platform="plat",
        base_url="https://dist.example.com",
        verify_checksums=False,
        shell="/bin/bash",
    )
