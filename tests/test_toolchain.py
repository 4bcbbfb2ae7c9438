import json
import os
import subprocess

import pytest

from multinode import toolchain
from multinode.errors import FatalError
from multinode.installation import installation_for

GCC_OUTPUT = """Using built-in specs.
COLLECT_GCC=gcc
Target: x86_64-sun-solaris2.11
Configured with: ../gcc-4.9.4/configure --prefix=/opt/local/gcc49 --with-local-prefix=/opt/local --enable-languages=c,c++
Thread model: posix
gcc version 4.9.4 (GCC)
"""


def test_parse_compiler_prefix():
    assert toolchain.parse_compiler_prefix(GCC_OUTPUT) == "/opt/local/gcc49"


def test_parse_compiler_prefix_strips_quotes_and_slash():
    assert toolchain.parse_compiler_prefix("Configured with: configure '--prefix=/usr/'") == "/usr"


def test_parse_compiler_prefix_without_prefix():
    assert toolchain.parse_compiler_prefix("Apple clang version 15.0.0\nTarget: arm64") is None


def test_compiler_prefix_reads_stderr(config, monkeypatch):
    def fake_run(cmd, capture_output, text, check):
        assert cmd == ["gcc", "-v"]
        return subprocess.CompletedProcess(cmd, 0, stdout="", stderr=GCC_OUTPUT)

    monkeypatch.setattr(toolchain.subprocess, "run", fake_run)

    assert toolchain.compiler_prefix(config) == "/opt/local/gcc49"


def test_compiler_prefix_unresolvable_is_fatal(config, monkeypatch):
    monkeypatch.setattr(toolchain, "compiler_verbose_output", lambda compiler: "")

    with pytest.raises(FatalError, match="toolchain installed"):
        toolchain.compiler_prefix(config)


def test_missing_compiler_is_fatal(config, monkeypatch):
    def fake_run(cmd, **kwargs):
        raise FileNotFoundError(cmd[0])

    monkeypatch.setattr(toolchain.subprocess, "run", fake_run)

    with pytest.raises(FatalError, match="Compiler not found"):
        toolchain.compiler_prefix(config)


def test_read_artifact_name(project):
    assert toolchain.read_artifact_name(project) == "build/addon.node"


@pytest.mark.parametrize(
    "main, expected",
    [("kstat.node", "kstat.node"), ("lib/binding", "lib/binding.node")],
)
def test_read_artifact_name_suffix(project, main, expected):
    (project / "package.json").write_text(json.dumps({"main": main}))

    assert toolchain.read_artifact_name(project) == expected


@pytest.mark.parametrize("content", ["{}", "[]", "{broken", json.dumps({"main": ""})])
def test_read_artifact_name_invalid_descriptor(project, content):
    (project / "package.json").write_text(content)

    with pytest.raises(FatalError):
        toolchain.read_artifact_name(project)


def test_read_artifact_name_missing_descriptor(tmp_path):
    with pytest.raises(FatalError, match="not found"):
        toolchain.read_artifact_name(tmp_path)


def test_node_environment(config):
    installation = installation_for(config, "1.0.0", "x64")
    base = {"PATH": "/usr/bin", "HOME": "/home/dev"}

    env = toolchain.node_environment(config, installation, "/opt/local/gcc49", base)

    assert env["PATH"] == f"{installation.bin_dir}{os.pathsep}/usr/bin"
    assert env["NODE_PATH"] == f"{config.root}{os.pathsep}{installation.lib_dir}"
    assert env["LD_LIBRARY_PATH"] == "/opt/local/gcc49/lib"
    assert env["LD_LIBRARY_PATH_64"] == "/opt/local/gcc49/lib/amd64"
    assert env["HOME"] == "/home/dev"
    assert base == {"PATH": "/usr/bin", "HOME": "/home/dev"}


def test_build_environment_only_touches_path(config):
    installation = installation_for(config, "1.0.0", "x64")

    env = toolchain.build_environment(installation, {})

    assert env == {"PATH": str(installation.bin_dir)}
