import json
from pathlib import Path

import pytest

from conftest import install
from multinode import archive, cli, process, toolchain
from multinode.installation import Installation


@pytest.fixture
def root(project, monkeypatch):
    (project / "multinode.json").write_text(
        json.dumps({"versions": ["1.0.0"], "arches": ["x64"], "platform": "plat", "verify_checksums": False})
    )
    monkeypatch.setenv("MULTINODE_ROOT", str(project))
    return project


def run_cli(*argv: str) -> int:
    with pytest.raises(SystemExit) as exc_info:
        cli.main(list(argv))
    return exc_info.value.code


def test_missing_command_is_a_usage_error(root, capsys):
    assert run_cli() == 2
    assert "usage: multinode" in capsys.readouterr().err


def test_unknown_command_is_a_usage_error(root, capsys):
    assert run_cli("deploy") == 2
    assert "invalid choice" in capsys.readouterr().err


def test_env_requires_version(root):
    assert run_cli("env") == 2


def test_versions_lists_pairs(project, monkeypatch, capsys):
    (project / "multinode.json").write_text(json.dumps({"versions": ["4.9.1", "6.17.1"], "arches": ["x86", "x64"]}))
    monkeypatch.setenv("MULTINODE_ROOT", str(project))

    assert run_cli("versions") == 0
    assert capsys.readouterr().out.splitlines() == ["4.9.1 x86", "4.9.1 x64", "6.17.1 x86", "6.17.1 x64"]


def test_fatal_errors_exit_1(root, capsys):
    assert run_cli("env", "9.9.9") == 1
    assert "✗ Error: Unknown version: 9.9.9" in capsys.readouterr().err


def test_unresolvable_root_exits_1(tmp_path, monkeypatch, capsys):
    monkeypatch.setenv("MULTINODE_ROOT", str(tmp_path / "gone"))

    assert run_cli("versions") == 1
    assert "Cannot resolve root" in capsys.readouterr().err


def test_env_exit_status_is_the_shell_status(root, monkeypatch):
    install(Installation("1.0.0", "plat", "x64", root / "node"))
    monkeypatch.setattr(toolchain, "compiler_prefix", lambda config: "/opt/local")
    monkeypatch.setattr(process, "run", lambda cmd, cwd=None, env=None: 3)

    assert run_cli("env", "1.0.0") == 3


def test_test_command_exits_with_failure_count(root, monkeypatch):
    install(Installation("1.0.0", "plat", "x64", root / "node"))
    monkeypatch.setattr(toolchain, "compiler_prefix", lambda config: "/opt/local")
    monkeypatch.setattr(process, "run", lambda cmd, cwd=None, env=None: 1)

    assert run_cli("test") == 1


def test_end_to_end(root, monkeypatch, capsys):
    installation = Installation("1.0.0", "plat", "x64", root / "node")
    built = root / "build" / "addon.node"

    def fake_download(url, output_path, show_progress=True):
        Path(output_path).write_bytes(b"")

    def fake_extract(archive_path, extract_dir):
        install(installation)

    def fake_make(cmd, cwd=None, env=None):
        if cmd[1:] == ["clean"]:
            built.unlink(missing_ok=True)
        else:
            built.parent.mkdir(parents=True, exist_ok=True)
            built.write_bytes(b"\x7fELF")
        return 0

    monkeypatch.setattr(archive, "download_file", fake_download)
    monkeypatch.setattr(archive, "extract_archive", fake_extract)
    monkeypatch.setattr(process, "run", fake_make)

    assert run_cli("setup") == 0
    assert installation.is_installed()
    assert not (root / "node" / "node-v1.0.0-plat-x64.tar.gz").exists()

    capsys.readouterr()
    assert run_cli("versions") == 0
    assert capsys.readouterr().out == "1.0.0 x64\n"

    assert run_cli("build") == 0
    assert (installation.lib_dir / "addon.node").exists()

    assert run_cli("clobber") == 0
    assert not (installation.lib_dir / "addon.node").exists()

    capsys.readouterr()
    assert run_cli("clobber") == 0
    assert capsys.readouterr().out == ""
