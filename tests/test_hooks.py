from __future__ import annotations

import logging
import os
from pathlib import Path

import pytest

from gitmeta.hooks import SHEBANG, HookInstaller


def test_install_creates_executable_hooks(tmp_path: Path) -> None:
    hooks_dir = tmp_path / "hooks"
    installer = HookInstaller(hooks_dir)

    results = installer.install()

    assert [(hook.name, line, added) for hook, line, added in results] == [
        ("pre-commit", "gitmeta commit", True),
        ("post-merge", "gitmeta merge", True),
    ]
    pre_commit = hooks_dir / "pre-commit"
    assert pre_commit.read_text() == f"{SHEBANG}\ngitmeta commit\n"
    assert os.access(pre_commit, os.X_OK)
    assert (hooks_dir / "post-merge").read_text() == f"{SHEBANG}\ngitmeta merge\n"


def test_install_is_idempotent(tmp_path: Path) -> None:
    installer = HookInstaller(tmp_path)
    installer.install()

    results = installer.install()

    assert [added for _hook, _line, added in results] == [False, False]
    assert (tmp_path / "pre-commit").read_text().count("gitmeta commit") == 1


def test_install_appends_to_existing_hook(tmp_path: Path) -> None:
    hook = tmp_path / "pre-commit"
    hook.write_text("#!/bin/bash\nmake lint")
    hook.chmod(0o644)

    HookInstaller(tmp_path, command="/opt/bin/gitmeta").install(dev_mode=True)

    assert hook.read_text() == "#!/bin/bash\nmake lint\n/opt/bin/gitmeta dev commit\n"
    assert os.access(hook, os.X_OK)
    assert not (tmp_path / "post-merge").exists()


def test_install_warns_when_existing_hook_exits_early(tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
    hook = tmp_path / "pre-commit"
    hook.write_text("#!/bin/sh\nmake lint || exit 1\nexit 0\n")

    with caplog.at_level(logging.WARNING, logger="gitmeta.hooks"):
        HookInstaller(tmp_path).install()

    assert hook.read_text().endswith("exit 0\ngitmeta commit\n")
    assert "pre-commit contains an 'exit' line" in caplog.text
    assert "post-merge" not in caplog.text


def test_install_does_not_warn_for_plain_hooks(tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
    (tmp_path / "pre-commit").write_text("#!/bin/sh\nmake lint\n")

    with caplog.at_level(logging.WARNING, logger="gitmeta.hooks"):
        HookInstaller(tmp_path).install()

    assert caplog.text == ""
