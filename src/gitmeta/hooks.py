"""Install gitmeta invocations into git hook scripts."""

from __future__ import annotations

import logging
import re
import stat
from pathlib import Path

logger = logging.getLogger(__name__)

SHEBANG = "#!/bin/sh"

_EXIT_LINE = re.compile(r"^\s*exit\b", re.MULTILINE)


class HookInstaller:
    """Appends gitmeta command lines to hook scripts in ``hooks_dir``."""

    def __init__(self, hooks_dir: Path, command: str = "gitmeta") -> None:
        self.hooks_dir = hooks_dir
        self.command = command

    def planned_hooks(self, *, dev_mode: bool = False) -> list[tuple[str, str]]:
        if dev_mode:
            return [("pre-commit", f"{self.command} dev commit")]
        return [
            ("pre-commit", f"{self.command} commit"),
            ("post-merge", f"{self.command} merge"),
        ]

    def install(self, *, dev_mode: bool = False) -> list[tuple[Path, str, bool]]:
        """Install hook lines; returns ``(hook, line, added)`` for each hook."""

        self.hooks_dir.mkdir(parents=True, exist_ok=True)
        return [self._append_line(self.hooks_dir / name, line) for name, line in self.planned_hooks(dev_mode=dev_mode)]

    def _append_line(self, hook: Path, line: str) -> tuple[Path, str, bool]:
        text = hook.read_text(encoding="utf-8") if hook.exists() else f"{SHEBANG}\n"
        added = line not in text.splitlines()
        if added:
            if _EXIT_LINE.search(text):
                logger.warning(
                    "%s contains an 'exit' line; '%s' is appended at the end and may never run",
                    hook,
                    line,
                )
            if not text.endswith("\n"):
                text += "\n"
            hook.write_text(f"{text}{line}\n", encoding="utf-8")
            logger.debug("added '%s' to %s", line, hook)

        mode = hook.stat().st_mode
        hook.chmod(mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
        return hook, line, added
