"""Installing and removing plugins and skills."""

from __future__ import annotations

import json
import os
import shutil
from pathlib import Path

from .runner import CommandError, Runner


class AdapterError(Exception):
    """Raised when a plugin or skill cannot be installed or removed."""


class PluginAdapter:
    """Installs and removes plugins through the claude command."""

    def __init__(self, runner: Runner) -> None:
        self._runner = runner

    def install(self, name: str) -> None:
        try:
            self._runner.run("claude", "plugin", "install", name)
        except (CommandError, OSError) as exc:
            raise AdapterError(f"installing plugin {name}: {exc}") from exc

    def remove(self, name: str) -> None:
        try:
            self._runner.run("claude", "plugin", "remove", name)
        except (CommandError, OSError) as exc:
            raise AdapterError(f"removing plugin {name}: {exc}") from exc


def _remove_all(path: Path) -> None:
    """Remove a file, symlink or directory tree; a missing path is fine."""
    if path.is_symlink() or path.is_file():
        path.unlink(missing_ok=True)
    elif path.is_dir():
        shutil.rmtree(path)


class SkillAdapter:
    """Installs skills through npx and removes them straight from disk."""

    def __init__(self, runner: Runner, home: str | os.PathLike[str] | None = None) -> None:
        self._runner = runner
        self._home = Path(home) if home is not None else None

    def _home_dir(self) -> Path:
        if self._home is not None:
            return self._home
        try:
            return Path.home()
        except (RuntimeError, KeyError) as exc:
            raise AdapterError(f"getting home dir: {exc}") from exc

    def install(self, name: str, source: str) -> None:
        try:
            self._runner.run(
                "npx", "@anthropic-ai/claude-code-skills", "add", name, "-s", source, "-y"
            )
        except (CommandError, OSError) as exc:
            raise AdapterError(f"installing skill {name} from {source}: {exc}") from exc

    def remove(self, name: str) -> None:
        """Delete the skill directory, its link and its lock file entry.

        This bypasses the skills tool, which refuses to remove skills that a
        plugin provides.
        """
        home = self._home_dir()

        skill_dir = home / ".agents" / "skills" / name
        try:
            _remove_all(skill_dir)
        except OSError as exc:
            raise AdapterError(f"removing skill dir {skill_dir}: {exc}") from exc

        link = home / ".claude" / "skills" / name
        try:
            _remove_all(link)
        except OSError as exc:
            raise AdapterError(f"removing skill symlink {link}: {exc}") from exc

        try:
            _remove_from_lock_file(home, name)
        except (ValueError, OSError) as exc:
            raise AdapterError(f"updating skill-lock for {name}: {exc}") from exc


def _remove_from_lock_file(home: Path, skill_name: str) -> None:
    """Drop the skill's entry from the lock file; no lock file or entry is a no-op."""
    lock_path = home / ".agents" / ".skill-lock.json"
    try:
        data = lock_path.read_bytes()
    except OSError:
        return

    try:
        lock = json.loads(data)
    except ValueError as exc:
        raise ValueError(f"parsing skill-lock: {exc}") from exc
    if lock is not None and not isinstance(lock, dict):
        raise ValueError("parsing skill-lock: top level must be an object")

    skills = (lock or {}).get("skills")
    if not isinstance(skills, dict) or skill_name not in skills:
        return
    del skills[skill_name]

    text = json.dumps(lock, indent=2, sort_keys=True, ensure_ascii=False)
    lock_path.write_text(text + "\n", encoding="utf-8")