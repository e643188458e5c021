"""Reading the installed plugins and skills from their state files."""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any

from .types import InstalledPlugin, InstalledSkill


class SystemError_(Exception):
    """Raised when installed state cannot be read or parsed."""


def parse_plugin_key(key: str) -> tuple[str, str]:
    """Split a "name@marketplace" key; the marketplace is empty without an "@"."""
    name, _, marketplace = key.partition("@")
    return name, marketplace


def _object(value: Any, label: str, what: str) -> dict[str, Any]:
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise SystemError_(f"parsing {label}: {what} must be an object")
    return value


def _string(obj: dict[str, Any], key: str, label: str) -> str:
    value = obj.get(key)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise SystemError_(f"parsing {label}: field {key!r} must be a string")
    return value


def _check_version(doc: dict[str, Any], label: str) -> None:
    version = doc.get("version")
    if version is not None and (isinstance(version, bool) or not isinstance(version, int)):
        raise SystemError_(f"parsing {label}: field 'version' must be an integer")


class SystemReader:
    """Reads installed state from files under the home directory."""

    def __init__(self, home: str | os.PathLike[str] | None = None) -> None:
        self._home = Path(home) if home is not None else None

    def _home_dir(self) -> Path:
        if self._home is not None:
            return self._home
        try:
            return Path.home()
        except (RuntimeError, KeyError) as exc:
            raise SystemError_(f"getting home dir: {exc}") from exc

    def _read(self, path: Path, label: str) -> Any:
        try:
            data = path.read_bytes()
        except FileNotFoundError:
            return None
        except OSError as exc:
            raise SystemError_(f"reading {label}: {exc}") from exc
        try:
            return json.loads(data)
        except ValueError as exc:
            raise SystemError_(f"parsing {label}: {exc}") from exc

    def installed_plugins(self) -> list[InstalledPlugin]:
        """Plugins listed in ~/.claude/plugins/installed_plugins.json; none if absent."""
        label = "installed_plugins.json"
        path = self._home_dir() / ".claude" / "plugins" / label
        doc = _object(self._read(path, label), label, "top level")
        _check_version(doc, label)

        plugins = []
        for key, instances in _object(doc.get("plugins"), label, "'plugins'").items():
            if instances is None:
                continue
            if not isinstance(instances, list):
                raise SystemError_(f"parsing {label}: entry {key!r} must be an array")
            entries = [_object(i, label, f"entry {key!r}") for i in instances]
            if not entries:
                continue
            first = entries[0]
            for entry in entries:
                for field in ("scope", "installPath", "version", "installedAt",
                              "lastUpdated", "gitCommitSha"):
                    _string(entry, field, label)
            name, marketplace = parse_plugin_key(key)
            plugins.append(
                InstalledPlugin(
                    name=name,
                    marketplace=marketplace,
                    version=_string(first, "version", label),
                    scope=_string(first, "scope", label),
                    install_path=_string(first, "installPath", label),
                )
            )
        return plugins

    def installed_skills(self) -> list[InstalledSkill]:
        """Skills listed in ~/.agents/.skill-lock.json; none if absent."""
        label = ".skill-lock.json"
        path = self._home_dir() / ".agents" / label
        doc = _object(self._read(path, label), label, "top level")
        _check_version(doc, label)

        skills = []
        for name, raw in _object(doc.get("skills"), label, "'skills'").items():
            entry = _object(raw, label, f"entry {name!r}")
            for field in ("source", "sourceType", "sourceUrl", "skillPath",
                          "skillFolderHash", "installedAt", "updatedAt"):
                _string(entry, field, label)
            skills.append(
                InstalledSkill(
                    name=name,
                    source=_string(entry, "source", label),
                    source_url=_string(entry, "sourceUrl", label),
                )
            )
        return skills