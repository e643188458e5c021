"""Loading, saving and editing the user's manifest."""

from __future__ import annotations

import json
import os
import tempfile
from pathlib import Path

from .types import Manifest, ManifestPlugin, ManifestSkill


class ManifestError(Exception):
    """Raised when the manifest cannot be read, parsed or written."""


def default_path() -> Path:
    """The default manifest location: ~/.armyv2/manifest.json."""
    try:
        home = Path.home()
    except (RuntimeError, KeyError) as exc:
        raise ManifestError(f"getting home directory: {exc}") from exc
    return home / ".armyv2" / "manifest.json"


def empty_manifest() -> Manifest:
    """A new manifest with version 1 and no items."""
    return Manifest(version=1, plugins=[], skills=[])


def load(path: str | os.PathLike[str]) -> Manifest:
    """Read the manifest at path; a missing file gives an empty manifest."""
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return empty_manifest()
    except OSError as exc:
        raise ManifestError(f"reading manifest {path}: {exc}") from exc

    try:
        raw = json.loads(text)
        manifest = Manifest.from_dict(raw)
    except (ValueError, TypeError) as exc:
        raise ManifestError(f"parsing manifest {path}: {exc}") from exc

    if manifest.version == 0:
        manifest.version = 1
    return manifest


def save(path: str | os.PathLike[str], manifest: Manifest) -> None:
    """Write the manifest atomically, creating the parent directory if needed."""
    path = Path(path)
    directory = path.parent
    try:
        directory.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise ManifestError(f"creating directory {directory}: {exc}") from exc

    data = json.dumps(manifest.to_dict(), indent=2, ensure_ascii=False) + "\n"

    try:
        fd, tmp_name = tempfile.mkstemp(dir=directory, prefix="manifest-", suffix=".json.tmp")
    except OSError as exc:
        raise ManifestError(f"creating temp file: {exc}") from exc

    try:
        with os.fdopen(fd, "w", encoding="utf-8") as tmp:
            tmp.write(data)
        os.replace(tmp_name, path)
    except OSError as exc:
        try:
            os.remove(tmp_name)
        except OSError:
            pass
        raise ManifestError(f"writing manifest {path}: {exc}") from exc


def _index_of(entries, name: str) -> int | None:
    lower = name.lower()
    return next((i for i, e in enumerate(entries) if e.name.lower() == lower), None)


def add_plugin(manifest: Manifest, plugin: ManifestPlugin) -> bool:
    """Append a plugin; False if one with the same name (any case) exists."""
    if has_plugin(manifest, plugin.name):
        return False
    manifest.plugins.append(plugin)
    return True


def remove_plugin(manifest: Manifest, name: str) -> bool:
    """Remove the plugin with this name (any case); False if absent."""
    index = _index_of(manifest.plugins, name)
    if index is None:
        return False
    del manifest.plugins[index]
    return True


def add_skill(manifest: Manifest, skill: ManifestSkill) -> bool:
    """Append a skill; False if one with the same name (any case) exists."""
    if has_skill(manifest, skill.name):
        return False
    manifest.skills.append(skill)
    return True


def remove_skill(manifest: Manifest, name: str) -> bool:
    """Remove the skill with this name (any case); False if absent."""
    index = _index_of(manifest.skills, name)
    if index is None:
        return False
    del manifest.skills[index]
    return True


def has_plugin(manifest: Manifest, name: str) -> bool:
    """Whether a plugin with this name (any case) is in the manifest."""
    return _index_of(manifest.plugins, name) is not None


def has_skill(manifest: Manifest, name: str) -> bool:
    """Whether a skill with this name (any case) is in the manifest."""
    return _index_of(manifest.skills, name) is not None