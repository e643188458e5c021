"""Health checks comparing the manifest, the lock files and the disk."""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Iterable

from .types import DoctorIssue, InstalledPlugin, InstalledSkill, Manifest


def _q(name: str) -> str:
    return json.dumps(name, ensure_ascii=False)


def _home_or_none(home) -> Path | None:
    if home is not None:
        return Path(home)
    try:
        return Path.home()
    except (RuntimeError, KeyError):
        return None


def check(
    manifest: Manifest,
    plugins: Iterable[InstalledPlugin] | None,
    skills: Iterable[InstalledSkill] | None,
    home: str | os.PathLike[str] | None = None,
) -> list[DoctorIssue]:
    """Run every health check and return the issues found.

    Disk checks look under home (the user's home directory by default) and
    are skipped when no home directory can be found.
    """
    plugins = list(plugins or ())
    skills = list(skills or ())
    home_dir = _home_or_none(home)

    issues = [
        *_missing(manifest.plugins, {p.name for p in plugins}, "Plugin"),
        *_missing(manifest.skills, {s.name for s in skills}, "Skill"),
        *_orphans(plugins, {p.name for p in manifest.plugins}, "Plugin"),
        *_orphans(skills, {s.name for s in manifest.skills}, "Skill"),
    ]
    if home_dir is not None:
        issues.extend(_skill_disk_drift(skills, home_dir))
        issues.extend(_skill_orphan_dirs(skills, home_dir))
    issues.extend(_plugin_disk_drift(plugins))
    return issues


def _missing(wanted, installed: set[str], label: str) -> list[DoctorIssue]:
    return [
        DoctorIssue(
            severity="error",
            category="missing",
            description=f"{label} {_q(w.name)} is in manifest but not installed",
            item=w.name,
        )
        for w in wanted
        if w.name not in installed
    ]


def _orphans(installed, wanted: set[str], label: str) -> list[DoctorIssue]:
    return [
        DoctorIssue(
            severity="warning",
            category="orphan",
            description=f"{label} {_q(i.name)} is installed but not in manifest",
            item=i.name,
        )
        for i in installed
        if i.name not in wanted
    ]


def _missing_on_disk(path) -> bool:
    try:
        os.stat(path)
    except FileNotFoundError:
        return True
    except OSError:
        return False
    return False


def _skill_disk_drift(skills: list[InstalledSkill], home: Path) -> list[DoctorIssue]:
    issues = []
    for skill in skills:
        skill_dir = os.path.join(home, ".agents", "skills", skill.name)
        if _missing_on_disk(skill_dir):
            issues.append(
                DoctorIssue(
                    severity="error",
                    category="drift",
                    description=(
                        f"Skill {_q(skill.name)} is in lock file but missing from disk at {skill_dir}"
                    ),
                    item=skill.name,
                )
            )
    return issues


def _skill_orphan_dirs(skills: list[InstalledSkill], home: Path) -> list[DoctorIssue]:
    skills_dir = os.path.join(home, ".agents", "skills")
    try:
        with os.scandir(skills_dir) as it:
            entries = sorted(it, key=lambda e: e.name)
    except OSError:
        return []

    known = {s.name for s in skills}
    return [
        DoctorIssue(
            severity="warning",
            category="drift",
            description=(
                f"Skill directory {_q(entry.name)} exists on disk at "
                f"{os.path.join(skills_dir, entry.name)} but is not in lock file"
            ),
            item=entry.name,
        )
        for entry in entries
        if entry.is_dir(follow_symlinks=False) and entry.name not in known
    ]


def _plugin_disk_drift(plugins: list[InstalledPlugin]) -> list[DoctorIssue]:
    return [
        DoctorIssue(
            severity="warning",
            category="drift",
            description=(
                f"Plugin {_q(p.name)} has installPath {p.install_path} but directory is missing from disk"
            ),
            item=p.name,
        )
        for p in plugins
        if p.install_path and _missing_on_disk(p.install_path)
    ]