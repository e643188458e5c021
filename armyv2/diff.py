"""Comparison of the manifest against installed state."""

from __future__ import annotations

from typing import Iterable

from .types import DiffResult, InstalledPlugin, InstalledSkill, Manifest


def compare(
    manifest: Manifest,
    plugins: Iterable[InstalledPlugin] | None,
    skills: Iterable[InstalledSkill] | None,
) -> DiffResult:
    """Return the items missing from and extra to the installed state."""
    plugins = list(plugins or ())
    skills = list(skills or ())

    installed_plugins = {p.name for p in plugins}
    installed_skills = {s.name for s in skills}
    wanted_plugins = {p.name for p in manifest.plugins}
    wanted_skills = {s.name for s in manifest.skills}

    return DiffResult(
        missing_plugins=[p for p in manifest.plugins if p.name not in installed_plugins],
        extra_plugins=[p for p in plugins if p.name not in wanted_plugins],
        missing_skills=[s for s in manifest.skills if s.name not in installed_skills],
        extra_skills=[s for s in skills if s.name not in wanted_skills],
    )


def has_drift(result: DiffResult) -> bool:
    """True if the manifest and installed state differ in any way."""
    return bool(
        result.missing_plugins
        or result.extra_plugins
        or result.missing_skills
        or result.extra_skills
    )