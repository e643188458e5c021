"""Detection of a project's tech stack from marker files."""

from __future__ import annotations

import glob
import json
import os
from typing import Iterable, Mapping

from .types import TechProfile


def detect(directory: str | os.PathLike[str], profiles: Mapping[str, TechProfile]) -> list[str]:
    """Names of the profiles whose markers are found in directory."""
    return [name for name, profile in profiles.items() if _matches_profile(directory, profile)]


def recommended_items(
    profile_names: Iterable[str] | None, profiles: Mapping[str, TechProfile]
) -> tuple[list[str], list[str]]:
    """Deduplicated plugin and skill names recommended for the given profiles."""
    plugins: dict[str, None] = {}
    skills: dict[str, None] = {}
    for name in profile_names or ():
        profile = profiles.get(name)
        if profile is None:
            continue
        plugins.update(dict.fromkeys(profile.plugins))
        skills.update(dict.fromkeys(profile.skills))
    return list(plugins), list(skills)


def _matches_profile(directory, profile: TechProfile) -> bool:
    return any(_matches_pattern(directory, pattern) for pattern in profile.detect)


def _matches_pattern(directory, pattern: str) -> bool:
    idx = pattern.find(":")
    if idx > 0:
        return _matches_content(directory, pattern[:idx], pattern[idx + 1 :])
    return bool(_glob(directory, pattern))


def _glob(directory, pattern: str) -> list[str]:
    root = os.fspath(directory)
    return [os.path.join(root, m) for m in glob.glob(pattern, root_dir=root)]


def _matches_content(directory, file_pattern: str, content: str) -> bool:
    return any(_file_contains(path, content) for path in _glob(directory, file_pattern))


def _file_contains(path: str, content: str) -> bool:
    try:
        with open(path, "rb") as fh:
            data = fh.read()
    except OSError:
        return False

    if os.path.splitext(path)[1] == ".json":
        base = os.path.basename(path)
        if base == "package.json":
            return _has_dependency(data, content, ("dependencies", "devDependencies"))
        if base == "composer.json":
            return _has_dependency(data, content, ("require", "require-dev"))

    return content.encode() in data


def _has_dependency(data: bytes, key: str, sections: tuple[str, ...]) -> bool:
    """Exact key lookup in the given dependency sections; substring match if unparsable."""
    try:
        doc = json.loads(data)
    except ValueError:
        doc = None
    if not isinstance(doc, dict) or any(
        doc.get(s) is not None and not isinstance(doc.get(s), dict) for s in sections
    ):
        return key.encode() in data
    return any(key in (doc.get(s) or {}) for s in sections)