"""Data model shared by the catalog, the manifest, the installers and the checks."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping


def _mapping(data: Any, what: str) -> Mapping[str, Any]:
    if data is None:
        return {}
    if not isinstance(data, Mapping):
        raise TypeError(f"{what} must be an object")
    return data


def _string(data: Mapping[str, Any], key: str, what: str) -> str:
    value = data.get(key)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise TypeError(f"{what}.{key} must be a string")
    return value


def _integer(data: Mapping[str, Any], key: str, what: str) -> int:
    value = data.get(key)
    if value is None:
        return 0
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"{what}.{key} must be an integer")
    return value


def _strings(data: Mapping[str, Any], key: str, what: str) -> list[str]:
    value = data.get(key)
    if value is None:
        return []
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise TypeError(f"{what}.{key} must be an array of strings")
    return list(value)


def _objects(data: Mapping[str, Any], key: str, what: str) -> list[Mapping[str, Any]]:
    value = data.get(key)
    if value is None:
        return []
    if not isinstance(value, list):
        raise TypeError(f"{what}.{key} must be an array")
    return [_mapping(item, f"{what}.{key}[{i}]") for i, item in enumerate(value)]


@dataclass
class CatalogPlugin:
    """A plugin offered by the catalog."""

    name: str
    marketplace: str = ""
    description: str = ""
    tags: list[str] = field(default_factory=list)


@dataclass
class CatalogSkill:
    """A skill offered by the catalog."""

    name: str
    source: str = ""
    description: str = ""
    tags: list[str] = field(default_factory=list)


@dataclass
class TechProfile:
    """Detection markers of a technology and the items recommended for it."""

    detect: list[str] = field(default_factory=list)
    plugins: list[str] = field(default_factory=list)
    skills: list[str] = field(default_factory=list)


@dataclass
class Catalog:
    """The full registry of available plugins, skills and tech profiles."""

    version: int = 0
    updated_at: str = ""
    plugins: list[CatalogPlugin] = field(default_factory=list)
    skills: list[CatalogSkill] = field(default_factory=list)
    tech_profiles: dict[str, TechProfile] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Any) -> "Catalog":
        """Build a catalog from decoded JSON; raises TypeError on wrong types."""
        data = _mapping(data, "catalog")
        plugins = [
            CatalogPlugin(
                name=_string(p, "name", "plugin"),
                marketplace=_string(p, "marketplace", "plugin"),
                description=_string(p, "description", "plugin"),
                tags=_strings(p, "tags", "plugin"),
            )
            for p in _objects(data, "plugins", "catalog")
        ]
        skills = [
            CatalogSkill(
                name=_string(s, "name", "skill"),
                source=_string(s, "source", "skill"),
                description=_string(s, "description", "skill"),
                tags=_strings(s, "tags", "skill"),
            )
            for s in _objects(data, "skills", "catalog")
        ]
        profiles: dict[str, TechProfile] = {}
        for key, raw in _mapping(data.get("tech_profiles"), "catalog.tech_profiles").items():
            prof = _mapping(raw, f"tech_profiles.{key}")
            profiles[key] = TechProfile(
                detect=_strings(prof, "detect", key),
                plugins=_strings(prof, "plugins", key),
                skills=_strings(prof, "skills", key),
            )
        return cls(
            version=_integer(data, "version", "catalog"),
            updated_at=_string(data, "updated_at", "catalog"),
            plugins=plugins,
            skills=skills,
            tech_profiles=profiles,
        )

    def to_dict(self) -> dict[str, Any]:
        """Return the JSON-ready form of the catalog."""
        return {
            "version": self.version,
            "updated_at": self.updated_at,
            "plugins": [
                {
                    "name": p.name,
                    "marketplace": p.marketplace,
                    "description": p.description,
                    "tags": list(p.tags),
                }
                for p in self.plugins
            ],
            "skills": [
                {
                    "name": s.name,
                    "source": s.source,
                    "description": s.description,
                    "tags": list(s.tags),
                }
                for s in self.skills
            ],
            "tech_profiles": {
                name: {
                    "detect": list(p.detect),
                    "plugins": list(p.plugins),
                    "skills": list(p.skills),
                }
                for name, p in self.tech_profiles.items()
            },
        }


@dataclass
class ManifestPlugin:
    """A plugin chosen in the user's manifest."""

    name: str
    marketplace: str = ""
    tags: list[str] = field(default_factory=list)
    destination: str = ""  # "user" or "project"


@dataclass
class ManifestSkill:
    """A skill chosen in the user's manifest."""

    name: str
    source: str = ""
    tags: list[str] = field(default_factory=list)
    destination: str = ""  # "user" or "project"


@dataclass
class Manifest:
    """The user's personal selection of plugins and skills."""

    version: int = 1
    plugins: list[ManifestPlugin] = field(default_factory=list)
    skills: list[ManifestSkill] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Any) -> "Manifest":
        """Build a manifest from decoded JSON; raises TypeError on wrong types."""
        data = _mapping(data, "manifest")
        plugins = [
            ManifestPlugin(
                name=_string(p, "name", "plugin"),
                marketplace=_string(p, "marketplace", "plugin"),
                tags=_strings(p, "tags", "plugin"),
                destination=_string(p, "destination", "plugin"),
            )
            for p in _objects(data, "plugins", "manifest")
        ]
        skills = [
            ManifestSkill(
                name=_string(s, "name", "skill"),
                source=_string(s, "source", "skill"),
                tags=_strings(s, "tags", "skill"),
                destination=_string(s, "destination", "skill"),
            )
            for s in _objects(data, "skills", "manifest")
        ]
        return cls(version=_integer(data, "version", "manifest"), plugins=plugins, skills=skills)

    def to_dict(self) -> dict[str, Any]:
        """Return the JSON-ready form of the manifest."""
        return {
            "version": self.version,
            "plugins": [
                {
                    "name": p.name,
                    "marketplace": p.marketplace,
                    "tags": list(p.tags),
                    "destination": p.destination,
                }
                for p in self.plugins
            ],
            "skills": [
                {
                    "name": s.name,
                    "source": s.source,
                    "tags": list(s.tags),
                    "destination": s.destination,
                }
                for s in self.skills
            ],
        }


@dataclass
class InstalledPlugin:
    """A plugin found on the system."""

    name: str
    marketplace: str = ""
    version: str = ""
    scope: str = ""
    install_path: str = ""


@dataclass
class InstalledSkill:
    """A skill found on the system."""

    name: str
    source: str = ""
    source_url: str = ""


@dataclass
class DiffResult:
    """Differences between the manifest and what is installed."""

    missing_plugins: list[ManifestPlugin] = field(default_factory=list)
    extra_plugins: list[InstalledPlugin] = field(default_factory=list)
    missing_skills: list[ManifestSkill] = field(default_factory=list)
    extra_skills: list[InstalledSkill] = field(default_factory=list)


@dataclass
class DoctorIssue:
    """A health check finding."""

    severity: str  # "error", "warning", "info"
    category: str  # "orphan", "drift", "missing", "broken"
    description: str
    item: str


@dataclass
class Action:
    """An install or remove step for the orchestrator."""

    kind: str  # "install" or "remove"
    item_type: str  # "plugin" or "skill"
    name: str
    source: str = ""  # marketplace for plugins, source repo for skills
    destination: str = ""  # "user" or "project"