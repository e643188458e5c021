"""The catalog of available plugins, skills and tech profiles."""

from __future__ import annotations

import copy
import json
import os
from pathlib import Path
from typing import Any

from .types import Catalog, CatalogPlugin, CatalogSkill, TechProfile


class CatalogError(Exception):
    """Raised when a catalog is invalid or cannot be read."""


def _decode(data: bytes | str) -> Any:
    return json.loads(data)


def _is_integer(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _validate_entry(entry: Any, field: str, index: int) -> None:
    if entry is None:
        entry = {}
    if not isinstance(entry, dict):
        raise CatalogError(f"{field}[{index}]: must be an object")
    if "name" not in entry:
        raise CatalogError(f"{field}[{index}]: missing required field 'name'")


def validate(data: bytes | str) -> None:
    """Check that data is a structurally valid catalog; raise CatalogError if not."""
    try:
        raw = _decode(data)
    except ValueError as exc:
        raise CatalogError(f"invalid JSON: {exc}") from exc
    if not isinstance(raw, dict):
        raise CatalogError("invalid JSON: top level must be an object")

    if "version" not in raw:
        raise CatalogError("missing required field: version")
    version = raw["version"]
    if version is None:
        version = 0
    if not _is_integer(version):
        raise CatalogError("field 'version' must be an integer")
    if version < 1:
        raise CatalogError(f"field 'version' must be >= 1, got {version}")

    for field in ("plugins", "skills"):
        if field not in raw:
            continue
        entries = raw[field]
        if entries is None:
            continue
        if not isinstance(entries, list):
            raise CatalogError(f"field '{field}' must be an array")
        for index, entry in enumerate(entries):
            _validate_entry(entry, field, index)

    if "tech_profiles" in raw:
        profiles = raw["tech_profiles"]
        if profiles is not None and not isinstance(profiles, dict):
            raise CatalogError("field 'tech_profiles' must be an object")


def parse_catalog(data: bytes | str) -> Catalog:
    """Decode JSON catalog data into a Catalog."""
    try:
        return Catalog.from_dict(_decode(data))
    except (ValueError, TypeError) as exc:
        raise CatalogError(f"unmarshaling catalog: {exc}") from exc


def load_updated_catalog(home: str | os.PathLike[str]) -> Catalog:
    """Read the downloaded catalog at <home>/.armyv2/catalog.json."""
    path = Path(home) / ".armyv2" / "catalog.json"
    try:
        data = path.read_bytes()
    except OSError as exc:
        raise CatalogError(f"reading {path}: {exc}") from exc
    try:
        return parse_catalog(data)
    except CatalogError as exc:
        raise CatalogError(f"parsing updated catalog: {exc}") from exc


def merge_catalogs(base: Catalog, updated: Catalog) -> Catalog:
    """Merge an updated catalog over the base one.

    The updated catalog wins when its version is not older: its plugins and
    skills replace the base lists, and its tech profiles override base keys.
    """
    if updated.version < base.version:
        return base
    profiles = dict(base.tech_profiles)
    profiles.update(updated.tech_profiles)
    return Catalog(
        version=updated.version,
        updated_at=updated.updated_at,
        plugins=list(updated.plugins or []),
        skills=list(updated.skills or []),
        tech_profiles=profiles,
    )


class CatalogService:
    """Read access to a merged catalog."""

    def __init__(self, catalog: Catalog) -> None:
        self._catalog = catalog

    @classmethod
    def from_bytes(cls, data: bytes | str) -> "CatalogService":
        """Validate and parse raw JSON into a service."""
        try:
            validate(data)
        except CatalogError as exc:
            raise CatalogError(f"validating catalog: {exc}") from exc
        try:
            catalog = parse_catalog(data)
        except CatalogError as exc:
            raise CatalogError(f"parsing catalog: {exc}") from exc
        return cls(catalog)

    @classmethod
    def load(cls, embedded: bytes | str) -> "CatalogService":
        """Parse the bundled catalog and merge any updated one from the home directory."""
        try:
            base = parse_catalog(embedded)
        except CatalogError as exc:
            raise CatalogError(f"parsing embedded catalog: {exc}") from exc
        try:
            updated = load_updated_catalog(Path.home())
        except (CatalogError, RuntimeError, KeyError):
            return cls(base)
        return cls(merge_catalogs(base, updated))

    def find_plugin(self, name: str) -> CatalogPlugin | None:
        """The plugin with this name (any case), or None."""
        lower = name.lower()
        return next((p for p in self._catalog.plugins if p.name.lower() == lower), None)

    def find_skill(self, name: str) -> CatalogSkill | None:
        """The skill with this name (any case), or None."""
        lower = name.lower()
        return next((s for s in self._catalog.skills if s.name.lower() == lower), None)

    def get_tech_profile(self, name: str) -> TechProfile | None:
        """The tech profile for this technology (any case), or None."""
        lower = name.lower()
        return next(
            (p for key, p in self._catalog.tech_profiles.items() if key.lower() == lower),
            None,
        )

    def all_plugins(self) -> list[CatalogPlugin]:
        """A copy of every plugin in the catalog."""
        return copy.deepcopy(self._catalog.plugins)

    def all_skills(self) -> list[CatalogSkill]:
        """A copy of every skill in the catalog."""
        return copy.deepcopy(self._catalog.skills)

    def all_tech_profiles(self) -> dict[str, TechProfile]:
        """A copy of every tech profile in the catalog."""
        return copy.deepcopy(self._catalog.tech_profiles)