"""Commands that edit the manifest and report on installed plugins and skills."""

from __future__ import annotations

import json
import os
import sys
from dataclasses import dataclass
from pathlib import Path

from . import manifest as manifest_store
from .adapters import PluginAdapter, SkillAdapter
from .catalog import CatalogError, CatalogService
from .doctor import check
from .manifest import ManifestError
from .orchestrator import Orchestrator
from .runner import DryRunner, RealRunner, Runner
from .system import SystemError_, SystemReader
from .types import (
    InstalledPlugin,
    InstalledSkill,
    Manifest,
    ManifestPlugin,
    ManifestSkill,
)

STATUS_OK = "\033[32m✓\033[0m"
STATUS_BROKEN = "\033[33m⚠\033[0m"
STATUS_MISSING = "\033[31m✗\033[0m"

_ICON_ERROR = "\033[31m✗\033[0m"
_ICON_WARNING = "\033[33m!\033[0m"
_ICON_INFO = "\033[34mℹ\033[0m"

_BUNDLED_CATALOG = Path(__file__).with_name("catalog.json")
_EMPTY_CATALOG = b'{"version": 0}'


class CommandFailed(Exception):
    """Raised when a command cannot complete."""


@dataclass
class GlobalOptions:
    """Options shared by every command."""

    dry_run: bool = False
    manifest_path: str | None = None
    verbose: bool = False


@dataclass
class Deps:
    """Everything a command needs, resolved once."""

    catalog: CatalogService
    manifest: Manifest
    manifest_path: str
    orchestrator: Orchestrator
    system: SystemReader
    runner: Runner


def _q(text: str) -> str:
    return json.dumps(text, ensure_ascii=False)


def _embedded_catalog() -> bytes:
    try:
        return _BUNDLED_CATALOG.read_bytes()
    except FileNotFoundError:
        return _EMPTY_CATALOG


def _home() -> str:
    try:
        return str(Path.home())
    except (RuntimeError, KeyError):
        return ""


def resolve_deps(options: GlobalOptions) -> Deps:
    """Load the catalog and manifest and wire up the installers."""
    try:
        catalog = CatalogService.load(_embedded_catalog())
    except CatalogError as exc:
        raise CommandFailed(f"loading catalog: {exc}") from exc

    path = options.manifest_path
    if not path:
        try:
            path = manifest_store.default_path()
        except (ManifestError, RuntimeError, KeyError) as exc:
            raise CommandFailed(f"determining manifest path: {exc}") from exc
    path = os.fspath(path)

    try:
        loaded = manifest_store.load(path)
    except (ManifestError, OSError, ValueError, TypeError) as exc:
        raise CommandFailed(f"loading manifest: {exc}") from exc

    runner: Runner = DryRunner() if options.dry_run else RealRunner()
    system = SystemReader()
    orchestrator = Orchestrator(PluginAdapter(runner), SkillAdapter(runner), system, sys.stdout)
    return Deps(
        catalog=catalog,
        manifest=loaded,
        manifest_path=path,
        orchestrator=orchestrator,
        system=system,
        runner=runner,
    )


def _save(deps: Deps) -> None:
    try:
        manifest_store.save(deps.manifest_path, deps.manifest)
    except (ManifestError, OSError) as exc:
        raise CommandFailed(f"saving manifest: {exc}") from exc


def _installed(deps: Deps) -> tuple[list[InstalledPlugin], list[InstalledSkill]]:
    try:
        plugins = deps.system.installed_plugins()
    except SystemError_ as exc:
        raise CommandFailed(f"reading installed plugins: {exc}") from exc
    try:
        skills = deps.system.installed_skills()
    except SystemError_ as exc:
        raise CommandFailed(f"reading installed skills: {exc}") from exc
    return plugins, skills


def _destination(project: bool) -> str:
    return "project" if project else "user"


def cmd_add_plugin(options: GlobalOptions, name: str, no_install: bool = False,
                   project: bool = False) -> None:
    """Add a catalog plugin to the manifest and, unless told not to, install it."""
    deps = resolve_deps(options)
    found = deps.catalog.find_plugin(name)
    if found is None:
        raise CommandFailed(
            f"plugin {_q(name)} not found in catalog. Run 'armyv2 update' to refresh"
        )

    plugin = ManifestPlugin(
        name=found.name,
        marketplace=found.marketplace,
        tags=list(found.tags),
        destination=_destination(project),
    )
    if not manifest_store.add_plugin(deps.manifest, plugin):
        print(f"Plugin {_q(name)} is already in the manifest.")
        return

    _save(deps)
    print(f"Added plugin {_q(name)} to manifest.")

    if not no_install:
        print(f"Installing {name}...")
        result = deps.orchestrator.install_items([plugin], None)
        if result.failed:
            raise CommandFailed(f"failed to install plugin {_q(name)}")


def cmd_add_skill(options: GlobalOptions, name: str, no_install: bool = False,
                  project: bool = False) -> None:
    """Add a catalog skill to the manifest and, unless told not to, install it."""
    deps = resolve_deps(options)
    found = deps.catalog.find_skill(name)
    if found is None:
        raise CommandFailed(
            f"skill {_q(name)} not found in catalog. Run 'armyv2 update' to refresh"
        )

    skill = ManifestSkill(
        name=found.name,
        source=found.source,
        tags=list(found.tags),
        destination=_destination(project),
    )
    if not manifest_store.add_skill(deps.manifest, skill):
        print(f"Skill {_q(name)} is already in the manifest.")
        return

    _save(deps)
    print(f"Added skill {_q(name)} to manifest.")

    if not no_install:
        print(f"Installing {name}...")
        result = deps.orchestrator.install_items(None, [skill])
        if result.failed:
            raise CommandFailed(f"failed to install skill {_q(name)}")


def _reconcile(deps: Deps, kind: str, name: str) -> None:
    try:
        actions = deps.orchestrator.plan_actions(deps.manifest)
    except SystemError_ as exc:
        raise CommandFailed(f"planning actions: {exc}") from exc
    if actions:
        result = deps.orchestrator.execute(actions)
        if result.failed:
            raise CommandFailed(f"failed to uninstall {kind} {_q(name)}")


def cmd_remove_plugin(options: GlobalOptions, name: str, manifest_only: bool = False) -> None:
    """Drop a plugin from the manifest and, unless told not to, bring the machine in line."""
    deps = resolve_deps(options)
    if not manifest_store.remove_plugin(deps.manifest, name):
        raise CommandFailed(f"plugin {_q(name)} not found in manifest")
    _save(deps)
    print(f"Removed plugin {_q(name)} from manifest.")
    if not manifest_only:
        _reconcile(deps, "plugin", name)


def cmd_remove_skill(options: GlobalOptions, name: str, manifest_only: bool = False) -> None:
    """Drop a skill from the manifest and, unless told not to, bring the machine in line."""
    deps = resolve_deps(options)
    if not manifest_store.remove_skill(deps.manifest, name):
        raise CommandFailed(f"skill {_q(name)} not found in manifest")
    _save(deps)
    print(f"Removed skill {_q(name)} from manifest.")
    if not manifest_only:
        _reconcile(deps, "skill", name)


def _missing_on_disk(path: str) -> bool:
    try:
        os.stat(path)
    except FileNotFoundError:
        return True
    except OSError:
        return False
    return False


def plugin_status(in_json: bool, plugin: InstalledPlugin | None) -> str:
    """Status mark for a manifest plugin: missing, broken install path, or fine."""
    if not in_json or plugin is None:
        return STATUS_MISSING
    if plugin.install_path and _missing_on_disk(plugin.install_path):
        return STATUS_BROKEN
    return STATUS_OK


def skill_status(in_lock: bool, name: str, home: str | os.PathLike[str]) -> str:
    """Status mark for a manifest skill: missing, directory gone, or fine."""
    if not in_lock:
        return STATUS_MISSING
    if _missing_on_disk(os.path.join(os.fspath(home), ".agents", "skills", name)):
        return STATUS_BROKEN
    return STATUS_OK


def cmd_list(options: GlobalOptions) -> None:
    """Print the manifest's items with their install status."""
    deps = resolve_deps(options)
    installed_plugins, installed_skills = _installed(deps)
    plugins_by_name = {p.name: p for p in installed_plugins}
    skill_names = {s.name for s in installed_skills}

    if not deps.manifest.plugins and not deps.manifest.skills:
        print("Manifest is empty. Run 'armyv2 setup' to get started.")
        return

    home = _home()

    if deps.manifest.plugins:
        print("Plugins:")
        for p in deps.manifest.plugins:
            installed = plugins_by_name.get(p.name)
            status = plugin_status(installed is not None, installed)
            print(f"  {status} {p.name} ({p.marketplace}, {p.destination})")
        print()

    if deps.manifest.skills:
        print("Skills:")
        for s in deps.manifest.skills:
            status = skill_status(s.name in skill_names, s.name, home)
            print(f"  {status} {s.name} ({s.source}, {s.destination})")


def cmd_doctor(options: GlobalOptions) -> int:
    """Print health check findings; return 1 if any is an error, else 0."""
    deps = resolve_deps(options)
    installed_plugins, installed_skills = _installed(deps)
    issues = check(deps.manifest, installed_plugins, installed_skills)

    if not issues:
        print(f"{STATUS_OK} No issues found.")
        return 0

    errors = warnings = 0
    for issue in issues:
        if issue.severity == "error":
            icon = _ICON_ERROR
            errors += 1
        elif issue.severity == "warning":
            icon = _ICON_WARNING
            warnings += 1
        else:
            icon = _ICON_INFO
        print(f"  {icon} [{issue.category}] {issue.description}")

    print(f"\n{errors} error(s), {warnings} warning(s)")
    return 1 if errors else 0