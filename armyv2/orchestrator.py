"""Coordination of install, remove and sync operations."""

from __future__ import annotations

import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Callable, Iterable, Protocol, TextIO

from .diff import compare
from .types import (
    Action,
    InstalledPlugin,
    InstalledSkill,
    Manifest,
    ManifestPlugin,
    ManifestSkill,
)


class PluginInstaller(Protocol):
    def install(self, name: str) -> None: ...

    def remove(self, name: str) -> None: ...


class SkillInstaller(Protocol):
    def install(self, name: str, source: str) -> None: ...

    def remove(self, name: str) -> None: ...


class StateReader(Protocol):
    def installed_plugins(self) -> list[InstalledPlugin]: ...

    def installed_skills(self) -> list[InstalledSkill]: ...


@dataclass
class BatchResult:
    """Outcome of a batch of actions."""

    succeeded: int = 0
    failed: int = 0
    errors: list[Exception] = field(default_factory=list)

    def _record(self, error: Exception | None) -> None:
        if error is None:
            self.succeeded += 1
        else:
            self.failed += 1
            self.errors.append(error)


_WORDS = {
    "install": ("Installing", "install", "Installed"),
    "remove": ("Removing", "remove", "Removed"),
}


class Orchestrator:
    """Plans and runs the actions that bring the machine in line with a manifest."""

    def __init__(
        self,
        plugins: PluginInstaller,
        skills: SkillInstaller,
        system: StateReader,
        out: TextIO,
    ) -> None:
        self._plugins = plugins
        self._skills = skills
        self._system = system
        self._out = out
        self._lock = threading.Lock()

    def plan_actions(self, manifest: Manifest) -> list[Action]:
        """Actions that install what is missing and remove what is extra."""
        d = compare(manifest, self._system.installed_plugins(), self._system.installed_skills())
        return [
            *(Action("install", "plugin", p.name, p.marketplace, p.destination)
              for p in d.missing_plugins),
            *(Action("remove", "plugin", p.name, p.marketplace) for p in d.extra_plugins),
            *(Action("install", "skill", s.name, s.source, s.destination)
              for s in d.missing_skills),
            *(Action("remove", "skill", s.name, s.source) for s in d.extra_skills),
        ]

    def execute(self, actions: Iterable[Action]) -> BatchResult:
        """Run actions: plugins in parallel, then skills in order.

        Failures do not stop the batch; they are collected in the result.
        """
        actions = list(actions)
        plugin_actions = [a for a in actions if a.item_type == "plugin"]
        skill_actions = [a for a in actions if a.item_type == "skill"]

        result = BatchResult()
        if plugin_actions:
            with ThreadPoolExecutor(max_workers=len(plugin_actions)) as pool:
                for error in pool.map(self._attempt, plugin_actions):
                    result._record(error)
        for action in skill_actions:
            result._record(self._attempt(action))
        return result

    def install_items(
        self,
        plugins: Iterable[ManifestPlugin] | None,
        skills: Iterable[ManifestSkill] | None,
    ) -> BatchResult:
        """Install the given plugins and skills directly."""
        actions = [
            *(Action("install", "plugin", p.name, p.marketplace, p.destination)
              for p in plugins or ()),
            *(Action("install", "skill", s.name, s.source, s.destination)
              for s in skills or ()),
        ]
        return self.execute(actions)

    def _say(self, line: str) -> None:
        with self._lock:
            print(line, file=self._out)

    def _operation(self, action: Action) -> Callable[[], None] | None:
        if action.item_type == "plugin":
            if action.kind == "install":
                return lambda: self._plugins.install(action.name)
            if action.kind == "remove":
                return lambda: self._plugins.remove(action.name)
        elif action.item_type == "skill":
            if action.kind == "install":
                return lambda: self._skills.install(action.name, action.source)
            if action.kind == "remove":
                return lambda: self._skills.remove(action.name)
        return None

    def _attempt(self, action: Action) -> Exception | None:
        """Run one action; return the error it failed with, or None."""
        operation = self._operation(action)
        if operation is None:
            return None
        gerund, verb, past = _WORDS[action.kind]
        label = f"{action.item_type} {action.name}"
        self._say(f"{gerund} {label}...")
        try:
            operation()
        except Exception as exc:  # installers may fail in any way; keep going
            self._say(f"Failed to {verb} {label}: {exc}")
            error = RuntimeError(f"{verb} {label}: {exc}")
            error.__cause__ = exc
            return error
        self._say(f"{past} {label}")
        return None