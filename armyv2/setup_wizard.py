"""Interactive setup wizard for choosing plugins and skills."""

from __future__ import annotations

import os
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Iterable

from .catalog import CatalogService
from .detector import detect, recommended_items
from .types import Manifest, ManifestPlugin, ManifestSkill

_RESET = "\033[0m"


def _paint(text: str, color: int, bold: bool = False) -> str:
    prefix = "\033[1m" if bold else ""
    return f"{prefix}\033[38;5;{color}m{text}{_RESET}"


def _title(text: str) -> str:
    return _paint(text, 63, bold=True)


def _selected(text: str) -> str:
    return _paint(text, 42)


def _cursor(text: str) -> str:
    return _paint(text, 63)


def _star(text: str) -> str:
    return _paint(text, 214)


def _dim(text: str) -> str:
    return _paint(text, 241)


def _success(text: str) -> str:
    return _paint(text, 42)


_help = _dim


class Step(Enum):
    """Pages of the wizard, in order."""

    DESTINATION = "destination"
    TECH_STACK = "tech_stack"
    PLUGINS = "plugins"
    SKILLS = "skills"
    CONFIRM = "confirm"
    DONE = "done"


_NEXT = {
    Step.TECH_STACK: Step.PLUGINS,
    Step.PLUGINS: Step.SKILLS,
    Step.SKILLS: Step.CONFIRM,
}

_LABELS = {
    Step.DESTINATION: "Destination",
    Step.TECH_STACK: "Tech Stack",
    Step.PLUGINS: "Plugins",
    Step.SKILLS: "Skills",
    Step.CONFIRM: "Confirm",
}


@dataclass
class _Choice:
    name: str
    description: str = ""
    source: str = ""
    selected: bool = False
    recommended: bool = False


class SetupModel:
    """State of the setup wizard, driven one key at a time."""

    def __init__(
        self,
        catalog: CatalogService,
        manifest: Manifest,
        manifest_path: str | os.PathLike[str],
        directory: str | os.PathLike[str] = ".",
    ) -> None:
        self.catalog = catalog
        self.manifest = manifest
        self.manifest_path = os.fspath(manifest_path)
        self.directory = directory

        self.step = Step.DESTINATION
        self.cursor = 0
        self._cursors: dict[Step, int] = {}
        self.destination = "user"
        self.filter = ""
        self.filtering = False
        self.editing_path = False
        self.path_input = ""

        self.tech_items: list[_Choice] = []
        self.plugin_items: list[_Choice] = []
        self.skill_items: list[_Choice] = []
        self.detected_tech: list[str] = []

        self.result_manifest: Manifest | None = None
        self.completed = False
        self.quitted = False

    # --- navigation -------------------------------------------------------

    def _previous_step(self) -> Step:
        if self.step is Step.TECH_STACK:
            return Step.DESTINATION
        if self.step is Step.PLUGINS:
            return Step.TECH_STACK if self.destination == "project" else Step.DESTINATION
        if self.step is Step.SKILLS:
            return Step.PLUGINS
        if self.step is Step.CONFIRM:
            return Step.SKILLS
        return self.step

    def _go(self, step: Step) -> None:
        self._cursors[self.step] = self.cursor
        self.step = step
        self.cursor = self._cursors.get(step, 0)

    def update(self, key: str) -> bool:
        """Handle one key press; return True when the wizard should exit."""
        if key == "ctrl+c":
            self.quitted = True
            return True
        if key == "q" and not self.filtering and not self.editing_path:
            self.quitted = True
            return True
        if (
            key == "left"
            and not self.filtering
            and not self.editing_path
            and self.step not in (Step.DESTINATION, Step.DONE)
        ):
            self._go(self._previous_step())
            self.filter = ""
            self.filtering = False
            return False

        if self.filtering:
            self._handle_filter_input(key)
            return False

        if self.step is Step.DESTINATION:
            self._update_destination(key)
        elif self.step is Step.TECH_STACK:
            self._update_multi_select(key, self.tech_items)
        elif self.step is Step.PLUGINS:
            self._update_multi_select(key, self.plugin_items)
        elif self.step is Step.SKILLS:
            self._update_multi_select(key, self.skill_items)
        elif self.step is Step.CONFIRM:
            return self._update_confirm(key)
        elif self.step is Step.DONE:
            return True
        return False

    def _update_destination(self, key: str) -> None:
        if key in ("up", "k"):
            if self.cursor > 0:
                self.cursor -= 1
        elif key in ("down", "j"):
            if self.cursor < 1:
                self.cursor += 1
        elif key in ("enter", "right"):
            if self.cursor == 0:
                self.destination = "user"
                self._init_plugin_items(None)
                self._init_skill_items(None)
                self._go(Step.PLUGINS)
            else:
                self.destination = "project"
                self._init_tech_items()
                self._go(Step.TECH_STACK)

    def _update_multi_select(self, key: str, items: list[_Choice]) -> None:
        filtered = self._filtered_indices(items)
        if key in ("up", "k"):
            if self.cursor > 0:
                self.cursor -= 1
        elif key in ("down", "j"):
            if self.cursor < len(filtered) - 1:
                self.cursor += 1
        elif key == " ":
            if self.cursor < len(filtered):
                choice = items[filtered[self.cursor]]
                choice.selected = not choice.selected
        elif key == "/":
            self.filtering = True
            self.filter = ""
        elif key == "a":
            for choice in items:
                choice.selected = True
        elif key == "n":
            for choice in items:
                choice.selected = False
        elif key in ("enter", "right"):
            if self.step is Step.TECH_STACK:
                selected_tech = [c.name for c in items if c.selected]
                self._init_plugin_items(selected_tech)
                self._init_skill_items(selected_tech)
            self._go(_NEXT[self.step])
            self.filter = ""
            self.filtering = False

    def _update_confirm(self, key: str) -> bool:
        if self.editing_path:
            self._handle_path_input(key)
            return False
        if key in ("y", "Y", "enter"):
            self._build_result_manifest()
            self.completed = True
            self.step = Step.DONE
            return True
        if key in ("n", "N"):
            self._go(self._previous_step())
        elif key == "d":
            self.editing_path = True
            self.path_input = self.manifest_path
        return False

    def _handle_path_input(self, key: str) -> None:
        if key == "enter":
            self.manifest_path = self.path_input
            self.editing_path = False
        elif key == "esc":
            self.editing_path = False
        elif key == "backspace":
            self.path_input = self.path_input[:-1]
        elif len(key) == 1:
            self.path_input += key

    def _handle_filter_input(self, key: str) -> None:
        if key in ("enter", "esc"):
            self.filtering = False
            self.cursor = 0
        elif key == "backspace":
            self.filter = self.filter[:-1]
        elif len(key) == 1:
            self.filter += key
            self.cursor = 0

    # --- rendering --------------------------------------------------------

    def view(self) -> str:
        """Render the current page as text."""
        if self.quitted:
            return "Setup cancelled.\n"

        parts = [_title("armyv2 setup") + "\n\n"]
        if self.step is not Step.DONE:
            parts.append(self._view_progress())

        if self.step is Step.DESTINATION:
            parts.append(self._view_destination())
        elif self.step is Step.TECH_STACK:
            parts.append(self._view_multi_select("Detected tech stack (adjust as needed):", self.tech_items))
        elif self.step is Step.PLUGINS:
            parts.append(self._view_multi_select("Select plugins to install:", self.plugin_items))
        elif self.step is Step.SKILLS:
            parts.append(self._view_multi_select("Select skills to install:", self.skill_items))
        elif self.step is Step.CONFIRM:
            parts.append(self._view_confirm())
        else:
            parts.append(self._view_done())
        return "".join(parts)

    def _view_progress(self) -> str:
        if self.destination == "project":
            steps = [Step.DESTINATION, Step.TECH_STACK, Step.PLUGINS, Step.SKILLS, Step.CONFIRM]
        else:
            steps = [Step.DESTINATION, Step.PLUGINS, Step.SKILLS, Step.CONFIRM]
        current = steps.index(self.step) if self.step in steps else 0
        dots = " ".join("●" if i <= current else "○" for i in range(len(steps)))
        label = _LABELS[steps[current]]
        return _dim(f"{dots}  Step {current + 1} of {len(steps)}: {label}") + "\n\n"

    def _view_destination(self) -> str:
        options = [
            "User-level (global defaults for all projects)",
            "Project-level (for current project)",
        ]
        lines = ["Where are you setting up Claude Code?\n\n"]
        for i, option in enumerate(options):
            marker = _cursor("❯ ") if self.cursor == i else "  "
            lines.append(marker + option + "\n")
        lines.append("\n" + _help("↑/↓ navigate · →/enter select"))
        return "".join(lines)

    def _view_multi_select(self, title: str, items: list[_Choice]) -> str:
        lines = [title + "\n"]
        if self.filtering:
            lines.append(_dim("Filter: ") + self.filter + "█\n")
        lines.append("\n")

        filtered = self._filtered_indices(items)
        for position, index in enumerate(filtered):
            choice = items[index]
            marker = _cursor("❯ ") if position == self.cursor else "  "
            check = _selected("✓ ") if choice.selected else "  "
            star = " " + _star("★") if choice.recommended else ""
            source = " " + _dim(f"({choice.source})") if choice.source else ""
            desc = " " + _dim("— " + choice.description) if choice.description else ""
            lines.append(marker + check + choice.name + star + source + desc + "\n")

        if len(filtered) < len(items):
            lines.append(_dim(f"\n  ... {len(items) - len(filtered)} hidden by filter"))

        lines.append(
            "\n"
            + _help("↑/↓ navigate · space toggle · a all · n none · / filter · ← back · →/enter confirm")
        )
        return "".join(lines)

    def _view_confirm(self) -> str:
        plugins = [c.name for c in self.plugin_items if c.selected]
        skills = [c.name for c in self.skill_items if c.selected]
        lines = [
            "Summary:\n\n",
            f"  {_selected(f'{len(plugins)} plugin(s)')} selected: {', '.join(plugins)}\n",
            f"  {_selected(f'{len(skills)} skill(s)')} selected: {', '.join(skills)}\n",
            f"  Destination: {self.destination} ({tildefy(self.manifest_path)})\n",
        ]
        if self.editing_path:
            lines.append("\n  " + _dim("Path: ") + self.path_input + "█\n")
            lines.append("\n  " + _help("enter save · esc cancel"))
        else:
            lines.append("\n  " + _help("Proceed? [Y/n] · ← back · d edit path · enter confirm"))
        return "".join(lines)

    def _view_done(self) -> str:
        return (
            _success("✓ Setup complete!")
            + "\n\n"
            + "  Run 'armyv2 sync' to install your selections.\n"
        )

    # --- item lists -------------------------------------------------------

    def _init_tech_items(self) -> None:
        if self.tech_items:
            return  # keep the user's selections
        profiles = self.catalog.all_tech_profiles()
        self.detected_tech = detect(self.directory, profiles)
        detected = set(self.detected_tech)
        self.tech_items = [
            _Choice(name=name, selected=name in detected, recommended=name in detected)
            for name in profiles
        ]

    def _refresh(self, items: list[_Choice], recommended: set[str]) -> None:
        for choice in items:
            choice.recommended = choice.name in recommended

    def _init_plugin_items(self, selected_tech: Iterable[str] | None) -> None:
        recs, _ = recommended_items(selected_tech, self.catalog.all_tech_profiles())
        rec_set = set(recs)
        if self.plugin_items:
            self._refresh(self.plugin_items, rec_set)
            return
        self.plugin_items = [
            _Choice(
                name=p.name,
                description=p.description,
                source=p.marketplace,
                selected=p.name in rec_set,
                recommended=p.name in rec_set,
            )
            for p in self.catalog.all_plugins()
        ]

    def _init_skill_items(self, selected_tech: Iterable[str] | None) -> None:
        _, recs = recommended_items(selected_tech, self.catalog.all_tech_profiles())
        rec_set = set(recs)
        if self.skill_items:
            self._refresh(self.skill_items, rec_set)
            return
        self.skill_items = [
            _Choice(
                name=s.name,
                description=s.description,
                source=s.source,
                selected=s.name in rec_set,
                recommended=s.name in rec_set,
            )
            for s in self.catalog.all_skills()
        ]

    def _build_result_manifest(self) -> None:
        result = Manifest(version=1, plugins=[], skills=[])
        for choice in self.plugin_items:
            if not choice.selected:
                continue
            cp = self.catalog.find_plugin(choice.name)
            if cp is not None:
                result.plugins.append(
                    ManifestPlugin(
                        name=cp.name,
                        marketplace=cp.marketplace,
                        tags=list(cp.tags),
                        destination=self.destination,
                    )
                )
        for choice in self.skill_items:
            if not choice.selected:
                continue
            cs = self.catalog.find_skill(choice.name)
            if cs is not None:
                result.skills.append(
                    ManifestSkill(
                        name=cs.name,
                        source=cs.source,
                        tags=list(cs.tags),
                        destination=self.destination,
                    )
                )
        self.result_manifest = result

    def _filtered_indices(self, items: list[_Choice]) -> list[int]:
        if not self.filter:
            return list(range(len(items)))
        needle = self.filter.lower()
        return [
            i
            for i, c in enumerate(items)
            if needle in c.name.lower()
            or needle in c.source.lower()
            or needle in c.description.lower()
        ]


def tildefy(path: str | os.PathLike[str]) -> str:
    """Replace a leading home directory with ~ for display."""
    text = os.fspath(path)
    try:
        home = str(Path.home())
    except (RuntimeError, KeyError):
        return text
    if text.startswith(home):
        return "~" + text[len(home):]
    return text


_SEQUENCE_NAMES = {
    "KEY_UP": "up",
    "KEY_DOWN": "down",
    "KEY_LEFT": "left",
    "KEY_RIGHT": "right",
    "KEY_ENTER": "enter",
    "KEY_ESCAPE": "esc",
    "KEY_BACKSPACE": "backspace",
    "KEY_DELETE": "backspace",
}

_CHAR_NAMES = {
    "\r": "enter",
    "\n": "enter",
    "\x1b": "esc",
    "\x7f": "backspace",
    "\x08": "backspace",
    "\x03": "ctrl+c",
}


def _key_name(key) -> str:
    if key.is_sequence:
        name = _SEQUENCE_NAMES.get(key.name or "")
        if name is not None:
            return name
    text = str(key)
    return _CHAR_NAMES.get(text, text)


def run_wizard(model: SetupModel) -> SetupModel:
    """Run the wizard full screen in the terminal until it exits; return the model."""
    from blessed import Terminal

    term = Terminal()
    with term.fullscreen(), term.cbreak(), term.hidden_cursor():
        while True:
            print(term.home + term.clear + model.view(), end="", flush=True)
            try:
                key = term.inkey()
            except KeyboardInterrupt:
                model.update("ctrl+c")
                break
            if not key:
                continue
            if model.update(_key_name(key)):
                break
    return model