"""Line-based prompting and numbered menus."""

from __future__ import annotations

import re
from typing import Protocol, Sequence, TextIO

_INT_RE = re.compile(r"[+-]?[0-9]+")


class Prompter(Protocol):
    """Something that shows a message and returns one line of input."""

    def prompt(self, msg: str) -> str:
        """Show msg and return the reply; raise EOFError when input ends."""
        ...


class StreamPrompter:
    """Prompter that writes to one text stream and reads lines from another."""

    def __init__(self, reader: TextIO, writer: TextIO) -> None:
        self._reader = reader
        self._writer = writer

    def prompt(self, msg: str) -> str:
        self._writer.write(msg)
        flush = getattr(self._writer, "flush", None)
        if flush is not None:
            flush()
        line = self._reader.readline()
        if not line:
            raise EOFError("no more input")
        if line.endswith("\n"):
            line = line[:-1]
        if line.endswith("\r"):
            line = line[:-1]
        return line


class FakePrompter:
    """Prompter that replays canned responses, recording the prompts shown."""

    def __init__(self, *args: str) -> None:
        self.responses = list(args)
        self.prompts: list[str] = []
        self._next = iter(self.responses)

    def prompt(self, msg: str) -> str:
        self.prompts.append(msg)
        try:
            return next(self._next)
        except StopIteration:
            raise EOFError("no more responses") from None


def _parse_int(raw: str) -> int | None:
    text = raw.strip()
    if _INT_RE.fullmatch(text) is None:
        return None
    return int(text)


def _parse_multi_choice(raw: str, max_val: int) -> list[int] | None:
    result = []
    for part in raw.split(","):
        n = _parse_int(part)
        if n is None or not 1 <= n <= max_val:
            return None
        result.append(n)
    return result or None


def _print_menu(out: TextIO, items: Sequence[str], default: str | None = None) -> None:
    print(file=out)
    for number, entry in enumerate(items, start=1):
        marker = " (*)" if default is not None and entry == default else ""
        print(f"  {number}) {entry}{marker}", file=out)
    print(file=out)


def select_one(prompter: Prompter, out: TextIO, prompt: str, items: Sequence[str]) -> str:
    """Show a numbered menu and return the chosen item."""
    _print_menu(out, items)
    while True:
        choice = _parse_int(prompter.prompt(prompt + " "))
        if choice is not None and 1 <= choice <= len(items):
            return items[choice - 1]
        print(f"Invalid choice. Enter a number between 1 and {len(items)}.", file=out)


def select_multi(prompter: Prompter, out: TextIO, prompt: str, items: Sequence[str]) -> list[str]:
    """Show a numbered menu and return the items picked by comma-separated numbers."""
    _print_menu(out, items)
    while True:
        raw = prompter.prompt(prompt + " (comma-separated, e.g. 1,3,5): ")
        selected = _parse_multi_choice(raw, len(items))
        if selected:
            return [items[n - 1] for n in selected]


def prompt_with_default(prompter: Prompter, prompt: str, default: str) -> str:
    """Ask for text; an empty reply gives the default."""
    reply = prompter.prompt(f"{prompt} [{default}]: ").strip()
    return reply or default


def select_one_with_default(
    prompter: Prompter, out: TextIO, prompt: str, items: Sequence[str], default: str
) -> str:
    """Show a numbered menu with the default marked (*); Enter picks the default."""
    _print_menu(out, items, default)
    while True:
        raw = prompter.prompt(prompt + " ")
        if not raw.strip():
            return default
        choice = _parse_int(raw)
        if choice is not None and 1 <= choice <= len(items):
            return items[choice - 1]
        print(
            f"Invalid choice. Enter a number between 1 and {len(items)}, or press Enter for default.",
            file=out,
        )


def select_multi_optional(
    prompter: Prompter, out: TextIO, prompt: str, items: Sequence[str]
) -> list[str] | None:
    """Like select_multi, but an empty reply returns None."""
    _print_menu(out, items)
    while True:
        raw = prompter.prompt(prompt + " (comma-separated, or Enter to skip): ")
        if not raw.strip():
            return None
        selected = _parse_multi_choice(raw, len(items))
        if selected:
            return [items[n - 1] for n in selected]