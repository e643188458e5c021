"""Execution of external commands, for real or as a dry run."""

from __future__ import annotations

import subprocess
import sys
from typing import Protocol, TextIO


class CommandError(Exception):
    """Raised when a command cannot be started or exits with a failure status."""

    def __init__(self, message: str, output: str = "") -> None:
        super().__init__(message)
        self.output = output


class Runner(Protocol):
    """Something that runs a command and returns its standard output."""

    def run(self, cmd: str, *args: str) -> str:
        """Run cmd with args; raise CommandError on failure."""
        ...


class RealRunner:
    """Runs commands, echoing their output as it arrives while capturing it.

    Standard error goes straight to this process's standard error, and the
    command gets no standard input so that it cannot wait on a prompt.
    """

    def __init__(self, out: TextIO | None = None) -> None:
        self._out = out

    def run(self, cmd: str, *args: str) -> str:
        out = self._out if self._out is not None else sys.stdout
        try:
            proc = subprocess.Popen(
                [cmd, *args],
                stdin=subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                stderr=None,
                text=True,
                errors="replace",
            )
        except OSError as exc:
            raise CommandError(f"running {cmd}: {exc}") from exc

        captured: list[str] = []
        with proc:
            assert proc.stdout is not None
            for line in proc.stdout:
                out.write(line)
                out.flush()
                captured.append(line)

        output = "".join(captured)
        if proc.returncode != 0:
            raise CommandError(
                f"running {cmd}: exit status {proc.returncode}", output=output
            )
        return output


class DryRunner:
    """Prints the commands that would run, without running them."""

    def __init__(self, out: TextIO | None = None) -> None:
        self._out = out

    def run(self, cmd: str, *args: str) -> str:
        out = self._out if self._out is not None else sys.stdout
        print("[dry-run] " + " ".join([cmd, *args]), file=out)
        return ""