"""Command-line entry point: argument parsing, sync, update and setup."""

from __future__ import annotations

import argparse
import dataclasses
import json
import os
import sys
import urllib.error
import urllib.request
from pathlib import Path
from typing import Iterable, Sequence, TextIO

from . import manifest as manifest_store
from .catalog import CatalogError, parse_catalog, validate
from .commands import (
    CommandFailed,
    GlobalOptions,
    cmd_add_plugin,
    cmd_add_skill,
    cmd_doctor,
    cmd_list,
    cmd_remove_plugin,
    cmd_remove_skill,
    resolve_deps,
)
from .manifest import ManifestError
from .system import SystemError_
from .types import Action

CATALOG_URL_ENV = "ARMYV2_CATALOG_URL"
DESTINATIONS = ("user", "project")


def _q(text: str) -> str:
    return json.dumps(text, ensure_ascii=False)


def apply_destination(actions: Iterable[Action], destination: str) -> list[Action]:
    """The actions with their destination set to destination."""
    return [dataclasses.replace(a, destination=destination) for a in actions]


def format_plan(actions: Sequence[Action], destination_override: str = "") -> str:
    """Human-readable listing of the planned actions."""
    lines = []
    if destination_override:
        lines.append(f"Destination override: {destination_override}\n\n")
    lines.append(f"Planned {len(actions)} action(s):\n")
    for a in actions:
        lines.append(f"  {a.kind} {a.item_type} {a.name} ({a.destination})\n")
    lines.append("\n")
    return "".join(lines)


def _prompt_destination(tty: TextIO, current: str) -> str:
    hint = f"current: {current}" if current else "user/project"
    print(f"  Destination [{hint}]: ", end="", flush=True)
    line = tty.readline()
    if not line:
        return ""
    value = line.strip()
    if value not in DESTINATIONS:
        print('  Invalid destination. Must be "user" or "project".')
        return ""
    return value


def cmd_sync(options: GlobalOptions, destination: str = "", yes: bool = False) -> None:
    """Install what the manifest lists but is missing, and remove extras."""
    destination = destination or ""
    if destination and destination not in DESTINATIONS:
        raise CommandFailed(
            f'invalid --destination {_q(destination)}: must be "user" or "project"'
        )

    deps = resolve_deps(options)
    try:
        actions = deps.orchestrator.plan_actions(deps.manifest)
    except SystemError_ as exc:
        raise CommandFailed(f"planning actions: {exc}") from exc

    if not actions:
        print("Everything is in sync.")
        return

    if destination:
        actions = apply_destination(actions, destination)
    print(format_plan(actions, destination), end="")

    if not options.dry_run and not yes:
        try:
            tty = open("/dev/tty", encoding="utf-8")
        except OSError as exc:
            raise CommandFailed(
                f"cannot open terminal for confirmation (use --yes to skip): {exc}"
            ) from exc
        with tty:
            while True:
                print("Proceed? [Y/n/d(estination)] ", end="", flush=True)
                line = tty.readline()
                if not line:
                    print("\nSync cancelled.")
                    return
                answer = line.strip().lower()
                if answer in ("", "y"):
                    print()
                    break
                if answer == "n":
                    print("Sync cancelled.")
                    return
                if answer == "d":
                    chosen = _prompt_destination(tty, destination)
                    if chosen:
                        destination = chosen
                        actions = apply_destination(actions, destination)
                    print()
                    print(format_plan(actions, destination), end="")
                else:
                    print("Invalid option. Use Y, n, or d.")

    result = deps.orchestrator.execute(actions)
    print(f"\nDone: {result.succeeded} succeeded, {result.failed} failed")
    if result.failed:
        raise CommandFailed(f"{result.failed} action(s) failed")


def validate_fetched_catalog(data: bytes | str) -> None:
    """Check a downloaded catalog: a version, and complete plugin and skill entries."""
    try:
        catalog = parse_catalog(data)
    except CatalogError as exc:
        raise CatalogError(f"invalid JSON: {exc}") from exc

    if catalog.version < 1:
        raise CatalogError("version field missing or invalid")
    for index, plugin in enumerate(catalog.plugins):
        if not plugin.name:
            raise CatalogError(f"plugin at index {index} missing name")
        if not plugin.marketplace:
            raise CatalogError(f"plugin {_q(plugin.name)} missing marketplace")
    for index, skill in enumerate(catalog.skills):
        if not skill.name:
            raise CatalogError(f"skill at index {index} missing name")
        if not skill.source:
            raise CatalogError(f"skill {_q(skill.name)} missing source")


def _fetch(url: str) -> bytes:
    try:
        with urllib.request.urlopen(url) as response:
            status = getattr(response, "status", None)
            if status is not None and status != 200:
                raise CommandFailed(f"unexpected status {status} fetching catalog")
            try:
                return response.read()
            except OSError as exc:
                raise CommandFailed(f"reading response: {exc}") from exc
    except urllib.error.HTTPError as exc:
        raise CommandFailed(f"unexpected status {exc.code} fetching catalog") from exc
    except (urllib.error.URLError, OSError, ValueError) as exc:
        raise CommandFailed(f"fetching catalog: {exc}") from exc


def cmd_update(options: GlobalOptions, url: str | None = None) -> None:
    """Download the latest catalog into ~/.armyv2/catalog.json."""
    url = url or os.environ.get(CATALOG_URL_ENV, "")
    if not url:
        raise CommandFailed(
            f"no catalog URL given: pass --url or set {CATALOG_URL_ENV}"
        )

    print("Fetching latest catalog...")
    data = _fetch(url)

    try:
        validate_fetched_catalog(data)
    except CatalogError as exc:
        raise CommandFailed(f"invalid catalog: {exc}") from exc
    try:
        validate(data)
    except CatalogError as exc:
        raise CommandFailed(f"catalog validation failed: {exc}") from exc

    try:
        home = Path.home()
    except (RuntimeError, KeyError) as exc:
        raise CommandFailed(f"getting home dir: {exc}") from exc

    directory = home / ".armyv2"
    try:
        directory.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise CommandFailed(f"creating directory: {exc}") from exc

    path = directory / "catalog.json"
    try:
        path.write_bytes(data)
    except OSError as exc:
        raise CommandFailed(f"writing catalog: {exc}") from exc
    print(f"Catalog updated: {path}")


def cmd_setup(options: GlobalOptions) -> None:
    """Run the interactive wizard and save the resulting manifest."""
    from .setup_wizard import SetupModel, run_wizard

    deps = resolve_deps(options)
    model = SetupModel(deps.catalog, deps.manifest, deps.manifest_path)
    try:
        final = run_wizard(model)
    except (OSError, RuntimeError) as exc:
        raise CommandFailed(f"TUI error: {exc}") from exc

    if final.completed and final.result_manifest is not None:
        path = final.manifest_path
        try:
            manifest_store.save(path, final.result_manifest)
        except (ManifestError, OSError) as exc:
            raise CommandFailed(f"saving manifest: {exc}") from exc
        print("Manifest saved to", path)
        print("Run 'armyv2 sync' to install your selections.")


def _global_options(args: argparse.Namespace) -> GlobalOptions:
    return GlobalOptions(
        dry_run=getattr(args, "dry_run", False),
        manifest_path=getattr(args, "manifest", None) or None,
        verbose=getattr(args, "verbose", False),
    )


def _help_handler(parser: argparse.ArgumentParser):
    def show(args, options):
        parser.print_help()
        return 0

    return show


def build_parser() -> argparse.ArgumentParser:
    """The argument parser for every command."""
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--dry-run", action="store_true", default=argparse.SUPPRESS,
                        help="Print commands without executing")
    common.add_argument("--manifest", metavar="PATH", default=argparse.SUPPRESS,
                        help="Override manifest path (default: ~/.armyv2/manifest.json)")
    common.add_argument("--verbose", action="store_true", default=argparse.SUPPRESS,
                        help="Verbose output")

    parser = argparse.ArgumentParser(
        prog="armyv2",
        description="Interactive setup and lifecycle management for Claude Code plugins and skills.",
        parents=[common],
    )
    parser.set_defaults(handler=_help_handler(parser))
    sub = parser.add_subparsers(dest="command", metavar="COMMAND")

    setup = sub.add_parser("setup", parents=[common],
                           help="Interactive setup wizard for Claude Code plugins and skills")
    setup.set_defaults(handler=lambda a, o: cmd_setup(o))

    sync = sub.add_parser("sync", parents=[common],
                          help="Apply manifest to machine — install missing, remove extras")
    sync.add_argument("--destination", default="",
                      help='Override destination for all actions ("user" or "project")')
    sync.add_argument("-y", "--yes", action="store_true", help="Skip confirmation prompt")
    sync.set_defaults(handler=lambda a, o: cmd_sync(o, a.destination, a.yes))

    add = sub.add_parser("add", parents=[common], help="Add a plugin or skill to the manifest")
    add.set_defaults(handler=_help_handler(add))
    add_kinds = add.add_subparsers(dest="kind", metavar="KIND")
    for kind, handler in (("plugin", cmd_add_plugin), ("skill", cmd_add_skill)):
        p = add_kinds.add_parser(kind, parents=[common],
                                 help=f"Add a {kind} to the manifest and install it")
        p.add_argument("name")
        p.add_argument("--no-install", action="store_true",
                       help="Add to manifest without installing")
        p.add_argument("--project", action="store_true",
                       help="Set destination to project scope")
        p.set_defaults(handler=lambda a, o, h=handler: h(o, a.name, a.no_install, a.project))

    remove = sub.add_parser("remove", parents=[common],
                            help="Remove a plugin or skill from the manifest")
    remove.set_defaults(handler=_help_handler(remove))
    remove_kinds = remove.add_subparsers(dest="kind", metavar="KIND")
    for kind, handler in (("plugin", cmd_remove_plugin), ("skill", cmd_remove_skill)):
        p = remove_kinds.add_parser(kind, parents=[common],
                                    help=f"Remove a {kind} from the manifest and uninstall it")
        p.add_argument("name")
        p.add_argument("--manifest-only", action="store_true",
                       help="Remove from manifest without uninstalling")
        p.set_defaults(handler=lambda a, o, h=handler: h(o, a.name, a.manifest_only))

    listing = sub.add_parser("list", parents=[common],
                             help="Show manifest contents with install status")
    listing.set_defaults(handler=lambda a, o: cmd_list(o))

    update = sub.add_parser("update", parents=[common], help="Fetch the latest catalog")
    update.add_argument("--url", default=None,
                        help=f"Catalog URL (default: ${CATALOG_URL_ENV})")
    update.set_defaults(handler=lambda a, o: cmd_update(o, a.url))

    doctor = sub.add_parser("doctor", parents=[common],
                            help="Run health checks on plugins and skills")
    doctor.set_defaults(handler=lambda a, o: cmd_doctor(o))

    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Run the command line; return the exit status."""
    parser = build_parser()
    args = parser.parse_args(argv)
    options = _global_options(args)
    try:
        status = args.handler(args, options)
    except CommandFailed as exc:
        print(exc, file=sys.stderr)
        return 1
    return status or 0


if __name__ == "__main__":
    sys.exit(main())