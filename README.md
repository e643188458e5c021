# armyv2

A manifest-driven manager for Claude Code plugins and skills.

You describe the plugins and skills you want in a manifest
(`~/.armyv2/manifest.json` by default). `armyv2` compares that manifest with
what is installed on the machine, installs what is missing, removes what is
extra, and reports drift between the state files and the disk.

Plugins are installed and removed with `claude plugin install NAME` and
`claude plugin remove NAME`. Skills are installed with
`npx @anthropic-ai/claude-code-skills add NAME -s SOURCE -y`, and removed
directly from disk: the directory `~/.agents/skills/NAME`, the link
`~/.claude/skills/NAME`, and the entry in `~/.agents/.skill-lock.json`.
Both `claude` and `npx` must be on your `PATH` for real installs.

## Installation

```
pip install armyv2
```

With the test dependencies:

```
pip install "armyv2[test]"
```

## Getting a catalog

The catalog lists the plugins, skills and tech profiles you can choose from.
No catalog data is included in the package: until you fetch one, the catalog
is empty. Fetch it from a URL you pass with `--url` or set in the
`ARMYV2_CATALOG_URL` environment variable:

```
armyv2 update --url https://catalog.example.com/catalog.json
```

The download is checked (a `version` of at least 1, every plugin with a name
and marketplace, every skill with a name and source) and written to
`~/.armyv2/catalog.json`.

If a `catalog.json` file sits next to the package's modules, it is used as the
base catalog. The downloaded catalog is preferred when its version is at least
the base one: its plugin and skill lists replace the base lists, and its tech
profiles are merged over the base profiles key by key.

## Getting started

Run the interactive wizard to pick plugins and skills from the catalog:

```
armyv2 setup
```

The wizard is a full-screen terminal screen. It asks whether you are
configuring user-level defaults or the current project. For a project it scans
the current directory for the markers of each tech profile (file names or
globs, `package.json` dependencies, `composer.json` requirements, or text in a
file) and pre-selects the recommended plugins and skills, marked with `★`.

Keys: `↑`/`↓` (or `k`/`j`) move, space toggles, `a` selects all, `n` selects
none, `/` filters, `←` goes back, `→`/Enter moves on, `q` or Ctrl-C quits. On
the summary page, `y` or Enter confirms, `n` goes back and `d` edits the path
the manifest is saved to.

When you confirm, the manifest is written and you can apply it:

```
armyv2 sync
```

`sync` shows the planned actions and asks `Proceed? [Y/n/d(estination)]`.
Answer `d` to change the destination (`user` or `project`) of every action
before going on. Plugin actions run in parallel, skill actions one after
another; a failure does not stop the rest, and the command fails at the end
if any action failed.

## Commands

| Command | What it does |
| --- | --- |
| `armyv2 setup` | Interactive wizard; saves the selection as the manifest. |
| `armyv2 sync` | Install missing items and remove extras so the machine matches the manifest. |
| `armyv2 list` | Show manifest items with install status: `✓` ok, `⚠` broken, `✗` missing. |
| `armyv2 doctor` | Health checks: missing, orphaned and on-disk drift. Exits with status 1 on errors. |
| `armyv2 update` | Fetch a catalog into `~/.armyv2/catalog.json`. |
| `armyv2 add plugin NAME` | Add a catalog plugin to the manifest and install it. |
| `armyv2 add skill NAME` | Add a catalog skill to the manifest and install it. |
| `armyv2 remove plugin NAME` | Remove a plugin from the manifest and uninstall it. |
| `armyv2 remove skill NAME` | Remove a skill from the manifest and uninstall it. |

Names are matched against the catalog and the manifest case-insensitively.

### Options

Global options, accepted before or after any command:

- `--dry-run` — print the commands that would run instead of running them
  (`sync` then also skips the confirmation prompt).
- `--manifest PATH` — use a different manifest file.
- `--verbose` — accepted for all commands.

Command options:

- `sync --yes` / `-y` — skip the confirmation prompt.
- `sync --destination user|project` — override the destination of every action.
- `update --url URL` — where to fetch the catalog from.
- `add ... --no-install` — only record the item in the manifest.
- `add ... --project` — record the item with project destination instead of user.
- `remove ... --manifest-only` — only drop the item from the manifest.

Examples:

```
armyv2 add plugin my-plugin --no-install
armyv2 sync --dry-run
armyv2 remove skill my-skill --manifest-only
```

## Files

- `~/.armyv2/manifest.json` — your manifest (written atomically).
- `~/.armyv2/catalog.json` — catalog fetched by `armyv2 update`.
- `~/.claude/plugins/installed_plugins.json` — read to find installed plugins.
- `~/.agents/.skill-lock.json` — read to find installed skills.

## Using it from Python

The pieces are plain modules: `armyv2.manifest` (`load`, `save`,
`add_plugin`, `remove_skill`, ...), `armyv2.catalog` (`CatalogService`,
`validate`, `merge_catalogs`), `armyv2.detector` (`detect`,
`recommended_items`), `armyv2.diff` (`compare`, `has_drift`),
`armyv2.doctor` (`check`), `armyv2.orchestrator` (`Orchestrator`) and
`armyv2.runner` (`RealRunner`, `DryRunner`).