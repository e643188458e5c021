import json

import pytest

from armyv2 import manifest as store
from armyv2.catalog import CatalogError
from armyv2.cli import (
    CATALOG_URL_ENV,
    apply_destination,
    build_parser,
    cmd_sync,
    cmd_update,
    format_plan,
    main,
    validate_fetched_catalog,
)
from armyv2.commands import CommandFailed, GlobalOptions
from armyv2.types import Action


@pytest.fixture
def home(tmp_path, monkeypatch):
    h = tmp_path / "home"
    h.mkdir()
    monkeypatch.setenv("HOME", str(h))
    monkeypatch.setenv("USERPROFILE", str(h))
    monkeypatch.delenv(CATALOG_URL_ENV, raising=False)
    return h


@pytest.fixture
def manifest_path(tmp_path):
    return tmp_path / "conf" / "manifest.json"


def _catalog_file(tmp_path, doc):
    path = tmp_path / "remote-catalog.json"
    path.write_text(json.dumps(doc), encoding="utf-8")
    return path


GOOD_CATALOG = {
    "version": 1000,
    "updated_at": "2026-01-01",
    "plugins": [{"name": "alpha", "marketplace": "mkt", "description": "A", "tags": ["t"]}],
    "skills": [{"name": "beta", "source": "src/repo", "description": "B", "tags": []}],
    "tech_profiles": {},
}


def _write_manifest(path, plugins=(), skills=()):
    path.parent.mkdir(parents=True, exist_ok=True)
    doc = {"version": 1, "plugins": list(plugins), "skills": list(skills)}
    path.write_text(json.dumps(doc), encoding="utf-8")


def test_apply_destination_sets_every_action():
    actions = [
        Action("install", "plugin", "alpha", "mkt", "user"),
        Action("remove", "skill", "beta", "src", ""),
    ]
    changed = apply_destination(actions, "project")
    assert [a.destination for a in changed] == ["project", "project"]
    assert [a.name for a in changed] == ["alpha", "beta"]


def test_format_plan_without_override():
    actions = [Action("install", "plugin", "alpha", "mkt", "user")]
    text = format_plan(actions, "")
    assert text == "Planned 1 action(s):\n  install plugin alpha (user)\n\n"


def test_format_plan_with_override():
    actions = [Action("remove", "skill", "beta", "src", "project")]
    text = format_plan(actions, "project")
    assert text.startswith("Destination override: project\n\n")
    assert "  remove skill beta (project)\n" in text


def test_validate_fetched_catalog_accepts_complete_catalog():
    validate_fetched_catalog(json.dumps(GOOD_CATALOG))
    assert GOOD_CATALOG["version"] == 1000


@pytest.mark.parametrize(
    "doc, message",
    [
        ({"version": 0}, "version field missing or invalid"),
        ({"version": 1, "plugins": [{"name": "", "marketplace": "m"}]}, "plugin at index 0 missing name"),
        ({"version": 1, "plugins": [{"name": "x"}]}, 'plugin "x" missing marketplace'),
        ({"version": 1, "skills": [{"name": "", "source": "s"}]}, "skill at index 0 missing name"),
        ({"version": 1, "skills": [{"name": "y"}]}, 'skill "y" missing source'),
    ],
)
def test_validate_fetched_catalog_errors(doc, message):
    with pytest.raises(CatalogError) as info:
        validate_fetched_catalog(json.dumps(doc))
    assert message in str(info.value)


def test_validate_fetched_catalog_rejects_bad_json():
    with pytest.raises(CatalogError):
        validate_fetched_catalog("{bad")


def test_sync_rejects_invalid_destination(home, manifest_path):
    options = GlobalOptions(manifest_path=str(manifest_path))
    with pytest.raises(CommandFailed) as info:
        cmd_sync(options, "bogus", True)
    assert "invalid --destination" in str(info.value)


def test_main_returns_one_on_invalid_destination(home, manifest_path, capsys):
    code = main(["--manifest", str(manifest_path), "sync", "--destination", "bogus"])
    assert code == 1
    assert "invalid --destination" in capsys.readouterr().err


def test_sync_everything_in_sync(home, manifest_path, capsys):
    cmd_sync(GlobalOptions(manifest_path=str(manifest_path)), "", True)
    assert "Everything is in sync." in capsys.readouterr().out


def test_sync_dry_run_installs_missing_plugin(home, manifest_path, capsys):
    _write_manifest(
        manifest_path,
        plugins=[{"name": "alpha", "marketplace": "mkt", "tags": [], "destination": "user"}],
    )
    code = main(["--dry-run", "--manifest", str(manifest_path), "sync", "--destination", "project"])
    out = capsys.readouterr().out
    assert code == 0
    assert "Destination override: project" in out
    assert "install plugin alpha (project)" in out
    assert "[dry-run] claude plugin install alpha" in out
    assert "Done: 1 succeeded, 0 failed" in out


def test_update_without_url_fails(home):
    with pytest.raises(CommandFailed) as info:
        cmd_update(GlobalOptions(), None)
    assert CATALOG_URL_ENV in str(info.value)


def test_update_writes_catalog(home, tmp_path, capsys):
    remote = _catalog_file(tmp_path, GOOD_CATALOG)
    cmd_update(GlobalOptions(), remote.as_uri())
    written = home / ".armyv2" / "catalog.json"
    assert written.read_bytes() == remote.read_bytes()
    assert "Catalog updated:" in capsys.readouterr().out


def test_update_reads_url_from_environment(home, tmp_path, monkeypatch):
    remote = _catalog_file(tmp_path, GOOD_CATALOG)
    monkeypatch.setenv(CATALOG_URL_ENV, remote.as_uri())
    assert main(["update"]) == 0
    assert (home / ".armyv2" / "catalog.json").exists()


def test_update_rejects_invalid_catalog(home, tmp_path, capsys):
    remote = _catalog_file(tmp_path, {"version": 1, "plugins": [{"name": "x"}]})
    code = main(["update", "--url", remote.as_uri()])
    assert code == 1
    assert "invalid catalog" in capsys.readouterr().err
    assert not (home / ".armyv2" / "catalog.json").exists()


def test_update_missing_file_fails(home, tmp_path):
    missing = tmp_path / "nowhere.json"
    with pytest.raises(CommandFailed) as info:
        cmd_update(GlobalOptions(), missing.as_uri())
    assert "fetching catalog" in str(info.value)


def test_add_list_remove_round_trip(home, tmp_path, manifest_path, capsys):
    remote = _catalog_file(tmp_path, GOOD_CATALOG)
    assert main(["update", "--url", remote.as_uri()]) == 0

    assert main(["--manifest", str(manifest_path), "add", "plugin", "ALPHA", "--no-install"]) == 0
    assert main(["add", "skill", "beta", "--no-install", "--project", "--manifest", str(manifest_path)]) == 0
    loaded = store.load(str(manifest_path))
    assert [p.name for p in loaded.plugins] == ["alpha"]
    assert [(s.name, s.destination) for s in loaded.skills] == [("beta", "project")]

    capsys.readouterr()
    assert main(["list", "--manifest", str(manifest_path)]) == 0
    out = capsys.readouterr().out
    assert "alpha (mkt, user)" in out
    assert "beta (src/repo, project)" in out

    assert main(["--manifest", str(manifest_path), "remove", "plugin", "alpha", "--manifest-only"]) == 0
    assert store.load(str(manifest_path)).plugins == []


def test_add_unknown_plugin_fails(home, manifest_path, capsys):
    code = main(["--manifest", str(manifest_path), "add", "plugin", "no-such-plugin-xyz"])
    assert code == 1
    assert "not found in catalog" in capsys.readouterr().err


def test_doctor_with_nothing_reports_no_issues(home, manifest_path, capsys):
    assert main(["--manifest", str(manifest_path), "doctor"]) == 0
    assert "No issues found." in capsys.readouterr().out


def test_doctor_missing_plugin_exits_one(home, manifest_path, capsys):
    _write_manifest(
        manifest_path,
        plugins=[{"name": "alpha", "marketplace": "mkt", "tags": [], "destination": "user"}],
    )
    assert main(["--manifest", str(manifest_path), "doctor"]) == 1
    assert "1 error(s), 0 warning(s)" in capsys.readouterr().out


def test_parser_global_flags_before_and_after_command():
    parser = build_parser()
    before = parser.parse_args(["--dry-run", "--manifest", "m.json", "sync", "-y"])
    after = parser.parse_args(["sync", "--yes", "--dry-run", "--manifest", "m.json"])
    for args in (before, after):
        assert args.dry_run is True
        assert args.manifest == "m.json"
        assert args.yes is True


def test_parser_rejects_unknown_command():
    with pytest.raises(SystemExit) as info:
        build_parser().parse_args(["frobnicate"])
    assert info.value.code == 2