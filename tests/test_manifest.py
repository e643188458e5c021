import json

import pytest

from armyv2 import manifest as mf
from armyv2.types import Manifest, ManifestPlugin, ManifestSkill


def test_load_missing_file(tmp_path):
    m = mf.load(tmp_path / "nonexistent.json")
    assert m.version == 1
    assert m.plugins == []
    assert m.skills == []


def test_load_invalid_json(tmp_path):
    path = tmp_path / "bad.json"
    path.write_text("not json")
    with pytest.raises(mf.ManifestError):
        mf.load(path)


def test_load_wrong_shape(tmp_path):
    path = tmp_path / "bad.json"
    path.write_text("[1, 2]")
    with pytest.raises(mf.ManifestError):
        mf.load(path)


def test_load_directory_fails(tmp_path):
    with pytest.raises(mf.ManifestError):
        mf.load(tmp_path)


def test_save_and_load_round_trip(tmp_path):
    path = tmp_path / "sub" / "manifest.json"
    original = Manifest(
        version=1,
        plugins=[ManifestPlugin("my-plugin", "mkt", ["a"], "user")],
        skills=[ManifestSkill("my-skill", "src/repo", ["b"], "project")],
    )
    mf.save(path, original)
    loaded = mf.load(path)
    assert loaded == original
    assert loaded.skills[0].destination == "project"


def test_save_creates_parent_dir(tmp_path):
    path = tmp_path / "a" / "b" / "manifest.json"
    mf.save(path, mf.empty_manifest())
    assert path.is_file()


def test_save_atomic_write(tmp_path):
    path = tmp_path / "manifest.json"
    mf.save(path, mf.empty_manifest())
    data = path.read_text()
    assert data.endswith("\n")
    assert json.loads(data)["version"] == 1
    assert [p.name for p in tmp_path.iterdir()] == ["manifest.json"]


def test_load_zero_version_defaults_to_one(tmp_path):
    path = tmp_path / "manifest.json"
    path.write_text('{"version":0,"plugins":[],"skills":[]}')
    assert mf.load(path).version == 1


def test_add_plugin():
    m = mf.empty_manifest()
    assert mf.add_plugin(m, ManifestPlugin("test-plugin", "mkt"))
    assert len(m.plugins) == 1
    assert not mf.add_plugin(m, ManifestPlugin("Test-Plugin", "other"))
    assert len(m.plugins) == 1


def test_remove_plugin():
    m = mf.empty_manifest()
    mf.add_plugin(m, ManifestPlugin("keep-me"))
    mf.add_plugin(m, ManifestPlugin("remove-me"))
    assert mf.remove_plugin(m, "Remove-Me")
    assert [p.name for p in m.plugins] == ["keep-me"]
    assert not mf.remove_plugin(m, "nonexistent")


def test_add_skill():
    m = mf.empty_manifest()
    assert mf.add_skill(m, ManifestSkill("test-skill", "src"))
    assert len(m.skills) == 1
    assert not mf.add_skill(m, ManifestSkill("TEST-SKILL", "other"))
    assert len(m.skills) == 1


def test_remove_skill():
    m = mf.empty_manifest()
    mf.add_skill(m, ManifestSkill("keep"))
    mf.add_skill(m, ManifestSkill("drop"))
    assert mf.remove_skill(m, "DROP")
    assert [s.name for s in m.skills] == ["keep"]
    assert not mf.remove_skill(m, "nope")


@pytest.mark.parametrize(
    "name, want", [("exists", True), ("EXISTS", True), ("Exists", True), ("nope", False)]
)
def test_has_plugin(name, want):
    m = mf.empty_manifest()
    mf.add_plugin(m, ManifestPlugin("exists"))
    assert mf.has_plugin(m, name) is want


@pytest.mark.parametrize("name, want", [("present", True), ("PRESENT", True), ("absent", False)])
def test_has_skill(name, want):
    m = mf.empty_manifest()
    mf.add_skill(m, ManifestSkill("present"))
    assert mf.has_skill(m, name) is want


def test_default_path_under_home(monkeypatch, tmp_path):
    monkeypatch.setenv("HOME", str(tmp_path))
    monkeypatch.setenv("USERPROFILE", str(tmp_path))
    assert mf.default_path() == tmp_path / ".armyv2" / "manifest.json"