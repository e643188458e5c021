import pytest

from armyv2.diff import compare, has_drift
from armyv2.types import (
    DiffResult,
    InstalledPlugin,
    InstalledSkill,
    Manifest,
    ManifestPlugin,
    ManifestSkill,
)


def test_compare_no_drift():
    manifest = Manifest(
        plugins=[ManifestPlugin("p1"), ManifestPlugin("p2")],
        skills=[ManifestSkill("s1")],
    )
    result = compare(manifest, [InstalledPlugin("p1"), InstalledPlugin("p2")], [InstalledSkill("s1")])
    assert not has_drift(result)
    assert result.missing_plugins == []
    assert result.extra_plugins == []
    assert result.missing_skills == []
    assert result.extra_skills == []


def test_compare_missing_plugins():
    manifest = Manifest(plugins=[ManifestPlugin("p1"), ManifestPlugin("p2")])
    result = compare(manifest, [InstalledPlugin("p1")], None)
    assert has_drift(result)
    assert [p.name for p in result.missing_plugins] == ["p2"]


def test_compare_extra_plugins():
    manifest = Manifest(plugins=[ManifestPlugin("p1")])
    result = compare(manifest, [InstalledPlugin("p1"), InstalledPlugin("extra")], None)
    assert has_drift(result)
    assert [p.name for p in result.extra_plugins] == ["extra"]


def test_compare_missing_skills():
    manifest = Manifest(skills=[ManifestSkill("s1"), ManifestSkill("s2")])
    result = compare(manifest, None, [InstalledSkill("s1")])
    assert [s.name for s in result.missing_skills] == ["s2"]


def test_compare_extra_skills():
    result = compare(Manifest(), None, [InstalledSkill("orphan")])
    assert [s.name for s in result.extra_skills] == ["orphan"]


def test_compare_mixed_drift():
    manifest = Manifest(
        plugins=[ManifestPlugin("wanted-p"), ManifestPlugin("missing-p")],
        skills=[ManifestSkill("wanted-s"), ManifestSkill("missing-s")],
    )
    plugins = [InstalledPlugin("wanted-p"), InstalledPlugin("extra-p")]
    skills = [InstalledSkill("wanted-s"), InstalledSkill("extra-s")]
    result = compare(manifest, plugins, skills)
    assert has_drift(result)
    assert len(result.missing_plugins) == 1
    assert len(result.extra_plugins) == 1
    assert len(result.missing_skills) == 1
    assert len(result.extra_skills) == 1


def test_compare_empty_manifest_and_installed():
    assert not has_drift(compare(Manifest(), None, None))


@pytest.mark.parametrize(
    "diff, want",
    [
        (DiffResult(), False),
        (DiffResult(missing_plugins=[ManifestPlugin("p")]), True),
        (DiffResult(extra_plugins=[InstalledPlugin("p")]), True),
        (DiffResult(missing_skills=[ManifestSkill("s")]), True),
        (DiffResult(extra_skills=[InstalledSkill("s")]), True),
    ],
)
def test_has_drift(diff, want):
    assert has_drift(diff) is want