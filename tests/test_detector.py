import json

from armyv2.detector import detect, recommended_items
from armyv2.types import TechProfile


def test_detect_file_existence(tmp_path):
    (tmp_path / "go.mod").write_text("module test")
    profiles = {
        "go": TechProfile(detect=["go.mod"]),
        "python": TechProfile(detect=["requirements.txt"]),
    }
    assert detect(tmp_path, profiles) == ["go"]


def test_detect_glob_pattern(tmp_path):
    (tmp_path / "main.tsx").write_text("")
    assert detect(tmp_path, {"react": TechProfile(detect=["*.tsx"])}) == ["react"]


def test_detect_content_match(tmp_path):
    (tmp_path / "config.txt").write_text("some content with marker here")
    assert detect(tmp_path, {"custom": TechProfile(detect=["config.txt:marker"])}) == ["custom"]


def test_detect_content_no_match(tmp_path):
    (tmp_path / "config.txt").write_text("no match here")
    assert detect(tmp_path, {"custom": TechProfile(detect=["config.txt:marker"])}) == []


def test_detect_package_json_dependency(tmp_path):
    pkg = {"name": "test", "dependencies": {"react": "^18.0.0"}}
    (tmp_path / "package.json").write_text(json.dumps(pkg))
    profiles = {
        "react": TechProfile(detect=["package.json:react"]),
        "vue": TechProfile(detect=["package.json:vue"]),
        "nestjs": TechProfile(detect=["package.json:@nestjs/core"]),
    }
    assert detect(tmp_path, profiles) == ["react"]


def test_detect_package_json_dev_dependency(tmp_path):
    pkg = {"name": "test", "devDependencies": {"jest": "^29.0.0"}}
    (tmp_path / "package.json").write_text(json.dumps(pkg))
    assert detect(tmp_path, {"jest": TechProfile(detect=["package.json:jest"])}) == ["jest"]


def test_detect_package_json_needs_exact_key(tmp_path):
    pkg = {"name": "vue-lookalike", "dependencies": {"vuex-helper": "1.0"}}
    (tmp_path / "package.json").write_text(json.dumps(pkg))
    assert detect(tmp_path, {"vue": TechProfile(detect=["package.json:vue"])}) == []


def test_detect_package_json_unparsable_falls_back_to_substring(tmp_path):
    (tmp_path / "package.json").write_text('{"dependencies": {"react": ')
    assert detect(tmp_path, {"react": TechProfile(detect=["package.json:react"])}) == ["react"]


def test_detect_composer_json_dependency(tmp_path):
    composer = {"require": {"laravel/framework": "^10.0"}}
    (tmp_path / "composer.json").write_text(json.dumps(composer))
    profiles = {"laravel": TechProfile(detect=["composer.json:laravel/framework"])}
    assert detect(tmp_path, profiles) == ["laravel"]


def test_detect_composer_json_dev_dependency(tmp_path):
    composer = {"require-dev": {"phpunit/phpunit": "^10.0"}}
    (tmp_path / "composer.json").write_text(json.dumps(composer))
    profiles = {"phpunit": TechProfile(detect=["composer.json:phpunit/phpunit"])}
    assert detect(tmp_path, profiles) == ["phpunit"]


def test_detect_no_markers(tmp_path):
    profiles = {
        "go": TechProfile(detect=["go.mod"]),
        "python": TechProfile(detect=["requirements.txt"]),
    }
    assert detect(tmp_path, profiles) == []


def test_detect_multiple_matches(tmp_path):
    (tmp_path / "go.mod").write_text("module test")
    (tmp_path / "tsconfig.json").write_text("{}")
    profiles = {
        "go": TechProfile(detect=["go.mod"]),
        "typescript": TechProfile(detect=["tsconfig.json"]),
        "python": TechProfile(detect=["*.py"]),
    }
    assert sorted(detect(tmp_path, profiles)) == ["go", "typescript"]


def test_detect_first_marker_wins(tmp_path):
    (tmp_path / "go.mod").write_text("module test")
    (tmp_path / "go.sum").write_text("")
    assert detect(tmp_path, {"go": TechProfile(detect=["go.mod", "go.sum"])}) == ["go"]


def test_recommended_items_basic():
    profiles = {
        "go": TechProfile(plugins=["gopls"], skills=["server-pro"]),
        "react": TechProfile(plugins=["frontend-design"], skills=["react-expert", "js-pro"]),
    }
    plugins, skills = recommended_items(["go", "react"], profiles)
    assert plugins == ["gopls", "frontend-design"]
    assert skills == ["server-pro", "react-expert", "js-pro"]


def test_recommended_items_deduplication():
    profiles = {
        "react": TechProfile(plugins=["frontend-design"], skills=["js-pro"]),
        "nextjs": TechProfile(plugins=["frontend-design"], skills=["js-pro", "nextjs-dev"]),
    }
    plugins, skills = recommended_items(["react", "nextjs"], profiles)
    assert plugins == ["frontend-design"]
    assert skills == ["js-pro", "nextjs-dev"]


def test_recommended_items_unknown_profile():
    profiles = {"go": TechProfile(plugins=["gopls"], skills=["server-pro"])}
    assert recommended_items(["unknown"], profiles) == ([], [])


def test_recommended_items_empty_input():
    profiles = {"go": TechProfile(plugins=["gopls"], skills=["server-pro"])}
    assert recommended_items(None, profiles) == ([], [])