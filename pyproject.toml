[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "armyv2"
version = "0.1.0"
description = "Manifest-driven manager for Claude Code plugins and skills: interactive setup, sync, and health checks"
requires-python = ">=3.10"
dependencies = [
    "blessed",
]
keywords = [
    "claude",
    "plugins",
    "skills",
    "manifest",
    "sync",
    "cli",
    "developer-tools",
]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Environment :: Console :: Curses",
    "Intended Audience :: Developers",
    "Operating System :: POSIX",
    "Operating System :: MacOS",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Build Tools",
    "Topic :: Utilities",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
armyv2 = "armyv2.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["armyv2"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
warn_redundant_casts = true
