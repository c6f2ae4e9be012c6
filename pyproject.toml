[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "kubeguide"
version = "0.1.0"
description = "A keyboard-driven terminal explorer for Kubernetes clusters"
requires-python = ">=3.10"
keywords = ["kubernetes", "terminal", "tui", "explorer", "cluster", "yaml"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Intended Audience :: System Administrators",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Systems Administration",
]
dependencies = [
    "requests",
    "pyyaml",
    "urwid",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
kubeguide = "kubeguide.app:main"

[tool.hatch.build.targets.wheel]
packages = ["kubeguide"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
ignore_missing_imports = true
