[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "miniwal"
version = "0.1.3"
description = "Durable append-only JSON Lines journal, atomic snapshots and a WAL-backed state manager"
requires-python = ">=3.10"
dependencies = []
keywords = ["wal", "write-ahead-log", "journal", "snapshot", "durable", "embedded", "state"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Database :: Database Engines/Servers",
    "Topic :: Software Development :: Libraries :: Python Modules",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["miniwal"]

[tool.hatch.build.targets.sdist]
include = ["miniwal", "tests"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.10"
files = ["miniwal"]
