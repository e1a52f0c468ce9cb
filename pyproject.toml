[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "glowdrive"
version = "0.1.0"
description = "Planning, resource matching, data locality and file distribution for distributed data flows"
requires-python = ">=3.10"
dependencies = []
keywords = [
    "distributed",
    "map-reduce",
    "scheduler",
    "dataflow",
    "task-planning",
    "double-auction",
    "graphviz",
]
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
    "Topic :: System :: Distributed Computing",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["glowdrive"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
