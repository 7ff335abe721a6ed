[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "kokaq"
version = "0.1.0"
description = "A disk-backed priority queue built on paged binary heaps"
requires-python = ">=3.10"
dependencies = []
keywords = ["priority queue", "heap", "disk", "storage", "queue", "murmurhash"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Operating System :: OS Independent",
    "Topic :: Database :: Database Engines/Servers",
    "Topic :: Software Development :: Libraries :: Python Modules",
]

[project.optional-dependencies]
test = ["pytest", "hypothesis"]

[project.scripts]
kokaq = "kokaq.cli:main"
kokaq-profile = "kokaq.cli:profile_main"

[tool.hatch.build.targets.wheel]
packages = ["kokaq"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
