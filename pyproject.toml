[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "rinktools"
version = "0.1.0"
description = "Unit calculator tooling: query tokenizing, style and config handling, and the child side of a process sandbox with time and memory accounting"
requires-python = ">=3.11"
dependencies = [
    "platformdirs",
]
keywords = ["units", "calculator", "sandbox", "tokenizer", "configuration"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Intended Audience :: Science/Research",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Scientific/Engineering :: Mathematics",
    "Typing :: Typed",
]

[project.optional-dependencies]
test = [
    "pytest",
    "pytest-asyncio",
]

[tool.hatch.build.targets.wheel]
packages = ["rinktools"]

[tool.hatch.build.targets.sdist]
include = ["rinktools", "tests", "README.md"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py311"

[tool.mypy]
python_version = "3.11"
warn_unused_ignores = true
