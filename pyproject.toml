[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "prek"
version = "0.0.23"
description = "Building blocks for a git hook runner: logged subprocess commands, file batching, a cache-directory store, version reporting and user warnings"
requires-python = ">=3.10"
dependencies = []
keywords = ["pre-commit", "git", "hooks", "subprocess", "batching"]
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
    "Topic :: Software Development :: Quality Assurance",
    "Framework :: AsyncIO",
]

[project.optional-dependencies]
test = [
    "pytest",
    "pytest-asyncio",
]

[tool.hatch.build.targets.wheel]
packages = ["prek"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"
