[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "pocrunner"
version = "0.1.0"
description = "Run YAML-defined HTTP proof-of-concept checks against a target and search a local POC collection."
requires-python = ">=3.10"
keywords = ["security", "poc", "http", "yaml", "scanner"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Intended Audience :: Information Technology",
    "Intended Audience :: System Administrators",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Security",
]
dependencies = [
    "pyyaml",
    "requests",
]

[project.optional-dependencies]
test = [
    "pytest",
    "responses",
]

[project.scripts]
pocrunner = "pocrunner.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["pocrunner"]

[tool.pytest.ini_options]
addopts = "-ra"
