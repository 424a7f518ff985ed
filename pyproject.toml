[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "kubecluster"
version = "0.1.0"
description = "Reconciliation helpers for replicated clusters of pods and services: replica bookkeeping, condition tracking, expectations, resource quantities and gang-scheduling sizing."
requires-python = ">=3.10"
dependencies = []
keywords = ["kubernetes", "cluster", "controller", "reconcile", "pods", "replicas", "quota"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Intended Audience :: System Administrators",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Clustering",
    "Topic :: Software Development :: Libraries :: Python Modules",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["kubecluster"]

[tool.hatch.build.targets.sdist]
include = ["kubecluster", "tests", "README.md"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
