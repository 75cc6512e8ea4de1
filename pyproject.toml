[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "autoflipper"
version = "0.1.0"
description = "Scheduled rollout restarts of labelled deployments, driven by Flipper resources"
requires-python = ">=3.10"
dependencies = []
keywords = ["rollout", "restart", "deployment", "reconciler", "controller", "scheduler"]
classifiers = [
    "Development Status :: 3 - Alpha",
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

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["autoflipper"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
