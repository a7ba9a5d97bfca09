[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "multisig"
version = "0.0.1"
description = "An M-of-N multisignature wallet model: owners propose, approve, edit, cancel and execute transactions once a threshold is met."
requires-python = ">=3.10"
dependencies = []
keywords = ["multisig", "multisignature", "wallet", "threshold", "approval"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Intended Audience :: Financial and Insurance Industry",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Office/Business :: Financial",
    "Typing :: Typed",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["multisig"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"
