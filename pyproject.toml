[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "stylus_sdk"
version = "0.1.2"
description = "Contract storage, raw logging, deployment and host access for Stylus-style EVM programs, backed by a pluggable host"
requires-python = ">=3.10"
dependencies = ["pycryptodome"]
keywords = ["evm", "ethereum", "arbitrum", "stylus", "storage", "smart-contracts"]
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
    "Topic :: Software Development :: Libraries",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["stylus_sdk"]

[tool.pytest.ini_options]
addopts = "-ra"
