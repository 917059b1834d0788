[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "dacnode"
version = "0.1.0"
description = "Building blocks of a data availability committee member: sequence signing, off-chain data serving and L1 batch synchronization"
requires-python = ">=3.10"
dependencies = [
    "pycryptodome",
]
keywords = ["data-availability", "validium", "ethereum", "synchronizer", "committee", "secp256k1", "keccak"]
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
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["dacnode"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
