[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "evrhash"
version = "0.1.0"
description = "Pure Python Ethash and ProgPoW proof-of-work hashing (Evrmore KawPoW parameters) with Keccak primitives"
requires-python = ">=3.10"
dependencies = []
keywords = ["ethash", "progpow", "kawpow", "keccak", "proof-of-work", "hashing", "dag"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Security :: Cryptography",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["evrhash"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]
