[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "pgmem"
version = "0.1.0"
description = "Building blocks of a local memory store for coding agents: tokenizer, vector index, record format, eviction rules, metrics and MCP JSON-RPC handling."
requires-python = ">=3.10"
dependencies = []
keywords = [
    "memory",
    "retrieval",
    "tokenizer",
    "vector-index",
    "mcp",
    "json-rpc",
    "agents",
]
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
    "Topic :: Scientific/Engineering :: Artificial Intelligence",
    "Topic :: Text Processing :: Indexing",
    "Typing :: Typed",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["pgmem"]

[tool.hatch.build.targets.sdist]
include = ["pgmem", "tests", "pyproject.toml"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "I", "B", "UP"]

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
warn_redundant_casts = true
