[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "cheesebase"
version = "0.1.0"
description = "A document value model with a SQL++-style query language: parser, in-memory evaluator and printers"
requires-python = ">=3.10"
dependencies = []
keywords = ["database", "query", "sql++", "json", "document", "murmurhash"]
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
    "Topic :: Database",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["cheesebase"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
