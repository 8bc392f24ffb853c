[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "vellum"
version = "0.1.0"
description = "Building blocks for finite state transducers: packed integer encodings, a counting buffered writer, merge iterators, UTF-8 range sequences, and Levenshtein and regular expression automata."
requires-python = ">=3.10"
dependencies = []
keywords = ["fst", "automaton", "levenshtein", "regexp", "dfa", "utf8", "fuzzy"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Operating System :: OS Independent",
    "Topic :: Software Development :: Libraries :: Python Modules",
    "Topic :: Text Processing :: Indexing",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["vellum"]

[tool.pytest.ini_options]
addopts = "-ra"
