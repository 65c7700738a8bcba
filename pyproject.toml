[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "svetse"
version = "1.0.0"
description = "MegaHAL-style Markov chain chat bot brain with a compact binary brain file and Wikipedia training"
requires-python = ">=3.10"
dependencies = []
keywords = ["megahal", "markov", "chatbot", "wikipedia"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Intended Audience :: End Users/Desktop",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Communications :: Chat",
    "Topic :: Games/Entertainment",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
svetse = "svetse.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["svetse"]

[tool.pytest.ini_options]
addopts = "-ra"
