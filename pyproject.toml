[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "linksim"
version = "0.1.0"
description = "Simulated transmitter and receiver for the physical and data link layers: line coding, modulation, framing and error control"
requires-python = ">=3.10"
dependencies = []
keywords = [
    "networking",
    "simulation",
    "modulation",
    "line-coding",
    "framing",
    "crc",
    "hamming",
    "parity",
]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Education",
    "Intended Audience :: Developers",
    "Environment :: Console",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Communications",
    "Topic :: Education",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
linksim = "linksim.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["linksim"]

[tool.pytest.ini_options]
addopts = "-ra"
