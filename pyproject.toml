[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "v120tui"
version = "2.0"
description = "Building blocks for a terminal register browser of V120 VME crates: RNM register maps, command scripts, a VT100 terminal layer and a doc-comment extractor"
requires-python = ">=3.10"
dependencies = []
keywords = ["vme", "v120", "terminal", "register-map", "rnm", "vt100"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Intended Audience :: Science/Research",
    "Operating System :: POSIX",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Terminals",
    "Topic :: Scientific/Engineering",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
v120tui-doc = "v120tui.docextract:main"

[tool.hatch.build.targets.wheel]
packages = ["v120tui"]

[tool.pytest.ini_options]
addopts = "-ra"
testpaths = ["tests"]
