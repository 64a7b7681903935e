"""Register-map parsing, command scripts and terminal tools for browsing V120 VME crates."""

__version__ = "2.0"

__all__ = [
    "commands",
    "docextract",
    "lineedit",
    "paths",
    "rnm",
    "terminal",
    "tokens",
]