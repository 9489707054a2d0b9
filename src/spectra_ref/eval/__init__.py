"""Evaluator helper modules for the Spectra runtime."""

__all__ = [
    "bind",
    "blocks",
    "common",
    "expr",
    "fn",
    "helpers",
    "loops",
    "objects",
]
