"""Evaluator helper modules for the jsref runtime."""

__all__ = [
    "bind",
    "blocks",
    "coerce",
    "common",
    "control",
    "expr",
    "fn",
    "loops",
    "mutation",
    "objects",
]
