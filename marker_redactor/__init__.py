"""Marker redactor package.

Masks delimiter-marked spans of sensitive text and helps insert the
delimiters while editing. Modules are intentionally lightweight and do not
perform file I/O on import.
"""

__all__ = [
    "__version__",
]

__version__ = "0.1.0"
