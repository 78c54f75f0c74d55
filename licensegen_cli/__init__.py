"""Generate license files and annotate sources with SPDX headers."""

__version__ = "0.1.0"
