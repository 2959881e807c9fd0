"""Shared utilities for the page pipeline.

Modules:
- io: image/file IO helpers, PNG and data URL codecs
- textio: read/write of text.json
- visualization: debug overlays
"""

__all__ = [
    "io",
    "textio",
    "visualization",
]
