"""ComicFuse: panel detection and OCR block merging for comic-page translation."""

__version__ = "0.1.0"
