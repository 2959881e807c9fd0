from comicfuse.pipeline.translate.base import Translation, TranslateImageAdapter, Translator

__all__ = ["Translation", "TranslateImageAdapter", "Translator"]
