"""Audio processing helpers."""

from .normalizer import AudioNormalizer

__all__ = ["AudioNormalizer"]
