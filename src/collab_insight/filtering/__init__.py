"""Chunk filtering: pre-rating exclusion and post-rating weighting."""

from .copy_paste import CopyPasteWeigher
from .prefilter import PreFilter

__all__ = ["PreFilter", "CopyPasteWeigher"]
