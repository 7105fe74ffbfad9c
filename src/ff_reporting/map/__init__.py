"""
Map legend helpers.
"""

from .labels import ArabicNumberSequence, LabelSequence

__all__ = ["LabelSequence", "ArabicNumberSequence"]
