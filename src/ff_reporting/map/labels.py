"""
Label sequences for map legends.
"""

from abc import ABC, abstractmethod


class LabelSequence(ABC):
    """Produces successive legend labels."""

    @abstractmethod
    def next(self) -> str:
        """Return the next label in the sequence."""
        pass

    def __iter__(self):
        return self

    def __next__(self) -> str:
        return self.next()


class ArabicNumberSequence(LabelSequence):
    """Provides a sequence of arabic numbers: 1, 2, 3..."""

    def __init__(self, start: int = 1):
        self.number = start

    def next(self) -> str:
        label = str(self.number)
        self.number += 1
        return label
