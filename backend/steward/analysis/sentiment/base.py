from abc import ABC, abstractmethod
from typing import Any, Iterable

POSITIVE = "POSITIVE"
NEUTRAL = "NEUTRAL"
NEGATIVE = "NEGATIVE"

SENTIMENT_LABELS = (POSITIVE, NEUTRAL, NEGATIVE)


class SentimentStrategy(ABC):
    """Abstract base class for text sentiment scorers."""

    name: str = ""

    @abstractmethod
    def analyze(self, text: str) -> Any:
        """Score a single piece of text."""
        raise NotImplementedError

    def analyze_batch(self, texts: Iterable[str]) -> list[Any]:
        return [self.analyze(text) for text in texts]
