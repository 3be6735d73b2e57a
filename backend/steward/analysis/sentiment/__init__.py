from typing import Dict, Type

from steward.analysis.sentiment.base import (
    NEGATIVE,
    NEUTRAL,
    POSITIVE,
    SentimentStrategy,
)
from steward.analysis.sentiment.keyword import KeywordSentimentStrategy, SentimentScore
from steward.analysis.sentiment.lexicon import LexiconSentiment, LexiconSentimentStrategy

STRATEGIES: Dict[str, Type[SentimentStrategy]] = {
    "keyword": KeywordSentimentStrategy,
    "lexicon": LexiconSentimentStrategy,
}


def get_sentiment_strategy(name: str = "keyword") -> SentimentStrategy:
    strategy_class = STRATEGIES.get(name)
    if not strategy_class:
        raise ValueError(f"Unknown sentiment strategy: {name}")
    return strategy_class()


__all__ = [
    "POSITIVE",
    "NEUTRAL",
    "NEGATIVE",
    "SentimentStrategy",
    "SentimentScore",
    "LexiconSentiment",
    "KeywordSentimentStrategy",
    "LexiconSentimentStrategy",
    "STRATEGIES",
    "get_sentiment_strategy",
]
