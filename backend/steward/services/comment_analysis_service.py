import logging
from typing import Iterable, Optional

from steward.analysis.personality import (
    DEFAULT_SENTIMENT,
    SentimentResult,
    extract_emotions,
    extract_traits,
)
from steward.analysis.sentiment import NEGATIVE, NEUTRAL, POSITIVE
from steward.analysis.sentiment.lexicon import LexiconSentiment, LexiconSentimentStrategy
from steward.core.cache import MemoryCache, hash_text
from steward.core.config import settings
from steward.core.metrics import metrics

logger = logging.getLogger(__name__)

# Lexicon score (sum of valences) beyond which a comment is non-neutral
CATEGORY_THRESHOLD = 2.0
MIN_CONFIDENCE = 0.1


def categorize_lexicon_score(score: float) -> str:
    if score > CATEGORY_THRESHOLD:
        return POSITIVE
    if score < -CATEGORY_THRESHOLD:
        return NEGATIVE
    return NEUTRAL


def lexicon_confidence(analysis: LexiconSentiment, text: str) -> float:
    words = len(text.split(" "))
    confidence = min(abs(analysis.comparative) * words / 10, 1.0)
    return max(confidence, MIN_CONFIDENCE)


class CommentAnalysisService:
    """Score review comments into SentimentResults, memoized by text hash."""

    def __init__(
        self,
        lexicon: Optional[LexiconSentimentStrategy] = None,
        memo: Optional[MemoryCache] = None,
        batch_size: Optional[int] = None,
    ):
        self.lexicon = lexicon or LexiconSentimentStrategy()
        self.memo = memo if memo is not None else MemoryCache(settings.MEMO_CACHE_MAX_ENTRIES)
        self.batch_size = batch_size or settings.SENTIMENT_BATCH_SIZE

    def analyze_pr_comment(self, text: str) -> SentimentResult:
        key = f"comment_{hash_text(text)}"
        cached = self.memo.get(key)
        if cached is not None:
            metrics.comment_analyzed("lexicon", cached.sentiment, cached=True)
            return cached

        try:
            analysis = self.lexicon.analyze(text)
            result = SentimentResult(
                sentiment=categorize_lexicon_score(analysis.score),
                score=analysis.score,
                confidence=lexicon_confidence(analysis, text),
                emotions=extract_emotions(text),
                personality=extract_traits(text),
            )
        except Exception as exc:
            logger.error("Error analyzing PR comment: %s", exc, exc_info=True)
            return DEFAULT_SENTIMENT

        self.memo.set(key, result)
        metrics.comment_analyzed("lexicon", result.sentiment, cached=False)
        return result

    def batch_analyze_comments(self, comments: Iterable[str]) -> list[SentimentResult]:
        comments = list(comments)
        results: list[SentimentResult] = []
        for start in range(0, len(comments), self.batch_size):
            batch = comments[start:start + self.batch_size]
            results.extend(self.analyze_pr_comment(comment) for comment in batch)
            logger.debug("Analyzed comment batch %s-%s", start, start + len(batch))
        return results
