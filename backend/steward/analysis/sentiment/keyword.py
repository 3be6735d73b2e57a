"""
Keyword-count sentiment scorer.

Scores text by counting tokens that appear in fixed positive, negative and
neutral word lists and comparing the per-category densities.
"""

import re
from dataclasses import dataclass
from typing import Iterable, Optional

from steward.analysis.sentiment.base import (
    NEGATIVE,
    NEUTRAL,
    POSITIVE,
    SentimentStrategy,
)

POSITIVE_WORDS = frozenset([
    "great", "excellent", "awesome", "amazing", "fantastic", "wonderful",
    "good", "nice", "perfect", "brilliant", "outstanding", "superb",
    "thanks", "thank you", "appreciate", "love", "like", "helpful",
    "useful", "clean", "elegant", "simple", "clear", "well",
    "improve", "better", "enhance", "fix", "resolve", "solve",
    "approve", "approved", "merge", "looks good", "lgtm",
])

NEGATIVE_WORDS = frozenset([
    "bad", "terrible", "awful", "horrible", "wrong", "incorrect",
    "broken", "bug", "issue", "problem", "error", "fail",
    "disappointed", "frustrated", "confused", "unclear", "messy",
    "hack", "hacky", "ugly", "complex", "complicated", "hard",
    "difficult", "struggle", "struggling", "stuck", "blocked",
    "reject", "rejected", "denied", "declined", "no", "not",
])

NEUTRAL_WORDS = frozenset([
    "ok", "okay", "fine", "sure", "yes", "no", "maybe",
    "perhaps", "possibly", "might", "could", "would",
    "should", "need", "require", "must", "have to",
])

# Text longer than this many tokens gets a confidence boost
LONG_TEXT_WORDS = 10
LONG_TEXT_BOOST = 1.2

AVERAGE_THRESHOLD = 0.1

_NON_WORD = re.compile(r"[^\w\s]", re.ASCII)


@dataclass(frozen=True)
class SentimentScore:
    """Category, signed score and confidence for one piece of text."""
    sentiment: str
    score: float
    confidence: float
    positive_count: int = 0
    negative_count: int = 0
    neutral_count: int = 0
    total_words: int = 0

    def to_dict(self) -> dict:
        return {
            "sentiment": self.sentiment,
            "score": self.score,
            "confidence": self.confidence,
        }


EMPTY_SCORE = SentimentScore(sentiment=NEUTRAL, score=0.0, confidence=0.0)


def tokenize(text: str) -> list[str]:
    """Lowercase, turn punctuation into spaces and split on whitespace."""
    return _NON_WORD.sub(" ", text.lower()).split()


class KeywordSentimentStrategy(SentimentStrategy):
    """Word-list membership scorer producing POSITIVE / NEUTRAL / NEGATIVE."""

    name = "keyword"

    def analyze(self, text: str) -> SentimentScore:
        if not text or not text.strip():
            return EMPTY_SCORE

        words = tokenize(text)
        total = len(words)
        if total == 0:
            return EMPTY_SCORE

        positive_count = negative_count = neutral_count = 0
        for word in words:
            # Categories are checked in order; a token counts at most once
            if word in POSITIVE_WORDS:
                positive_count += 1
            elif word in NEGATIVE_WORDS:
                negative_count += 1
            elif word in NEUTRAL_WORDS:
                neutral_count += 1

        positive_score = positive_count / total
        negative_score = negative_count / total
        neutral_score = neutral_count / total

        if positive_score > negative_score and positive_score > neutral_score:
            sentiment, score, confidence = POSITIVE, positive_score, positive_score
        elif negative_score > positive_score and negative_score > neutral_score:
            sentiment, score, confidence = NEGATIVE, -negative_score, negative_score
        else:
            sentiment, score, confidence = NEUTRAL, 0.0, neutral_score

        if total > LONG_TEXT_WORDS:
            confidence = min(confidence * LONG_TEXT_BOOST, 1.0)

        return SentimentScore(
            sentiment=sentiment,
            score=score,
            confidence=confidence,
            positive_count=positive_count,
            negative_count=negative_count,
            neutral_count=neutral_count,
            total_words=total,
        )

    def average_sentiment(self, results: Iterable[SentimentScore]) -> SentimentScore:
        """Average a set of scores into one, re-categorised on +/-0.1 thresholds."""
        results = list(results)
        if not results:
            return EMPTY_SCORE

        average_score = sum(r.score for r in results) / len(results)
        average_confidence = sum(r.confidence for r in results) / len(results)

        if average_score > AVERAGE_THRESHOLD:
            sentiment = POSITIVE
        elif average_score < -AVERAGE_THRESHOLD:
            sentiment = NEGATIVE
        else:
            sentiment = NEUTRAL

        return SentimentScore(
            sentiment=sentiment,
            score=average_score,
            confidence=average_confidence,
        )

    def analyze_pr_review(
        self, review_body: str, pr_title: str, pr_body: Optional[str] = None
    ) -> SentimentScore:
        return self.analyze(f"{pr_title} {pr_body or ''} {review_body}")

    def analyze_issue_comment(
        self, comment_body: str, issue_title: str, issue_body: Optional[str] = None
    ) -> SentimentScore:
        return self.analyze(f"{issue_title} {issue_body or ''} {comment_body}")
