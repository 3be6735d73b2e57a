"""Tests for memoized comment scoring."""

import pytest

from steward.analysis.personality import DEFAULT_SENTIMENT
from steward.analysis.sentiment import NEGATIVE, NEUTRAL, POSITIVE
from steward.analysis.sentiment.lexicon import LexiconSentimentStrategy
from steward.core.cache import MemoryCache
from steward.core.metrics import metrics
from steward.services.comment_analysis_service import (
    CommentAnalysisService,
    categorize_lexicon_score,
)


@pytest.fixture
def service():
    lexicon = LexiconSentimentStrategy(lexicon={"great": 3.0, "bad": -3.0})
    return CommentAnalysisService(lexicon=lexicon, memo=MemoryCache(100), batch_size=2)


class ExplodingLexicon(LexiconSentimentStrategy):
    def __init__(self):
        super().__init__(lexicon={})

    def analyze(self, text):
        raise RuntimeError("lexicon unavailable")


@pytest.mark.parametrize("score,expected", [
    (2.5, POSITIVE),
    (2.0, NEUTRAL),
    (-2.0, NEUTRAL),
    (-3.0, NEGATIVE),
])
def test_categorize_lexicon_score(score, expected):
    assert categorize_lexicon_score(score) == expected


def test_analyze_comment(service):
    result = service.analyze_pr_comment("great great")
    assert result.sentiment == POSITIVE
    assert result.score == 6.0
    assert result.confidence == pytest.approx(0.6)
    assert result.emotions == ["positive"]
    assert result.personality.encouragement == pytest.approx(0.2)


def test_confidence_has_floor(service):
    result = service.analyze_pr_comment("ok")
    assert result.sentiment == NEUTRAL
    assert result.confidence == pytest.approx(0.1)


def test_results_are_memoized(service):
    first = service.analyze_pr_comment("bad bad bad")
    second = service.analyze_pr_comment("bad bad bad")

    assert first is second
    assert first.sentiment == NEGATIVE
    cached_flags = [e.metadata["cached"] for e in metrics.get_buffer()]
    assert cached_flags == [False, True]


def test_batch_preserves_order(service):
    comments = ["great", "bad bad", "ok", "great great", "bad"]
    results = service.batch_analyze_comments(comments)
    assert [r.score for r in results] == [3.0, -6.0, 0.0, 6.0, -3.0]


def test_failure_falls_back_to_neutral_default():
    service = CommentAnalysisService(lexicon=ExplodingLexicon(), memo=MemoryCache(10))
    assert service.analyze_pr_comment("anything") == DEFAULT_SENTIMENT
    # Failures are not memoized
    assert len(service.memo) == 0
