"""Tests for the keyword-count sentiment scorer."""

import pytest

from steward.analysis.personality import extract_traits
from steward.analysis.sentiment import (
    NEGATIVE,
    NEUTRAL,
    POSITIVE,
    KeywordSentimentStrategy,
    LexiconSentimentStrategy,
    get_sentiment_strategy,
)
from steward.analysis.sentiment.keyword import EMPTY_SCORE, SentimentScore, tokenize


@pytest.fixture
def strategy():
    return KeywordSentimentStrategy()


def test_tokenize_strips_punctuation_and_lowercases():
    assert tokenize("LGTM! Great-work, thanks.") == ["lgtm", "great", "work", "thanks"]


def test_positive_text(strategy):
    result = strategy.analyze("Great work, thanks!")
    assert result.sentiment == POSITIVE
    assert result.score == pytest.approx(2 / 3)
    assert result.confidence == pytest.approx(2 / 3)
    assert result.positive_count == 2
    assert result.total_words == 3


def test_negative_text_has_negative_score(strategy):
    result = strategy.analyze("This is broken and wrong")
    assert result.sentiment == NEGATIVE
    assert result.score == pytest.approx(-0.4)
    assert result.confidence == pytest.approx(0.4)


def test_word_counts_once_in_first_matching_category(strategy):
    # "no" is in both the negative and neutral lists; negative wins
    result = strategy.analyze("no")
    assert result.negative_count == 1
    assert result.neutral_count == 0
    assert result.sentiment == NEGATIVE
    assert result.score == pytest.approx(-1.0)


def test_tie_is_neutral_with_neutral_density_as_confidence(strategy):
    result = strategy.analyze("good bad maybe fine")
    assert result.sentiment == NEUTRAL
    assert result.score == 0.0
    assert result.confidence == pytest.approx(0.5)


def test_long_text_boosts_confidence(strategy):
    text = "great the code here is a change for this file and"
    result = strategy.analyze(text)
    assert result.total_words == 11
    assert result.sentiment == POSITIVE
    assert result.confidence == pytest.approx(1 / 11 * 1.2)


def test_confidence_boost_is_capped(strategy):
    result = strategy.analyze(" ".join(["great"] * 12))
    assert result.confidence == 1.0


def test_thankful_review_is_positive_and_encouraging(strategy):
    text = "This is great work, thanks!"
    assert strategy.analyze(text).sentiment == POSITIVE
    assert extract_traits(text).encouragement > 0


VARIED_TEXTS = [
    "no",
    "no no no maybe",
    "No, this is not fine. Maybe ok?",
    "LGTM, great work but the error handling is wrong",
    "should we fix this bug? perhaps not",
    " ".join(["great"] * 12 + ["no"] * 3),
    "looks good thank you",
    "refactor the parser module",
]


@pytest.mark.parametrize("text", VARIED_TEXTS)
def test_counts_never_exceed_word_total(strategy, text):
    result = strategy.analyze(text)
    assert result.positive_count + result.negative_count + result.neutral_count <= result.total_words


@pytest.mark.parametrize("text", VARIED_TEXTS)
def test_confidence_stays_in_unit_interval(strategy, text):
    assert 0.0 <= strategy.analyze(text).confidence <= 1.0


@pytest.mark.parametrize("text", ["", "   ", "!!! ???"])
def test_empty_or_wordless_text_is_neutral_zero(strategy, text):
    assert strategy.analyze(text) == EMPTY_SCORE


def test_average_sentiment_thresholds(strategy):
    results = [
        SentimentScore(POSITIVE, 0.5, 0.5),
        SentimentScore(NEGATIVE, -0.2, 0.3),
    ]
    average = strategy.average_sentiment(results)
    assert average.score == pytest.approx(0.15)
    assert average.confidence == pytest.approx(0.4)
    assert average.sentiment == POSITIVE

    borderline = strategy.average_sentiment([SentimentScore(POSITIVE, 0.1, 1.0)])
    assert borderline.sentiment == NEUTRAL


def test_average_of_nothing_is_empty(strategy):
    assert strategy.average_sentiment([]) == EMPTY_SCORE


def test_pr_review_includes_title_and_body(strategy):
    result = strategy.analyze_pr_review("thanks", "Fix parser", None)
    # "fix" and "thanks" are positive; "parser" is not listed
    assert result.positive_count == 2
    assert result.total_words == 3


def test_issue_comment_includes_title(strategy):
    result = strategy.analyze_issue_comment("still broken", "Crash on start", "error here")
    assert result.sentiment == NEGATIVE


def test_strategy_lookup():
    assert isinstance(get_sentiment_strategy("keyword"), KeywordSentimentStrategy)
    assert isinstance(get_sentiment_strategy("lexicon"), LexiconSentimentStrategy)
    with pytest.raises(ValueError):
        get_sentiment_strategy("magic")
