"""Tests for the valence-lexicon scorer."""

import pytest

from steward.analysis.sentiment.lexicon import (
    NEGATIVE,
    NEUTRAL,
    POSITIVE,
    VERY_NEGATIVE,
    VERY_POSITIVE,
    LexiconSentimentStrategy,
    classify_comparative,
    count_emoji,
    extract_review_traits,
)

LEXICON = {"great": 3.0, "good": 2.0, "bad": -3.0, "broken": -2.0}


@pytest.fixture
def strategy():
    return LexiconSentimentStrategy(lexicon=LEXICON)


def test_strong_positive(strategy):
    result = strategy.analyze("Great work!")
    assert result.score == 3.0
    assert result.comparative == pytest.approx(1.5)
    assert result.sentiment == VERY_POSITIVE
    assert result.intensity == "high"
    assert result.positive == ["great"]
    assert result.negative == []
    assert result.word_count == 2


def test_negation_flips_following_word(strategy):
    result = strategy.analyze("not good")
    assert result.score == -2.0
    assert result.negative == ["good"]
    assert result.sentiment == VERY_NEGATIVE


def test_contracted_negator(strategy):
    assert strategy.analyze("isn't bad").score == 3.0


def test_mild_tiers(strategy):
    mild_positive = strategy.analyze("good code review here today ok fine")
    assert mild_positive.comparative == pytest.approx(2 / 7)
    assert mild_positive.sentiment == POSITIVE
    assert mild_positive.intensity == "medium"

    mild_negative = strategy.analyze("bad " + " ".join(["word"] * 19))
    assert mild_negative.comparative == pytest.approx(-0.15)
    assert mild_negative.sentiment == NEGATIVE


def test_unscored_text_is_neutral(strategy):
    result = strategy.analyze("refactor the loader")
    assert result.score == 0.0
    assert result.sentiment == NEUTRAL
    assert result.intensity == "low"


@pytest.mark.parametrize("comparative,expected", [
    (0.31, (VERY_POSITIVE, "high")),
    (0.3, (POSITIVE, "medium")),
    (0.1, (NEUTRAL, "low")),
    (-0.1, (NEUTRAL, "low")),
    (-0.2, (NEGATIVE, "medium")),
    (-0.5, (VERY_NEGATIVE, "high")),
])
def test_tier_boundaries(comparative, expected):
    assert classify_comparative(comparative) == expected


def test_emoji_are_counted():
    assert count_emoji("Nice \U0001F600\U0001F680") == 2
    assert count_emoji("plain text") == 0


def test_review_traits_normalised_to_top_trait():
    traits = extract_review_traits("Great, good work. You should help")
    assert traits["encouraging"] == 100
    assert traits["helpful"] == 50
    assert traits["direct"] == 50
    assert traits["constructive"] == 0
    assert traits["technical"] == 0
    assert traits["mentoring"] == 0


def test_review_traits_all_zero_when_nothing_matches():
    assert set(extract_review_traits("ok").values()) == {0}


def test_to_dict_uses_camel_case(strategy):
    data = strategy.analyze("great \U0001F44D").to_dict()
    assert data["wordCount"] == 2
    assert data["emojiCount"] == 1
    assert data["personalityTraits"]["encouraging"] == 100
    assert set(data) == {
        "score", "comparative", "positive", "negative", "sentiment",
        "intensity", "personalityTraits", "wordCount", "emojiCount",
    }


def test_default_lexicon_scores_common_words():
    strategy = LexiconSentimentStrategy()
    assert strategy.analyze("This is great").score > 0
    assert strategy.analyze("This is terrible").score < 0
