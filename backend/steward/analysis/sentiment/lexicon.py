"""
Valence-lexicon sentiment scorer.

Each token is looked up in VADER's word valence table (roughly -4..+4) and
the valences are summed. The comparative score (sum / token count) is bucketed
into five tiers, and the text is also scanned for emoji and reviewer-trait
keyword groups.
"""

import re
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from vaderSentiment.vaderSentiment import SentimentIntensityAnalyzer

from steward.analysis.sentiment.base import SentimentStrategy

VERY_POSITIVE = "very_positive"
POSITIVE = "positive"
NEUTRAL = "neutral"
NEGATIVE = "negative"
VERY_NEGATIVE = "very_negative"

# Tier boundaries on the comparative score
STRONG_THRESHOLD = 0.3
MILD_THRESHOLD = 0.1

EMOJI_RANGES = (
    (0x1F600, 0x1F64F),  # emoticons
    (0x1F300, 0x1F5FF),  # symbols & pictographs
    (0x1F680, 0x1F6FF),  # transport & map
    (0x1F1E0, 0x1F1FF),  # flags
)

NEGATORS = frozenset([
    "not", "no", "never", "none", "nobody", "nothing", "neither", "nor",
    "cannot", "can't", "cant", "don't", "dont", "doesn't", "doesnt",
    "didn't", "didnt", "isn't", "isnt", "wasn't", "wasnt", "won't", "wont",
    "shouldn't", "shouldnt", "wouldn't", "wouldnt", "aren't", "arent",
])

# Each trait gains one point per group with at least one phrase present
TRAIT_GROUPS: Dict[str, List[List[str]]] = {
    "helpful": [
        ["help", "assist", "support"],
        ["suggestion", "recommend", "consider"],
    ],
    "direct": [
        ["should", "must", "need to"],
        ["this is", "clearly", "obviously"],
    ],
    "constructive": [
        ["instead", "better", "improve"],
        ["alternative", "approach", "solution"],
    ],
    "encouraging": [
        ["great", "excellent", "nice work"],
        ["good", "well done", "\U0001F44D"],
    ],
    "technical": [
        ["function", "method", "class"],
        ["api", "database", "algorithm"],
    ],
    "mentoring": [
        ["learn", "understand", "explain"],
        ["tutorial", "documentation", "guide"],
    ],
}

_STRIP_PUNCTUATION = re.compile(r"[.,/#!$%^&*;:{}=_`\"~()?\[\]<>|\\+]")


@dataclass(frozen=True)
class LexiconSentiment:
    score: float
    comparative: float
    positive: List[str] = field(default_factory=list)
    negative: List[str] = field(default_factory=list)
    sentiment: str = NEUTRAL
    intensity: str = "low"
    personality_traits: Dict[str, int] = field(default_factory=dict)
    word_count: int = 0
    emoji_count: int = 0

    def to_dict(self) -> dict:
        return {
            "score": self.score,
            "comparative": self.comparative,
            "positive": list(self.positive),
            "negative": list(self.negative),
            "sentiment": self.sentiment,
            "intensity": self.intensity,
            "personalityTraits": dict(self.personality_traits),
            "wordCount": self.word_count,
            "emojiCount": self.emoji_count,
        }


def count_emoji(text: str) -> int:
    count = 0
    for char in text:
        code = ord(char)
        if any(low <= code <= high for low, high in EMOJI_RANGES):
            count += 1
    return count


def classify_comparative(comparative: float) -> tuple[str, str]:
    """Map a comparative score to (sentiment tier, intensity)."""
    if comparative > STRONG_THRESHOLD:
        return VERY_POSITIVE, "high"
    if comparative > MILD_THRESHOLD:
        return POSITIVE, "medium"
    if comparative < -STRONG_THRESHOLD:
        return VERY_NEGATIVE, "high"
    if comparative < -MILD_THRESHOLD:
        return NEGATIVE, "medium"
    return NEUTRAL, "low"


def extract_review_traits(text: str) -> Dict[str, int]:
    """Score the six reviewer traits and normalise them to 0-100."""
    lower = text.lower()
    raw = {
        trait: sum(1 for group in groups if any(phrase in lower for phrase in group))
        for trait, groups in TRAIT_GROUPS.items()
    }
    top = max(raw.values())
    if top == 0:
        return raw
    return {trait: round(value / top * 100) for trait, value in raw.items()}


class LexiconSentimentStrategy(SentimentStrategy):
    """Five-tier comparative scorer over the VADER valence lexicon."""

    name = "lexicon"

    def __init__(self, lexicon: Optional[Dict[str, float]] = None):
        if lexicon is None:
            lexicon = SentimentIntensityAnalyzer().lexicon
        self.lexicon = lexicon

    def tokenize(self, text: str) -> List[str]:
        cleaned = _STRIP_PUNCTUATION.sub("", text.lower().replace("\n", " "))
        return [token for token in cleaned.split(" ") if token]

    def score_tokens(self, tokens: List[str]) -> tuple[float, List[str], List[str]]:
        total = 0.0
        positive: List[str] = []
        negative: List[str] = []
        for index, token in enumerate(tokens):
            valence = self.lexicon.get(token)
            if valence is None:
                continue
            if index > 0 and tokens[index - 1] in NEGATORS:
                valence = -valence
            total += valence
            if valence > 0:
                positive.append(token)
            elif valence < 0:
                negative.append(token)
        return total, positive, negative

    def analyze(self, text: str) -> LexiconSentiment:
        text = text or ""
        tokens = self.tokenize(text)
        score, positive, negative = self.score_tokens(tokens)
        comparative = score / len(tokens) if tokens else 0.0
        sentiment, intensity = classify_comparative(comparative)

        return LexiconSentiment(
            score=score,
            comparative=comparative,
            positive=positive,
            negative=negative,
            sentiment=sentiment,
            intensity=intensity,
            personality_traits=extract_review_traits(text),
            word_count=len(text.split(" ")),
            emoji_count=count_emoji(text),
        )
