"""
Reviewer personality analysis.

Provides:
- Six keyword-presence communication traits per comment
- Emotion tags per comment
- Aggregate maintainer personality (strengths, improvements, style, burnout risk)
"""

from dataclasses import asdict, dataclass, field
from typing import Dict, Iterable, List, Sequence

from steward.analysis.sentiment.base import NEGATIVE, NEUTRAL, POSITIVE

TRAIT_KEYWORDS: Dict[str, List[str]] = {
    "helpfulness": ["help", "assist", "support", "guide", "explain"],
    "constructiveness": ["improve", "better", "enhance", "suggest", "recommend"],
    "professionalism": ["please", "thank", "appreciate", "respect", "consider"],
    "empathy": ["understand", "feel", "experience", "difficult", "challenging"],
    "clarity": ["clear", "simple", "explain", "detail", "specific"],
    "encouragement": ["great", "good", "nice", "excellent", "awesome"],
}

EMOTION_KEYWORDS: Dict[str, List[str]] = {
    "positive": ["great", "excellent", "awesome", "amazing", "fantastic", "wonderful", "love", "like"],
    "negative": ["bad", "terrible", "awful", "horrible", "wrong", "broken", "issue", "problem"],
    "encouraging": ["good", "nice", "perfect", "brilliant", "outstanding", "superb", "thanks"],
    "constructive": ["improve", "better", "enhance", "fix", "resolve", "suggest", "recommend"],
    "professional": ["please", "consider", "review", "check", "verify", "confirm", "approve"],
}

STRENGTH_THRESHOLD = 0.7
IMPROVEMENT_THRESHOLD = 0.5

STRENGTHS = {
    "helpfulness": "Highly helpful and supportive",
    "constructiveness": "Constructive feedback provider",
    "professionalism": "Professional communication style",
    "empathy": "Empathetic and understanding",
    "clarity": "Clear and concise communicator",
    "encouragement": "Encouraging and positive",
}

IMPROVEMENTS = {
    "helpfulness": "Provide more helpful guidance",
    "constructiveness": "Focus on constructive feedback",
    "professionalism": "Maintain professional tone",
    "empathy": "Show more empathy in reviews",
    "clarity": "Improve clarity of communication",
    "encouragement": "Add more encouragement",
}

COMMUNICATION_STYLES = {
    "helpfulness": "Supportive and guiding",
    "constructiveness": "Solution-focused and improvement-oriented",
    "professionalism": "Formal and structured",
    "empathy": "Understanding and considerate",
    "clarity": "Clear and direct",
    "encouragement": "Positive and motivating",
}

DEFAULT_STRENGTH = "Consistent reviewer"
DEFAULT_IMPROVEMENT = "Continue current approach"
DEFAULT_STYLE = "Balanced and comprehensive"

BURNOUT_MIN_HISTORY = 10
BURNOUT_WINDOW = 20
LOW_ENCOURAGEMENT = 0.3

BURNOUT_LOW = "LOW"
BURNOUT_MEDIUM = "MEDIUM"
BURNOUT_HIGH = "HIGH"


@dataclass(frozen=True)
class PersonalityTraits:
    """Six communication traits, each in [0, 1]."""
    helpfulness: float = 0.5
    constructiveness: float = 0.5
    professionalism: float = 0.5
    empathy: float = 0.5
    clarity: float = 0.5
    encouragement: float = 0.5

    def to_dict(self) -> Dict[str, float]:
        return asdict(self)


@dataclass(frozen=True)
class SentimentResult:
    """Category and score of a comment together with its emotions and traits."""
    sentiment: str
    score: float
    confidence: float
    emotions: List[str] = field(default_factory=list)
    personality: PersonalityTraits = field(default_factory=PersonalityTraits)

    def to_dict(self) -> dict:
        return {
            "sentiment": self.sentiment,
            "score": self.score,
            "confidence": self.confidence,
            "emotions": list(self.emotions),
            "personality": self.personality.to_dict(),
        }


@dataclass(frozen=True)
class MaintainerPersonality:
    overall_score: float
    traits: PersonalityTraits
    strengths: List[str]
    improvements: List[str]
    communication_style: str
    burnout_risk: str

    def to_dict(self) -> dict:
        return {
            "overallScore": self.overall_score,
            "traits": self.traits.to_dict(),
            "strengths": list(self.strengths),
            "improvements": list(self.improvements),
            "communicationStyle": self.communication_style,
            "burnoutRisk": self.burnout_risk,
        }


DEFAULT_PERSONALITY = MaintainerPersonality(
    overall_score=0.0,
    traits=PersonalityTraits(),
    strengths=[DEFAULT_STRENGTH],
    improvements=[DEFAULT_IMPROVEMENT],
    communication_style=DEFAULT_STYLE,
    burnout_risk=BURNOUT_LOW,
)

DEFAULT_SENTIMENT = SentimentResult(sentiment=NEUTRAL, score=0.0, confidence=0.5)


def _mean(values: Sequence[float]) -> float:
    return sum(values) / len(values) if values else 0.0


def trait_score(text: str, keywords: Sequence[str]) -> float:
    """Fraction of keywords present in the lowercased text, capped at 1."""
    matches = sum(1 for keyword in keywords if keyword in text)
    return min(matches / len(keywords), 1.0)


def extract_traits(text: str) -> PersonalityTraits:
    lower = (text or "").lower()
    return PersonalityTraits(**{
        trait: trait_score(lower, keywords) for trait, keywords in TRAIT_KEYWORDS.items()
    })


def extract_emotions(text: str) -> List[str]:
    lower = (text or "").lower()
    return [
        emotion
        for emotion, keywords in EMOTION_KEYWORDS.items()
        if any(keyword in lower for keyword in keywords)
    ]


def identify_strengths(traits: PersonalityTraits) -> List[str]:
    values = traits.to_dict()
    strengths = [msg for trait, msg in STRENGTHS.items() if values[trait] > STRENGTH_THRESHOLD]
    return strengths or [DEFAULT_STRENGTH]


def identify_improvements(traits: PersonalityTraits) -> List[str]:
    values = traits.to_dict()
    improvements = [
        msg for trait, msg in IMPROVEMENTS.items() if values[trait] < IMPROVEMENT_THRESHOLD
    ]
    return improvements or [DEFAULT_IMPROVEMENT]


def communication_style(traits: PersonalityTraits) -> str:
    values = traits.to_dict()
    # Ties go to the later trait in declaration order
    dominant = None
    for trait, value in values.items():
        if dominant is None or not values[dominant] > value:
            dominant = trait
    return COMMUNICATION_STYLES.get(dominant, DEFAULT_STYLE)


def assess_burnout_risk(history: Sequence[SentimentResult]) -> str:
    if len(history) < BURNOUT_MIN_HISTORY:
        return BURNOUT_LOW

    recent = list(history)[-BURNOUT_WINDOW:]
    negative_ratio = sum(1 for r in recent if r.sentiment == NEGATIVE) / len(recent)
    low_encouragement = sum(
        1 for r in recent if r.personality.encouragement < LOW_ENCOURAGEMENT
    ) / len(recent)

    if negative_ratio > 0.6 or low_encouragement > 0.7:
        return BURNOUT_HIGH
    if negative_ratio > 0.4 or low_encouragement > 0.5:
        return BURNOUT_MEDIUM
    return BURNOUT_LOW


def calculate_maintainer_personality(
    history: Iterable[SentimentResult],
) -> MaintainerPersonality:
    """Aggregate a review history into a maintainer personality profile."""
    history = list(history)
    if not history:
        return DEFAULT_PERSONALITY

    traits = PersonalityTraits(**{
        trait: _mean([getattr(r.personality, trait) for r in history])
        for trait in TRAIT_KEYWORDS
    })

    return MaintainerPersonality(
        overall_score=_mean([r.score for r in history]),
        traits=traits,
        strengths=identify_strengths(traits),
        improvements=identify_improvements(traits),
        communication_style=communication_style(traits),
        burnout_risk=assess_burnout_risk(history),
    )


REVIEW_STYLE_KEYWORDS: Dict[str, List[str]] = {
    "helpful": ["helpful", "useful", "great", "excellent", "thanks", "appreciate"],
    "direct": ["direct", "straightforward", "clear", "obvious", "simple"],
    "constructive": ["suggest", "consider", "improve", "better", "enhance", "optimize"],
}


def review_style_shares(comments: Sequence[str]) -> Dict[str, int]:
    """Percentage (0-100) of comments that mention each review-style keyword group."""
    total = len(comments)
    shares = {}
    for style, keywords in REVIEW_STYLE_KEYWORDS.items():
        hits = sum(1 for c in comments if any(k in c.lower() for k in keywords))
        shares[style] = round(hits / total * 100) if total else 0
    return shares


def review_insights(history: Sequence[SentimentResult]) -> dict:
    """Insights, recommendations and communication patterns for a review history."""
    if not history:
        return {
            "insights": [],
            "recommendations": [],
            "patterns": [],
            "message": "Not enough data for analysis",
        }

    personality = calculate_maintainer_personality(history)
    insights: List[str] = []
    recommendations: List[str] = []

    positive_ratio = sum(1 for r in history if r.sentiment == POSITIVE) / len(history)
    negative_ratio = sum(1 for r in history if r.sentiment == NEGATIVE) / len(history)

    if positive_ratio > 0.7:
        insights.append("You maintain a very positive tone in your reviews")
    elif negative_ratio > 0.4:
        insights.append("Your reviews tend to be more critical")
        recommendations.append("Consider adding more positive reinforcement")

    if personality.traits.helpfulness < 0.4:
        recommendations.append("Try to provide more helpful guidance in reviews")
    if personality.traits.encouragement < 0.4:
        recommendations.append("Add more encouraging language to boost contributor morale")

    if personality.burnout_risk == BURNOUT_HIGH:
        insights.append("High burnout risk detected - consider taking breaks")
        recommendations.append("Take regular breaks and focus on positive interactions")

    patterns = [
        f"Communication style: {personality.communication_style}",
        f"Overall score: {personality.overall_score * 100:.0f}%",
        f"Burnout risk: {personality.burnout_risk}",
    ]

    return {
        "insights": insights,
        "recommendations": recommendations,
        "patterns": patterns,
        "personality": personality.to_dict(),
    }
