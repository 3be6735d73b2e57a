"""
Trend and heatmap aggregation over scored review text.

Provides:
- Calendar period keys (ISO week, month, year, day)
- Sparse per-period sentiment trends
- A fixed 30-day daily trend window, zero-filled
- Per-repository sentiment heatmaps
- Per-trait personality insights (average, direction, consistency)
"""

import math
from collections import OrderedDict
from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Union

import numpy as np
import pandas as pd

from steward.analysis.sentiment.base import NEGATIVE, NEUTRAL, POSITIVE
from steward.analysis.sentiment.lexicon import (
    NEGATIVE as LEXICON_NEGATIVE,
    POSITIVE as LEXICON_POSITIVE,
    TRAIT_GROUPS,
    VERY_NEGATIVE,
    VERY_POSITIVE,
    LexiconSentimentStrategy,
)

TIMEFRAMES = ("day", "week", "month", "year")
DAILY_WINDOW = 30
TREND_BAND = 5

Timestamp = Union[datetime, date, str]


@dataclass(frozen=True)
class TextSample:
    """A comment body with when and where it was written."""
    text: str
    timestamp: Optional[Timestamp] = None
    repository: Optional[str] = None


@dataclass(frozen=True)
class ScoredSample:
    """A scored result (anything with .sentiment and .score) with its date and repository."""
    result: object
    timestamp: Timestamp
    repository: Optional[str] = None


@dataclass(frozen=True)
class SentimentTrend:
    period: str
    positive: int
    neutral: int
    negative: int
    average_score: float

    def to_dict(self) -> dict:
        return {
            "period": self.period,
            "positive": self.positive,
            "neutral": self.neutral,
            "negative": self.negative,
            "averageScore": self.average_score,
        }


@dataclass(frozen=True)
class RepositoryHeatmapEntry:
    repository: str
    sentiment: int  # -1, 0, 1
    review_count: int
    average_score: float

    def to_dict(self) -> dict:
        return {
            "repository": self.repository,
            "sentiment": self.sentiment,
            "reviewCount": self.review_count,
            "averageScore": self.average_score,
        }


def _mean(values: Sequence[float]) -> float:
    return sum(values) / len(values) if values else 0.0


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def to_datetime(value: Timestamp) -> datetime:
    """Coerce a datetime, date or ISO-8601 string (``Z`` suffix allowed) to a datetime."""
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    return datetime.fromisoformat(str(value).replace("Z", "+00:00"))


def utc_date(value: Timestamp) -> date:
    moment = to_datetime(value)
    if moment.tzinfo is not None:
        moment = moment.astimezone(timezone.utc)
    return moment.date()


def iso_week_key(value: Timestamp) -> str:
    """ISO-8601 week key, e.g. 2024-01-01 -> ``2024-1``."""
    iso_year, iso_week, _ = utc_date(value).isocalendar()
    return f"{iso_year}-{iso_week}"


def period_key(value: Timestamp, timeframe: str) -> str:
    """Calendar bucket of a timestamp, taken on its UTC date."""
    day = utc_date(value)
    if timeframe == "week":
        return iso_week_key(day)
    if timeframe == "month":
        return f"{day.year:04d}-{day.month:02d}"
    if timeframe == "year":
        return f"{day.year:04d}"
    return day.isoformat()


def sentiment_trends(
    samples: Iterable[ScoredSample], timeframe: str = "month"
) -> List[SentimentTrend]:
    """Group scored samples by calendar period; only periods with samples are emitted."""
    grouped: Dict[str, List[object]] = {}
    for sample in samples:
        grouped.setdefault(period_key(sample.timestamp, timeframe), []).append(sample.result)

    trends = []
    for period, results in grouped.items():
        trends.append(SentimentTrend(
            period=period,
            positive=sum(1 for r in results if r.sentiment == POSITIVE),
            neutral=sum(1 for r in results if r.sentiment == NEUTRAL),
            negative=sum(1 for r in results if r.sentiment == NEGATIVE),
            average_score=_mean([r.score for r in results]),
        ))
    return sorted(trends, key=lambda t: t.period)


def score_samples(samples: Iterable[TextSample], strategy) -> List[ScoredSample]:
    return [
        ScoredSample(strategy.analyze(s.text), s.timestamp, s.repository)
        for s in samples
        if s.timestamp is not None
    ]


def tier_bucket(tier: str) -> str:
    if tier in (LEXICON_POSITIVE, VERY_POSITIVE):
        return "positive"
    if tier in (LEXICON_NEGATIVE, VERY_NEGATIVE):
        return "negative"
    return "neutral"


def daily_sentiment_trends(
    samples: Iterable[TextSample],
    strategy: LexiconSentimentStrategy,
    today: Optional[date] = None,
    days: int = DAILY_WINDOW,
) -> List[dict]:
    """
    Exactly ``days`` consecutive daily buckets ending at ``today``, oldest first.

    Days without samples are zero-filled. ``sentiment`` is the mean comparative
    score of that day's texts.
    """
    end = today or datetime.now(timezone.utc).date()
    window = [d.date() for d in pd.date_range(end=pd.Timestamp(end), periods=days, freq="D")]

    rows = []
    for sample in samples:
        if sample.timestamp is None:
            continue
        day = utc_date(sample.timestamp)
        if day < window[0] or day > window[-1]:
            continue
        analysis = strategy.analyze(sample.text or "")
        bucket = tier_bucket(analysis.sentiment)
        rows.append({
            "date": day,
            "comparative": analysis.comparative,
            "positive": int(bucket == "positive"),
            "negative": int(bucket == "negative"),
            "neutral": int(bucket == "neutral"),
        })

    columns = ["sentiment", "count", "positive", "negative", "neutral"]
    if rows:
        frame = pd.DataFrame(rows)
        summary = frame.groupby("date").agg(
            sentiment=("comparative", "mean"),
            count=("comparative", "size"),
            positive=("positive", "sum"),
            negative=("negative", "sum"),
            neutral=("neutral", "sum"),
        )
        summary = summary.reindex(window, fill_value=0)
    else:
        summary = pd.DataFrame(0, index=window, columns=columns)

    return [
        {
            "date": day.isoformat(),
            "sentiment": float(row["sentiment"]),
            "count": int(row["count"]),
            "positive": int(row["positive"]),
            "negative": int(row["negative"]),
            "neutral": int(row["neutral"]),
        }
        for day, row in summary.iterrows()
    ]


def categorize_score(score: float, threshold: float = 0.0) -> int:
    """Collapse a score to 1 / 0 / -1 around a symmetric neutral band."""
    if score > threshold:
        return 1
    if score < -threshold:
        return -1
    return 0


def group_by_repository(samples: Iterable[ScoredSample]) -> "OrderedDict[str, List[object]]":
    groups: "OrderedDict[str, List[object]]" = OrderedDict()
    for sample in samples:
        groups.setdefault(sample.repository or "unknown", []).append(sample.result)
    return groups


def sentiment_heatmap(
    repositories: Mapping[str, Sequence[object]], threshold: float = 0.0
) -> List[RepositoryHeatmapEntry]:
    """One entry per repository with the categorical sign of its mean score."""
    entries = []
    for name, results in repositories.items():
        average = _mean([r.score for r in results])
        entries.append(RepositoryHeatmapEntry(
            repository=name,
            sentiment=categorize_score(average, threshold),
            review_count=len(results),
            average_score=average,
        ))
    return entries


def lexicon_heatmap(
    samples: Iterable[TextSample], strategy: LexiconSentimentStrategy
) -> List[dict]:
    """Per-repository tier counts and average comparative score."""
    repos: "OrderedDict[str, dict]" = OrderedDict()
    scores: Dict[str, List[float]] = {}
    for sample in samples:
        name = sample.repository or "unknown"
        entry = repos.setdefault(name, {
            "repository": name,
            "totalReviews": 0,
            "positive": 0,
            "negative": 0,
            "neutral": 0,
            "averageSentiment": 0.0,
        })
        analysis = strategy.analyze(sample.text or "")
        entry["totalReviews"] += 1
        entry[tier_bucket(analysis.sentiment)] += 1
        scores.setdefault(name, []).append(analysis.comparative)

    for name, entry in repos.items():
        entry["averageSentiment"] = _mean(scores.get(name, []))
    return list(repos.values())


def most_positive_repository(heatmap: Sequence[dict]) -> Optional[dict]:
    best = None
    for entry in heatmap:
        if best is None or entry["averageSentiment"] > best["averageSentiment"]:
            best = entry
    return best


def most_negative_repository(heatmap: Sequence[dict]) -> Optional[dict]:
    worst = None
    for entry in heatmap:
        if worst is None or entry["averageSentiment"] < worst["averageSentiment"]:
            worst = entry
    return worst


def trend_direction(scores: Sequence[float], band: float = TREND_BAND) -> str:
    """Compare the means of the first and second halves of a series."""
    if len(scores) < 2:
        return "stable"
    middle = len(scores) // 2
    first = _mean(scores[:middle])
    second = _mean(scores[middle:])
    if second > first + band:
        return "increasing"
    if second < first - band:
        return "decreasing"
    return "stable"


def consistency(scores: Sequence[float]) -> int:
    """Rounded population standard deviation; lower is more consistent."""
    if len(scores) < 2:
        return 100
    return round_half_up(float(np.std(np.asarray(scores, dtype=float))))


def personality_insights(
    samples: Iterable[TextSample], strategy: LexiconSentimentStrategy
) -> Dict[str, dict]:
    series: Dict[str, List[float]] = {}
    for sample in samples:
        traits = strategy.analyze(sample.text or "").personality_traits
        for trait, value in traits.items():
            series.setdefault(trait, []).append(value)

    return {
        trait: {
            "average": round_half_up(_mean(series.get(trait, []))),
            "trend": trend_direction(series.get(trait, [])),
            "consistency": consistency(series.get(trait, [])),
        }
        for trait in TRAIT_GROUPS
    }


def average_comparative(samples: Iterable[TextSample], strategy: LexiconSentimentStrategy) -> float:
    return _mean([strategy.analyze(s.text or "").comparative for s in samples])
