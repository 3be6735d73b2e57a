"""
Metrics emission system for observability.

Provides structured metrics for:
- GitHub API requests and failures
- Cache hits and misses
- Sentiment analyses
- Impact calculations and syncs

Metrics are emitted to:
1. Python logging (immediate visibility)
2. In-memory buffer (API aggregation)
"""
import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Optional, Dict, Any, List

logger = logging.getLogger(__name__)


@dataclass
class MetricEvent:
    """Structured metric event."""
    timestamp: datetime
    category: str          # "github", "cache", "sentiment", "impact", "sync"
    event_type: str        # "request", "hit", "comment_analyzed", etc.
    subject: Optional[str]  # username, repository or cache key
    value: float
    metadata: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "timestamp": self.timestamp.isoformat(),
            "category": self.category,
            "event_type": self.event_type,
            "subject": self.subject,
            "value": self.value,
            "metadata": self.metadata
        }


class MetricsEmitter:
    """
    Emit structured metrics to the log and an in-memory buffer.
    """

    # Category constants
    CATEGORY_GITHUB = "github"
    CATEGORY_CACHE = "cache"
    CATEGORY_SENTIMENT = "sentiment"
    CATEGORY_IMPACT = "impact"
    CATEGORY_SYNC = "sync"

    def __init__(self, buffer_size: int = 1000):
        """
        Initialize metrics emitter.

        Args:
            buffer_size: Max events to keep in memory buffer
        """
        self.buffer_size = buffer_size
        self._buffer: List[MetricEvent] = []
        self._enabled = True

    def enable(self) -> None:
        """Enable metrics emission."""
        self._enabled = True

    def disable(self) -> None:
        """Disable metrics emission (for testing)."""
        self._enabled = False

    def emit(
        self,
        category: str,
        event_type: str,
        value: float = 1.0,
        subject: str = None,
        metadata: dict = None
    ) -> Optional[MetricEvent]:
        """
        Emit a metric event.

        Args:
            category: Event category (github, cache, sentiment, impact, sync)
            event_type: Specific event type within category
            value: Numeric value (1.0/0.0 for boolean, actual value for numeric)
            subject: Optional username, repository or cache key
            metadata: Additional context as key-value pairs

        Returns:
            The emitted MetricEvent
        """
        if not self._enabled:
            return None

        event = MetricEvent(
            timestamp=datetime.now(timezone.utc),
            category=category,
            event_type=event_type,
            subject=subject,
            value=value,
            metadata=metadata or {}
        )

        meta_str = f" {metadata}" if metadata else ""
        logger.debug(
            f"METRIC [{category}/{event_type}] "
            f"subject={subject} value={value}{meta_str}"
        )

        self._buffer.append(event)
        if len(self._buffer) > self.buffer_size:
            self._buffer = self._buffer[-self.buffer_size:]

        return event

    # =========================================================================
    # Convenience methods for common metrics
    # =========================================================================

    def github_request(self, endpoint: str, status_code: int, duration_ms: float) -> MetricEvent:
        """Record a completed GitHub API request."""
        return self.emit(
            self.CATEGORY_GITHUB, "request", duration_ms,
            subject=endpoint,
            metadata={"status_code": status_code, "duration_ms": round(duration_ms, 2)}
        )

    def github_failure(self, endpoint: str, error: str) -> MetricEvent:
        """Record a failed GitHub API request."""
        return self.emit(
            self.CATEGORY_GITHUB, "failure", 1.0,
            subject=endpoint,
            metadata={"error": error}
        )

    def cache_lookup(self, key: str, hit: bool) -> MetricEvent:
        """Record a cache hit or miss."""
        return self.emit(
            self.CATEGORY_CACHE, "hit" if hit else "miss", 1.0 if hit else 0.0,
            subject=key
        )

    def comment_analyzed(self, strategy: str, sentiment: str, cached: bool) -> MetricEvent:
        """Record a single comment analysis."""
        return self.emit(
            self.CATEGORY_SENTIMENT, "comment_analyzed", 1.0,
            metadata={"strategy": strategy, "sentiment": sentiment, "cached": cached}
        )

    def impact_calculated(self, username: str, overall_score: float,
                          repositories: int) -> MetricEvent:
        """Record an impact analysis."""
        return self.emit(
            self.CATEGORY_IMPACT, "calculated", overall_score,
            subject=username,
            metadata={"repositories": repositories}
        )

    def sync_completed(self, username: str, repositories: int, pr_reviews: int,
                       issue_triage: int, duration_ms: float) -> MetricEvent:
        """Record a GitHub sync completion."""
        return self.emit(
            self.CATEGORY_SYNC, "completed", repositories,
            subject=username,
            metadata={
                "pr_reviews": pr_reviews,
                "issue_triage": issue_triage,
                "duration_ms": round(duration_ms, 2)
            }
        )

    # =========================================================================
    # Aggregation methods
    # =========================================================================

    def get_buffer(self) -> List[MetricEvent]:
        """Get buffered events (for API)."""
        return list(self._buffer)

    def get_summary(self, hours: int = 24) -> dict:
        """
        Get aggregated summary of recent metrics.

        Args:
            hours: How many hours of data to include

        Returns:
            Dictionary with aggregated metrics
        """
        cutoff = datetime.now(timezone.utc) - timedelta(hours=hours)
        recent = [e for e in self._buffer if e.timestamp >= cutoff]

        by_category: Dict[str, int] = {}
        by_event: Dict[str, int] = {}

        for event in recent:
            by_category[event.category] = by_category.get(event.category, 0) + 1
            key = f"{event.category}/{event.event_type}"
            by_event[key] = by_event.get(key, 0) + 1

        hits = by_event.get("cache/hit", 0)
        lookups = hits + by_event.get("cache/miss", 0)

        return {
            "period_hours": hours,
            "total_events": len(recent),
            "by_category": by_category,
            "by_event": by_event,
            "cache_hit_rate": hits / lookups if lookups > 0 else None,
            "github_requests": by_event.get("github/request", 0),
            "github_failures": by_event.get("github/failure", 0),
            "comments_analyzed": by_event.get("sentiment/comment_analyzed", 0),
            "impact_calculations": by_event.get("impact/calculated", 0),
            "syncs_completed": by_event.get("sync/completed", 0),
        }

    def clear_buffer(self) -> int:
        """Clear buffer and return count of cleared events."""
        count = len(self._buffer)
        self._buffer = []
        return count


# Global singleton instance
metrics = MetricsEmitter()
