"""
Response envelopes and shared request/response schemas.

Every route answers ``{"success": true, "data": ...}`` on success and
``{"error": "..."}`` on failure.
"""

from typing import Any, Generic, Optional, TypeVar

from pydantic import BaseModel, Field

T = TypeVar("T")


class Envelope(BaseModel, Generic[T]):
    success: bool = True
    data: T


class ErrorResponse(BaseModel):
    error: str


def ok(data: Any) -> dict:
    return {"success": True, "data": data}


# ---------- Sentiment ----------

class PersonalityTraitsSchema(BaseModel):
    helpfulness: float
    constructiveness: float
    professionalism: float
    empathy: float
    clarity: float
    encouragement: float


class SentimentResultSchema(BaseModel):
    sentiment: str
    score: float
    confidence: float
    emotions: list[str]
    personality: PersonalityTraitsSchema


class BatchAnalysisSchema(BaseModel):
    analyses: list[SentimentResultSchema]


class LexiconSentimentSchema(BaseModel):
    score: float
    comparative: float
    positive: list[str]
    negative: list[str]
    sentiment: str
    intensity: str
    personalityTraits: dict[str, int]
    wordCount: int
    emojiCount: int


class AnalyzeTextRequest(BaseModel):
    text: Optional[str] = None


class AnalyzeCommentRequest(BaseModel):
    commentText: Optional[str] = None


class BatchAnalyzeRequest(BaseModel):
    comments: Optional[Any] = None


# ---------- Maintainer ----------

class SyncRequest(BaseModel):
    githubToken: Optional[str] = None


class SyncResult(BaseModel):
    message: str
    repositories: int
    prReviews: int
    issueTriage: int


class MessageResponse(BaseModel):
    message: str


class ImpactMetricsRequest(BaseModel):
    newContributors: int = 0
    returningContributors: int = 0
    contributorRetentionRate: float = 0.0
    contributorGrowthRate: float = 0.0
    issuesResolved: float = 0.0
    prsMerged: float = 0.0
    activityGrowth: float = 0.0
    repositoryHealthScore: float = 0.0
    mentorshipScore: float = 0.0
    contributorQualityImprovement: float = 0.0
    longTermImpactScore: float = 0.0
    overallImpactScore: float = 0.0
    predictedLongTermImpact: float = 0.0


class StoreImpactMetricsRequest(BaseModel):
    metrics: Optional[ImpactMetricsRequest] = None
    period: Optional[str] = None


class RepositorySnapshotRequest(BaseModel):
    repositoryId: Optional[int] = None
    metrics: dict[str, float] = Field(default_factory=dict)


# ---------- Service ----------

class HealthResponse(BaseModel):
    status: str
    timestamp: str
    version: str
