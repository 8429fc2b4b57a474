"""
Pydantic data models for estimation IO.

Attributes are snake_case; every model serializes with camelCase aliases so the
JSON handed to the display layer keeps the shapes it already consumes.
"""
from __future__ import annotations
import math
from pydantic import BaseModel, ConfigDict, Field, StrictBool, computed_field, field_validator
from pydantic.alias_generators import to_camel
from typing import List, Optional, Literal

Complexity = Literal["simple", "moderate", "complex"]
Pace = Literal["fast", "moderate", "slow"]
VideoType = Literal["lecture", "demo", "interactive", "unknown"]
VideoFormat = Literal["mp4", "webm", "youtube", "vimeo", "other"]
ContentType = Literal["lesson", "chapter", "section", "quiz", "assessment"]
TimerVariant = Literal["countdown", "stopwatch", "progress"]
TimerContext = Literal["quiz", "ai", "learning", "general"]

VIDEO_TYPES = ("lecture", "demo", "interactive", "unknown")
VIDEO_FORMATS = ("mp4", "webm", "youtube", "vimeo", "other")
CONTENT_TYPES = ("lesson", "chapter", "section", "quiz", "assessment")


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)


# text

class WordsPerMinute(CamelModel):
    slow: float = 150
    average: float = 200
    fast: float = 250

class ComplexityMultipliers(CamelModel):
    simple: float = 1.2
    moderate: float = 1.0
    complex: float = 0.8

class ReadingSpeedConfig(CamelModel):
    words_per_minute: WordsPerMinute = Field(default_factory=WordsPerMinute)
    complexity_multipliers: ComplexityMultipliers = Field(default_factory=ComplexityMultipliers)

class ReadingTimeBreakdown(CamelModel):
    base_time: int
    complexity_adjustment: int
    total_time: int

class TextAnalysis(CamelModel):
    word_count: int = Field(ge=0)
    character_count: int = Field(ge=0)
    complexity: Complexity
    estimated_reading_time: int = Field(ge=0)
    reading_time_breakdown: ReadingTimeBreakdown


# video

class VideoMetadata(CamelModel):
    url: str
    duration: Optional[float] = None
    title: Optional[str] = None
    type: Optional[VideoType] = None
    format: Optional[VideoFormat] = None

    @field_validator("duration", mode="before")
    @classmethod
    def _soft_duration(cls, v):
        # unparseable or non-positive durations fall back to estimation
        if v is None or isinstance(v, bool):
            return None
        try:
            d = float(v)
        except (TypeError, ValueError):
            return None
        if not math.isfinite(d) or d <= 0:
            return None
        return d

    @field_validator("type", mode="before")
    @classmethod
    def _soft_type(cls, v):
        return v if v in VIDEO_TYPES else None

    @field_validator("format", mode="before")
    @classmethod
    def _soft_format(cls, v):
        return v if v in VIDEO_FORMATS else None

class EngagementFactors(CamelModel):
    pause_frequency: float = Field(ge=0, le=1)
    replay_likelihood: float = Field(ge=0, le=1)
    interaction_time: float = Field(ge=0)

class VideoAnalysis(CamelModel):
    duration: float = Field(gt=0)
    type: VideoType
    format: VideoFormat
    is_duration_estimated: bool
    engagement_factors: EngagementFactors


# mixed content

class MixedContent(CamelModel):
    text: Optional[str] = None
    videos: Optional[List[VideoMetadata]] = None
    title: Optional[str] = None
    content_type: Optional[ContentType] = None

    @field_validator("content_type", mode="before")
    @classmethod
    def _soft_content_type(cls, v):
        if isinstance(v, str) and v.strip().lower() in CONTENT_TYPES:
            return v.strip().lower()
        return None

class ContentBreakdown(CamelModel):
    text: float = 0
    video: float = 0
    interaction: float = 0

    @computed_field
    @property
    def total(self) -> float:
        return self.text + self.video + self.interaction

class LearningRecommendations(CamelModel):
    suggested_breaks: int = Field(ge=0)
    estimated_sessions: int = Field(ge=1)
    recommended_pace: Pace

class ContentAnalysis(CamelModel):
    breakdown: ContentBreakdown
    confidence: float = Field(ge=0, le=0.95)
    overall_complexity: Complexity
    text_analysis: Optional[TextAnalysis] = None
    video_analyses: Optional[List[VideoAnalysis]] = None
    learning_recommendations: LearningRecommendations

    @computed_field(alias="totalEstimatedTime")
    @property
    def total_estimated_time(self) -> float:
        return self.breakdown.total


# personalization

class UserProfile(CamelModel):
    reading_speed: Optional[float] = Field(default=None, gt=0, allow_inf_nan=False)
    completion_rate: Optional[float] = Field(default=None, ge=0.5, le=2.0)
    learning_pace: Optional[Pace] = None
    experience_level: Optional[Literal["beginner", "intermediate", "advanced"]] = None

class EstimationConfig(CamelModel):
    include_interaction_time: StrictBool = True
    include_break_time: StrictBool = True
    confidence_threshold: float = Field(default=0.6, ge=0, le=1, allow_inf_nan=False, strict=True)
    use_personalization: StrictBool = True

class EstimateBreakdown(CamelModel):
    reading: float = 0
    video: float = 0
    interaction: float = 0
    breaks: float = 0

class EstimateRecommendations(CamelModel):
    suggested_sessions: int = Field(ge=1)
    session_length: int = Field(gt=0)
    break_frequency: int = Field(ge=0)
    pace: Pace

class TimeEstimate(CamelModel):
    breakdown: EstimateBreakdown
    confidence: float = Field(ge=0, le=0.95)
    is_personalized: bool
    recommendations: EstimateRecommendations
    meets_confidence_threshold: bool = True

    @computed_field
    @property
    def total(self) -> float:
        b = self.breakdown
        return b.reading + b.video + b.interaction + b.breaks


# progress tracking

class TimerState(CamelModel):
    time: float
    is_running: bool
    is_paused: bool
    is_completed: bool
    progress: float = Field(ge=0, le=100)

class DurationValidation(CamelModel):
    is_valid: bool
    duration: float
    error: Optional[str] = None
