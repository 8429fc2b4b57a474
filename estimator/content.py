"""
Mixed-content aggregation: merges text and video analyses into one
ContentAnalysis with interaction time, confidence and coarse recommendations.
"""
from __future__ import annotations
import logging
import math
import numpy as np
from typing import List, Optional
from estimator.errors import InvalidContentError
from estimator.models import (
    Complexity,
    ContentAnalysis,
    ContentBreakdown,
    LearningRecommendations,
    MixedContent,
    TextAnalysis,
    VideoAnalysis,
)
from estimator.text import analyze_text, is_valid_text_content
from estimator.utils import round_half_up
from estimator.video import analyze_video, calculate_total_video_time, is_valid_video_metadata

logger = logging.getLogger(__name__)

INTERACTION_MULTIPLIERS = {
    "lesson": 0.15,
    "chapter": 0.20,
    "section": 0.10,
    "quiz": 0.25,
    "assessment": 0.30,
    "default": 0.15,
}
MAX_INTERACTION_SECONDS = 600

TEXT_COMPLEXITY_SCORE = {"simple": 1, "moderate": 2, "complex": 3}
VIDEO_TYPE_SCORE = {"lecture": 1, "demo": 2, "interactive": 3, "unknown": 1}

BASE_CONFIDENCE = 0.5
MAX_CONFIDENCE = 0.95


def is_valid_mixed_content(content) -> bool:
    """Content needs at least five words of text or one usable video."""
    if not isinstance(content, MixedContent):
        return False
    has_text = is_valid_text_content(content.text)
    has_videos = bool(content.videos) and any(is_valid_video_metadata(v) for v in content.videos)
    return has_text or has_videos

def calculate_interaction_time(text_time: float, video_time: float, content_type: Optional[str] = None) -> int:
    """
    Extra time for note taking, reflection and answering, by content type.
    Capped at half the content time and at ten minutes.
    """
    total = text_time + video_time
    multiplier = INTERACTION_MULTIPLIERS.get(content_type or "default", INTERACTION_MULTIPLIERS["default"])
    cap = min(total * 0.5, MAX_INTERACTION_SECONDS)
    return round_half_up(min(total * multiplier, cap))

def calculate_time_breakdown(
    text_analysis: Optional[TextAnalysis],
    video_analyses: List[VideoAnalysis],
    content_type: Optional[str] = None,
) -> ContentBreakdown:
    text_time = text_analysis.estimated_reading_time if text_analysis else 0
    video_time = sum(calculate_total_video_time(v) for v in video_analyses)
    return ContentBreakdown(
        text=text_time,
        video=video_time,
        interaction=calculate_interaction_time(text_time, video_time, content_type),
    )

def determine_overall_complexity(
    text_analysis: Optional[TextAnalysis],
    video_analyses: List[VideoAnalysis],
) -> Complexity:
    score = 0.0
    if text_analysis:
        score += TEXT_COMPLEXITY_SCORE[text_analysis.complexity]
    if video_analyses:
        score += float(np.mean([VIDEO_TYPE_SCORE.get(v.type, 1) for v in video_analyses]))
    if len(video_analyses) > 2:
        score += 1

    if score >= 4:
        return "complex"
    if score >= 2.5:
        return "moderate"
    return "simple"

def calculate_confidence(
    text_analysis: Optional[TextAnalysis],
    video_analyses: List[VideoAnalysis],
    content: MixedContent,
) -> float:
    """
    Evidence-weighted confidence. Never reaches 1.0: the estimate is a heuristic.
    """
    confidence = BASE_CONFIDENCE
    if text_analysis:
        confidence += 0.2
        if text_analysis.word_count > 100:
            confidence += 0.1
    if video_analyses:
        if all(not v.is_duration_estimated for v in video_analyses):
            confidence += 0.2
        else:
            confidence += 0.1
    if content.title and content.content_type:
        confidence += 0.1
    return round(min(confidence, MAX_CONFIDENCE), 4)

def generate_learning_recommendations(
    total_time: float,
    complexity: Complexity,
    content_type: Optional[str] = None,
) -> LearningRecommendations:
    minutes = total_time / 60

    breaks = 0
    if minutes > 45:
        breaks = 3
    elif minutes > 30:
        breaks = 2
    elif minutes > 15:
        breaks = 1
    if complexity == "complex":
        breaks += 1
    elif complexity == "simple" and breaks > 0:
        breaks -= 1

    sessions = 1
    if minutes > 20:
        sessions = math.ceil(minutes / 20)
    if complexity == "complex":
        sessions = math.ceil(minutes / 15)

    pace = "moderate"
    if complexity == "simple" and minutes < 15:
        pace = "fast"
    if complexity == "complex" or content_type == "assessment":
        pace = "slow"

    return LearningRecommendations(
        suggested_breaks=max(0, breaks),
        estimated_sessions=max(1, sessions),
        recommended_pace=pace,
    )

def analyze_mixed_content(content: MixedContent) -> ContentAnalysis:
    """
    Analyze text and videos of one learning unit together.

    Raises:
        InvalidContentError: content has no usable text and no valid video.
    """
    if not is_valid_mixed_content(content):
        raise InvalidContentError("Content needs at least 5 words of text or one valid video")

    text_analysis = analyze_text(content.text) if is_valid_text_content(content.text) else None
    video_analyses = [analyze_video(v) for v in (content.videos or []) if is_valid_video_metadata(v)]
    logger.debug(
        f"[content] analyzing title={content.title!r} type={content.content_type} "
        f"text={'yes' if text_analysis else 'no'} videos={len(video_analyses)}"
    )

    breakdown = calculate_time_breakdown(text_analysis, video_analyses, content.content_type)
    complexity = determine_overall_complexity(text_analysis, video_analyses)

    return ContentAnalysis(
        breakdown=breakdown,
        confidence=calculate_confidence(text_analysis, video_analyses, content),
        overall_complexity=complexity,
        text_analysis=text_analysis,
        video_analyses=video_analyses or None,
        learning_recommendations=generate_learning_recommendations(
            breakdown.total, complexity, content.content_type
        ),
    )
