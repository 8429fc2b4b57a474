"""
Personalized time estimation and the profile feedback loop.
"""
from __future__ import annotations
import logging
import math
from typing import Mapping, Optional, Union
from pydantic import ValidationError
from estimator.content import analyze_mixed_content
from estimator.errors import InvalidConfigError, InvalidContentError, InvalidProfileError
from estimator.models import (
    Complexity,
    ContentAnalysis,
    ContentBreakdown,
    EstimateBreakdown,
    EstimateRecommendations,
    EstimationConfig,
    MixedContent,
    TimeEstimate,
    UserProfile,
)
from estimator.text import get_personalized_reading_time
from estimator.utils import clamp, is_finite_number

logger = logging.getLogger(__name__)

DEFAULT_ESTIMATION_CONFIG = EstimationConfig(
    include_interaction_time=True,
    include_break_time=True,
    confidence_threshold=0.6,
    use_personalization=True,
)

MAX_CONFIDENCE = 0.95
PERSONALIZATION_CONFIDENCE_BOOST = 0.1

# 30% weight to the newest session, 70% to history
SMOOTHING_WEIGHT = 0.3
MIN_COMPLETION_RATE = 0.5
MAX_COMPLETION_RATE = 2.0

BREAK_EVERY_SECONDS = 30 * 60
BREAK_LENGTH_SECONDS = 5 * 60

DEFAULT_SESSION_SECONDS = 25 * 60
FAST_SESSION_SECONDS = 35 * 60
SHORT_SESSION_SECONDS = 20 * 60


def is_valid_estimation_config(config) -> bool:
    """
    Structural/type/range check. Returns a bool, never raises.

    All four toggles must be present (by field name or camelCase alias);
    `resolve_config` is the lenient path that fills missing keys with defaults.
    """
    if isinstance(config, EstimationConfig):
        return True
    if not isinstance(config, Mapping):
        return False
    for name, field in EstimationConfig.model_fields.items():
        if name not in config and field.alias not in config:
            return False
    try:
        EstimationConfig.model_validate(config)
    except ValidationError:
        return False
    return True

def resolve_config(config: Union[EstimationConfig, Mapping, None]) -> EstimationConfig:
    if config is None:
        return DEFAULT_ESTIMATION_CONFIG
    if isinstance(config, EstimationConfig):
        return config
    if not isinstance(config, Mapping):
        raise InvalidConfigError(f"EstimationConfig expected, got {type(config).__name__}")
    try:
        return EstimationConfig.model_validate(config)
    except ValidationError as e:
        raise InvalidConfigError(f"Invalid estimation config: {e.error_count()} error(s)", errors=e.errors()) from e

def resolve_content(content: Union[MixedContent, Mapping]) -> MixedContent:
    if isinstance(content, MixedContent):
        return content
    if not isinstance(content, Mapping):
        raise InvalidContentError(f"MixedContent expected, got {type(content).__name__}")
    try:
        return MixedContent.model_validate(content)
    except ValidationError as e:
        raise InvalidContentError(f"Malformed content: {e.error_count()} error(s)") from e

def resolve_profile(profile: Union[UserProfile, Mapping, None]) -> UserProfile:
    if profile is None:
        return UserProfile()
    if isinstance(profile, UserProfile):
        return profile
    if not isinstance(profile, Mapping):
        raise InvalidProfileError(f"UserProfile expected, got {type(profile).__name__}")
    try:
        return UserProfile.model_validate(profile)
    except ValidationError as e:
        raise InvalidProfileError(f"Invalid learner profile: {e.error_count()} error(s)", errors=e.errors()) from e

def has_personalization_data(profile: Optional[UserProfile]) -> bool:
    if profile is None:
        return False
    return bool(profile.reading_speed or profile.completion_rate or profile.learning_pace)

def apply_personalization(analysis: ContentAnalysis, profile: UserProfile) -> ContentAnalysis:
    """
    Re-weight a content analysis by the learner's reading speed and historical
    completion rate. Components are scaled together so the breakdown total
    stays the sum of its parts.
    """
    b = analysis.breakdown
    text, video, interaction = b.text, b.video, b.interaction

    if analysis.text_analysis and profile.reading_speed:
        text = get_personalized_reading_time(analysis.text_analysis, profile.reading_speed)
        logger.debug(f"[engine] personalized reading time {b.text}s -> {text}s at {profile.reading_speed} wpm")

    if profile.completion_rate:
        rate = profile.completion_rate
        text, video, interaction = text * rate, video * rate, interaction * rate

    confidence = analysis.confidence
    if has_personalization_data(profile):
        confidence = round(min(confidence + PERSONALIZATION_CONFIDENCE_BOOST, MAX_CONFIDENCE), 4)

    return analysis.model_copy(update={
        "breakdown": ContentBreakdown(text=text, video=video, interaction=interaction),
        "confidence": confidence,
    })

def calculate_detailed_breakdown(analysis: ContentAnalysis, config: EstimationConfig) -> EstimateBreakdown:
    b = analysis.breakdown
    breaks = 0
    if config.include_break_time:
        active = b.text + b.video
        breaks = math.floor(active / BREAK_EVERY_SECONDS) * BREAK_LENGTH_SECONDS
    return EstimateBreakdown(
        reading=b.text,
        video=b.video,
        interaction=b.interaction if config.include_interaction_time else 0,
        breaks=breaks,
    )

def generate_recommendations(
    breakdown: EstimateBreakdown,
    complexity: Complexity,
    profile: UserProfile,
) -> EstimateRecommendations:
    total = breakdown.reading + breakdown.video + breakdown.interaction + breakdown.breaks
    minutes = total / 60

    session_length = DEFAULT_SESSION_SECONDS
    if profile.learning_pace == "fast":
        session_length = FAST_SESSION_SECONDS
    elif profile.learning_pace == "slow" or complexity == "complex":
        session_length = SHORT_SESSION_SECONDS

    break_frequency = {"complex": 3, "simple": 1}.get(complexity, 2)

    if profile.learning_pace:
        pace = profile.learning_pace
    elif complexity == "complex":
        pace = "slow"
    elif complexity == "simple" and minutes < 15:
        pace = "fast"
    else:
        pace = "moderate"

    return EstimateRecommendations(
        suggested_sessions=max(1, math.ceil(total / session_length)),
        session_length=session_length,
        break_frequency=break_frequency,
        pace=pace,
    )

def calculate_time_estimate(
    content: Union[MixedContent, Mapping],
    profile: Union[UserProfile, Mapping, None] = None,
    config: Union[EstimationConfig, Mapping, None] = None,
) -> TimeEstimate:
    """
    Full estimate for one learning unit.

    Args:
        content: Text and/or videos to estimate.
        profile: Learner profile; missing fields mean "no signal".
        config: Estimation toggles; defaults to DEFAULT_ESTIMATION_CONFIG.

    Returns:
        TimeEstimate

    Raises:
        InvalidContentError: no usable text and no valid video.
        InvalidConfigError: config fails structural or range checks.
        InvalidProfileError: profile mapping fails validation.
    """
    cfg = resolve_config(config)
    mixed = resolve_content(content)
    user = resolve_profile(profile)

    analysis = analyze_mixed_content(mixed)
    if cfg.use_personalization:
        analysis = apply_personalization(analysis, user)

    breakdown = calculate_detailed_breakdown(analysis, cfg)
    recommendations = generate_recommendations(breakdown, analysis.overall_complexity, user)
    estimate = TimeEstimate(
        breakdown=breakdown,
        confidence=analysis.confidence,
        is_personalized=cfg.use_personalization and has_personalization_data(user),
        recommendations=recommendations,
        meets_confidence_threshold=analysis.confidence >= cfg.confidence_threshold,
    )
    logger.debug(
        f"[engine] estimate total={estimate.total:.1f}s confidence={estimate.confidence} "
        f"personalized={estimate.is_personalized}"
    )
    return estimate

def update_user_profile(
    profile: Union[UserProfile, Mapping, None],
    estimated_time: float,
    actual_time: float,
    complexity: Complexity = "moderate",
) -> UserProfile:
    """
    Blend the latest actual/estimated ratio into the stored completion rate.

    The result is exponentially smoothed and clamped to [0.5, 2.0] so one
    anomalous session cannot swing future estimates far. `complexity` is
    accepted for callers that track it; it does not weight the update.
    Raises InvalidProfileError for a malformed profile mapping.
    """
    user = resolve_profile(profile)
    current = user.completion_rate or 1.0

    if not is_finite_number(estimated_time) or estimated_time <= 0 \
            or not is_finite_number(actual_time) or actual_time < 0:
        logger.warning(
            f"[engine] ignoring completion sample estimated={estimated_time} actual={actual_time}"
        )
        return user.model_copy(update={"completion_rate": clamp(current, MIN_COMPLETION_RATE, MAX_COMPLETION_RATE)})

    observed = actual_time / estimated_time
    blended = current * (1 - SMOOTHING_WEIGHT) + observed * SMOOTHING_WEIGHT
    updated = clamp(blended, MIN_COMPLETION_RATE, MAX_COMPLETION_RATE)
    logger.debug(
        f"[engine] completion rate {current:.3f} -> {updated:.3f} "
        f"(observed {observed:.3f}, complexity={complexity})"
    )
    return user.model_copy(update={"completion_rate": updated})
