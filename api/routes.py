"""
REST endpoints for content analysis, estimation and session tracking.
"""
import uuid
from collections import OrderedDict
from typing import Optional, Tuple
from fastapi import APIRouter, HTTPException
import logging

from estimator.cache import InMemoryEstimateCache
from estimator.config import Settings
from estimator.content import analyze_mixed_content
from estimator.errors import InvalidConfigError, InvalidContentError, InvalidProfileError
from estimator.models import (
    CamelModel,
    Complexity,
    ContentAnalysis,
    DurationValidation,
    MixedContent,
    TextAnalysis,
    TimeEstimate,
    TimerContext,
    TimerState,
    UserProfile,
    VideoAnalysis,
    VideoMetadata,
)
from estimator.pipeline import EstimationService, remaining_time, session_progress
from estimator.text import analyze_text
from estimator.timefmt import validate_timer_duration
from estimator.tracker import ProgressTracker
from estimator.video import analyze_video, calculate_total_video_time


router = APIRouter()
settings = Settings()
service = EstimationService(cache=InMemoryEstimateCache(settings.CACHE_MAX_ENTRIES), settings=settings)
logger = logging.getLogger(__name__)

# session_id -> (tracker, estimate, complexity), oldest first
sessions: "OrderedDict[str, Tuple[ProgressTracker, TimeEstimate, Complexity]]" = OrderedDict()


class TextRequest(CamelModel):
    text: str = ""

class VideoResponse(VideoAnalysis):
    total_time: int

class EstimateRequest(CamelModel):
    content: MixedContent
    profile: Optional[UserProfile] = None
    config: Optional[dict] = None

class EstimateResponse(CamelModel):
    estimate: TimeEstimate
    cached: bool

class ProfileUpdateRequest(CamelModel):
    profile: UserProfile = UserProfile()
    estimated_time: float
    actual_time: float
    complexity: Complexity = "moderate"

class TimerValidationRequest(CamelModel):
    duration: float
    context: TimerContext = "general"

class SessionResponse(CamelModel):
    session_id: str
    state: TimerState
    estimate: TimeEstimate
    elapsed: float
    progress: float
    remaining_time: float

class SessionStopRequest(CamelModel):
    profile: Optional[UserProfile] = None

class SessionStopResponse(CamelModel):
    session_id: str
    actual_time: float
    estimated_time: float
    profile: Optional[UserProfile] = None


def _domain_error(e: Exception) -> HTTPException:
    return HTTPException(status_code=422, detail=str(e))

def _session(session_id: str) -> Tuple[ProgressTracker, TimeEstimate, Complexity]:
    try:
        return sessions[session_id]
    except KeyError:
        raise HTTPException(status_code=404, detail=f"Unknown session: {session_id}")

def _evict_sessions(keep: int) -> None:
    """Drop the oldest sessions until at most `keep` remain; their trackers are paused."""
    while sessions and len(sessions) > max(0, keep):
        session_id, (tracker, _, _) = sessions.popitem(last=False)
        tracker.pause()
        logger.debug(f"[api] session {session_id} evicted")

def _session_payload(session_id: str) -> SessionResponse:
    tracker, estimate, _ = sessions[session_id]
    tracker.tick()
    progress = session_progress(tracker, estimate)
    return SessionResponse(
        session_id=session_id,
        state=tracker.state,
        estimate=estimate,
        elapsed=tracker.elapsed,
        progress=progress,
        remaining_time=remaining_time(tracker.elapsed, progress, estimate.total),
    )


@router.post("/analyze/text", response_model=TextAnalysis)
async def analyze_text_route(body: TextRequest):
    """
    Word count, complexity and reading time for a block of prose.
    """
    logger.debug(f"[api] /analyze/text chars={len(body.text)}")
    return analyze_text(body.text)

@router.post("/analyze/video", response_model=VideoResponse)
async def analyze_video_route(metadata: VideoMetadata):
    """
    Duration, type and engagement overhead for one video, plus its total learning time.
    """
    logger.debug(f"[api] /analyze/video url={metadata.url!r}")
    analysis = analyze_video(metadata)
    return VideoResponse(**analysis.model_dump(), total_time=calculate_total_video_time(analysis))

@router.post("/analyze/content", response_model=ContentAnalysis)
async def analyze_content_route(content: MixedContent):
    """
    Aggregate text and video analysis for a learning unit.

    Returns:
        ContentAnalysis, or 422 when the content has nothing to estimate.
    """
    try:
        return analyze_mixed_content(content)
    except InvalidContentError as e:
        logger.debug(f"[api] /analyze/content rejected: {e}")
        raise _domain_error(e)

@router.post("/estimate", response_model=EstimateResponse)
async def estimate_route(body: EstimateRequest):
    """
    Personalized time estimate. Identical requests are served from the cache.

    Args:
        body: content, optional learner profile and optional config override.

    Returns:
        EstimateResponse: the estimate and whether it came from the cache.
    """
    logger.debug(f"[api] /estimate title={body.content.title!r} profile={body.profile is not None}")
    try:
        estimate, cached = service.estimate(body.content, body.profile, body.config)
    except (InvalidContentError, InvalidConfigError, InvalidProfileError) as e:
        logger.debug(f"[api] /estimate rejected: {e}")
        raise _domain_error(e)
    return EstimateResponse(estimate=estimate, cached=cached)

@router.post("/profile/update", response_model=UserProfile)
async def profile_update_route(body: ProfileUpdateRequest):
    """
    Blend a finished session into the learner's completion rate. Persisting
    the returned profile is up to the caller.
    """
    return service.record_completion(body.profile, body.estimated_time, body.actual_time, body.complexity)

@router.post("/timer/validate", response_model=DurationValidation)
async def timer_validate_route(body: TimerValidationRequest):
    return validate_timer_duration(body.duration, body.context)

@router.post("/sessions/start", response_model=SessionResponse)
async def session_start(body: EstimateRequest):
    try:
        estimate, _ = service.estimate(body.content, body.profile, body.config)
        complexity = analyze_mixed_content(body.content).overall_complexity
    except (InvalidContentError, InvalidConfigError, InvalidProfileError) as e:
        raise _domain_error(e)
    _evict_sessions(settings.SESSION_MAX_ENTRIES - 1)
    session_id = uuid.uuid4().hex
    sessions[session_id] = (service.start_session(estimate), estimate, complexity)
    logger.debug(f"[api] session {session_id} started target={estimate.total:.1f}s")
    return _session_payload(session_id)

@router.get("/sessions/{session_id}", response_model=SessionResponse)
async def session_status(session_id: str):
    _session(session_id)
    return _session_payload(session_id)

@router.post("/sessions/{session_id}/pause", response_model=SessionResponse)
async def session_pause(session_id: str):
    tracker, _, _ = _session(session_id)
    tracker.pause()
    return _session_payload(session_id)

@router.post("/sessions/{session_id}/resume", response_model=SessionResponse)
async def session_resume(session_id: str):
    tracker, _, _ = _session(session_id)
    tracker.resume()
    return _session_payload(session_id)

@router.post("/sessions/{session_id}/stop", response_model=SessionStopResponse)
async def session_stop(session_id: str, body: Optional[SessionStopRequest] = None):
    """
    End a session. With a profile in the body, the real time spent is fed
    back into its completion rate.
    """
    tracker, estimate, complexity = _session(session_id)
    profile = body.profile if body else None
    if profile is not None:
        updated = service.finish_session(tracker, profile, estimate, complexity)
    else:
        tracker.pause()
        updated = None
    del sessions[session_id]
    logger.debug(f"[api] session {session_id} stopped actual={tracker.elapsed:.1f}s")
    return SessionStopResponse(
        session_id=session_id,
        actual_time=tracker.elapsed,
        estimated_time=estimate.total,
        profile=updated,
    )
