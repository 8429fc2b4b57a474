"""
Video signal analysis: duration resolution, type/format classification and
engagement overhead.
"""
from __future__ import annotations
import logging
import re
from typing import Dict, Tuple
from estimator.models import EngagementFactors, VideoAnalysis, VideoFormat, VideoMetadata, VideoType
from estimator.utils import round_half_up

logger = logging.getLogger(__name__)

DEFAULT_VIDEO_DURATION = 480   # educational video average
VIMEO_DEFAULT_DURATION = 600
AVERAGE_PAUSE_SECONDS = 15

_TIME_PARAM_RE = re.compile(r"[?&]t=(\d+)")
_FILENAME_DURATION_RE = re.compile(r"(\d+)min|(\d+)m(\d+)s")

DEMO_KEYWORDS = (
    "demo", "demonstration", "tutorial", "walkthrough", "step-by-step",
    "how-to", "practice", "example", "case study", "session",
)
INTERACTIVE_KEYWORDS = (
    "interactive", "exercise", "activity", "practice", "simulation",
    "role-play", "guided", "participation", "engagement",
)
LECTURE_KEYWORDS = (
    "lecture", "presentation", "introduction", "overview", "theory",
    "concept", "explanation", "background", "foundation", "principles",
)

# type -> (pause_frequency, replay_likelihood, interaction share of duration, interaction cap seconds)
ENGAGEMENT_TABLE: Dict[str, Tuple[float, float, float, float]] = {
    "lecture": (0.3, 0.2, 0.10, 60),
    "demo": (0.6, 0.4, 0.20, 120),
    "interactive": (0.8, 0.3, 0.30, 180),
    "unknown": (0.4, 0.25, 0.15, 90),
}


def estimate_duration_from_url(url: str) -> int:
    """
    Guess a duration from URL hints: a `t=` query parameter, the Vimeo default,
    or `<N>min` / `<M>m<S>s` in the filename. Falls back to 480 seconds.
    """
    m = _TIME_PARAM_RE.search(url)
    if m and int(m.group(1)) > 0:
        return int(m.group(1))

    if "vimeo.com" in url:
        return VIMEO_DEFAULT_DURATION

    m = _FILENAME_DURATION_RE.search(url)
    if m:
        minutes = int(m.group(1) or m.group(2) or 0)
        seconds = int(m.group(3) or 0)
        if minutes * 60 + seconds > 0:
            return minutes * 60 + seconds

    return DEFAULT_VIDEO_DURATION

def determine_format(url: str) -> VideoFormat:
    u = url.lower()
    if "youtube.com" in u or "youtu.be" in u:
        return "youtube"
    if "vimeo.com" in u:
        return "vimeo"
    if u.endswith(".mp4"):
        return "mp4"
    if u.endswith(".webm"):
        return "webm"
    return "other"

def classify_type(title: str, url: str) -> VideoType:
    """
    Keyword classification over title and URL. Demo wins over interactive,
    interactive over lecture; anything unmatched is treated as a lecture.
    """
    haystacks = (title.lower(), url.lower())

    def _matches(keywords) -> bool:
        return any(k in h for k in keywords for h in haystacks)

    if _matches(DEMO_KEYWORDS):
        return "demo"
    if _matches(INTERACTIVE_KEYWORDS):
        return "interactive"
    if _matches(LECTURE_KEYWORDS):
        return "lecture"
    return "lecture"

def engagement_factors(video_type: VideoType, duration: float) -> EngagementFactors:
    pause, replay, share, cap = ENGAGEMENT_TABLE.get(video_type, ENGAGEMENT_TABLE["unknown"])
    return EngagementFactors(
        pause_frequency=pause,
        replay_likelihood=replay,
        interaction_time=min(duration * share, cap),
    )

def analyze_video(metadata: VideoMetadata) -> VideoAnalysis:
    """
    Resolve duration, format, type and engagement overhead for one clip.

    An explicit duration is copied verbatim; otherwise the URL heuristics
    supply an estimate and `is_duration_estimated` is set.
    """
    url = metadata.url or ""
    estimated = metadata.duration is None
    duration = estimate_duration_from_url(url) if estimated else metadata.duration
    if estimated:
        logger.debug(f"[video] no duration for url={url!r}; estimated {duration}s")

    video_format = metadata.format or determine_format(url)
    video_type = metadata.type or classify_type(metadata.title or "", url)

    return VideoAnalysis(
        duration=duration,
        type=video_type,
        format=video_format,
        is_duration_estimated=estimated,
        engagement_factors=engagement_factors(video_type, duration),
    )

def calculate_total_video_time(analysis: VideoAnalysis) -> int:
    """
    Total learning time for a clip in seconds: playback plus expected pauses,
    replays and interaction.
    """
    ef = analysis.engagement_factors
    pause_time = ef.pause_frequency * AVERAGE_PAUSE_SECONDS
    replay_time = analysis.duration * ef.replay_likelihood
    return round_half_up(analysis.duration + pause_time + replay_time + ef.interaction_time)

def is_valid_video_metadata(metadata) -> bool:
    """Relative paths and opaque identifiers are accepted as well as absolute URLs."""
    if not isinstance(metadata, VideoMetadata):
        return False
    return isinstance(metadata.url, str) and len(metadata.url.strip()) > 0
