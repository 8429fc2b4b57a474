# estimator/pipeline.py
from __future__ import annotations
from typing import Callable, Mapping, Optional, Tuple, Union
import logging

from estimator.cache import EstimateCache, content_fingerprint
from estimator.config import Settings
from estimator.engine import (
    calculate_time_estimate,
    resolve_config,
    resolve_content,
    resolve_profile,
    update_user_profile,
)
from estimator.models import (
    Complexity,
    EstimationConfig,
    MixedContent,
    TimeEstimate,
    UserProfile,
)
from estimator.timefmt import calculate_progress
from estimator.tracker import ProgressTracker, Scheduler

logger = logging.getLogger(__name__)

ContentLike = Union[MixedContent, Mapping]
ProfileLike = Union[UserProfile, Mapping, None]
ConfigLike = Union[EstimationConfig, Mapping, None]


def remaining_time(elapsed: float, progress: float, estimated_time: float) -> float:
    """
    Project the time left from reported progress (0-100). Before any progress
    is reported the original estimate stands.
    """
    progress = max(0.0, min(100.0, progress))
    if progress == 0:
        return estimated_time
    projected_total = elapsed / progress * 100
    return max(0.0, projected_total - elapsed)

def session_progress(tracker: ProgressTracker, estimate: TimeEstimate) -> float:
    """Share of the estimated time already spent, 0-100."""
    return calculate_progress(tracker.elapsed, estimate.total)


class EstimationService:
    """
    Composition layer: estimation with an optional caller-owned cache, plus the
    calibration loop from a tracked session back into the learner profile.
    """

    def __init__(self, cache: Optional[EstimateCache] = None, settings: Optional[Settings] = None):
        self.cache = cache
        self.settings = settings or Settings()

    def _config(self, config: ConfigLike) -> EstimationConfig:
        return resolve_config(config if config is not None else self.settings.estimation_config())

    def cache_key(self, content: ContentLike, profile: ProfileLike = None, config: ConfigLike = None) -> str:
        return content_fingerprint(resolve_content(content), resolve_profile(profile), self._config(config))

    def estimate(
        self,
        content: ContentLike,
        profile: ProfileLike = None,
        config: ConfigLike = None,
    ) -> Tuple[TimeEstimate, bool]:
        """
        Estimate one learning unit. Returns (estimate, cached).
        """
        cfg = self._config(config)
        mixed = resolve_content(content)
        user = resolve_profile(profile)

        def compute() -> TimeEstimate:
            return calculate_time_estimate(mixed, user, cfg)

        if self.cache is None:
            return compute(), False

        key = content_fingerprint(mixed, user, cfg)
        get_or_compute = getattr(self.cache, "get_or_compute", None)
        if get_or_compute is not None:
            result, cached = get_or_compute(key, compute)
        else:
            hit = self.cache.get(key)
            if hit is not None:
                result, cached = hit, True
            else:
                result, cached = compute(), False
                self.cache.set(key, result)
        logger.debug(f"[pipeline] estimate key={key[:8]} cached={cached}")
        return result, cached

    def record_completion(
        self,
        profile: ProfileLike,
        estimated_time: float,
        actual_time: float,
        complexity: Complexity = "moderate",
        content: Optional[ContentLike] = None,
        config: ConfigLike = None,
    ) -> UserProfile:
        """
        Feed a finished session into the profile. When `content` is given, the
        cached estimate computed from the old profile is dropped.
        """
        user = resolve_profile(profile)
        updated = update_user_profile(user, estimated_time, actual_time, complexity)
        if self.cache is not None and content is not None:
            self.cache.delete(self.cache_key(content, user, config))
        return updated

    def start_session(
        self,
        estimate: TimeEstimate,
        scheduler: Optional[Scheduler] = None,
        clock: Optional[Callable[[], float]] = None,
        **listeners,
    ) -> ProgressTracker:
        """
        Start a stopwatch for a learning session that targets the estimated
        total. It does not stop at the target, so overruns keep counting while
        progress holds at 100.
        """
        kwargs = dict(listeners)
        if clock is not None:
            kwargs["clock"] = clock
        tracker = ProgressTracker(
            0.0,
            variant="stopwatch",
            target_time=estimate.total,
            interval=self.settings.TIMER_INTERVAL,
            stop_at_target=False,
            scheduler=scheduler,
            **kwargs,
        )
        tracker.start()
        logger.debug(f"[pipeline] session started target={estimate.total:.1f}s")
        return tracker

    def finish_session(
        self,
        tracker: ProgressTracker,
        profile: ProfileLike,
        estimate: TimeEstimate,
        complexity: Complexity = "moderate",
        content: Optional[ContentLike] = None,
        config: ConfigLike = None,
    ) -> UserProfile:
        """Stop the tracker and calibrate the profile from the real time spent."""
        tracker.pause()
        actual = tracker.elapsed
        logger.debug(f"[pipeline] session finished actual={actual:.1f}s estimated={estimate.total:.1f}s")
        return self.record_completion(profile, estimate.total, actual, complexity, content, config)
