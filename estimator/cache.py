"""
Caller-owned memoization for time estimates.
"""
from __future__ import annotations
import hashlib
import json
import threading
from collections import OrderedDict
from typing import Callable, Optional, Protocol, Tuple
from estimator.models import EstimationConfig, MixedContent, TimeEstimate, UserProfile

# Profile fields that change the estimate
_PROFILE_KEYS = ("reading_speed", "completion_rate", "learning_pace")


def content_fingerprint(
    content: MixedContent,
    profile: Optional[UserProfile],
    config: EstimationConfig,
) -> str:
    """Deterministic key over the content, the profile fields that matter, and the config."""
    profile_fields = {}
    if profile is not None:
        profile_fields = {k: getattr(profile, k) for k in _PROFILE_KEYS}
    payload = {
        "content": content.model_dump(mode="json"),
        "profile": profile_fields,
        "config": config.model_dump(mode="json"),
    }
    canonical = json.dumps(payload, sort_keys=True, separators=(",", ":"))
    return hashlib.sha256(canonical.encode()).hexdigest()[:32]


class EstimateCache(Protocol):
    def get(self, key: str) -> Optional[TimeEstimate]: ...
    def set(self, key: str, value: TimeEstimate) -> None: ...
    def delete(self, key: str) -> None: ...
    def clear(self) -> None: ...


class InMemoryEstimateCache:
    """Bounded in-process store; oldest insertions are evicted first."""

    def __init__(self, max_entries: int = 256):
        self.max_entries = max(1, int(max_entries))
        self._items: "OrderedDict[str, TimeEstimate]" = OrderedDict()
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._items)

    def __contains__(self, key: str) -> bool:
        return key in self._items

    def get(self, key: str) -> Optional[TimeEstimate]:
        with self._lock:
            return self._items.get(key)

    def set(self, key: str, value: TimeEstimate) -> None:
        with self._lock:
            self._insert(key, value)

    def delete(self, key: str) -> None:
        with self._lock:
            self._items.pop(key, None)

    def clear(self) -> None:
        with self._lock:
            self._items.clear()

    def get_or_compute(self, key: str, factory: Callable[[], TimeEstimate]) -> Tuple[TimeEstimate, bool]:
        """
        Return (value, cached). The lookup, the computation and the insert run
        under one lock so concurrent callers never compute the same key twice.
        """
        with self._lock:
            hit = self._items.get(key)
            if hit is not None:
                return hit, True
            value = factory()
            self._insert(key, value)
            return value, False

    def _insert(self, key: str, value: TimeEstimate) -> None:
        self._items[key] = value
        self._items.move_to_end(key)
        while len(self._items) > self.max_entries:
            self._items.popitem(last=False)
