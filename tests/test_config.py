from estimator.config import Settings
from estimator.engine import is_valid_estimation_config

def test_Settings():
    s = Settings()
    assert s.TIMER_INTERVAL > 0
    assert 0 <= s.CONFIDENCE_THRESHOLD <= 1
    # override via env-like behavior (construct new instance)
    s2 = Settings(CACHE_MAX_ENTRIES=8, INCLUDE_BREAK_TIME=False)
    assert s2.CACHE_MAX_ENTRIES == 8
    assert s2.estimation_config().include_break_time is False

def test_Settings_normalizes_values():
    s = Settings(LOG_LEVEL="warning  # quiet", CONFIDENCE_THRESHOLD=3.0, TIMER_INTERVAL=0, CACHE_MAX_ENTRIES=0)
    assert s.LOG_LEVEL == "WARNING"
    assert s.CONFIDENCE_THRESHOLD == 1.0
    assert s.TIMER_INTERVAL == 1.0
    assert s.CACHE_MAX_ENTRIES == 1
    assert Settings(LOG_LEVEL="chatty").LOG_LEVEL == "INFO"

def test_Settings_estimation_config_is_valid():
    assert is_valid_estimation_config(Settings().estimation_config())

def test_Settings_session_bound():
    assert Settings(SESSION_MAX_ENTRIES=3).SESSION_MAX_ENTRIES == 3
    assert Settings(SESSION_MAX_ENTRIES=-1).SESSION_MAX_ENTRIES == 1
