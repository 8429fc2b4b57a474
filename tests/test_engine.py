import pytest
from estimator.engine import (
    DEFAULT_ESTIMATION_CONFIG,
    calculate_time_estimate,
    has_personalization_data,
    is_valid_estimation_config,
    update_user_profile,
)
from estimator.errors import EstimatorError, InvalidConfigError, InvalidContentError, InvalidProfileError
from estimator.models import EstimationConfig, MixedContent, UserProfile


def _sum(e):
    b = e.breakdown
    return b.reading + b.video + b.interaction + b.breaks


def test_basic_estimate(mixed_lesson):
    e = calculate_time_estimate(mixed_lesson)
    assert e.total == _sum(e)
    assert e.breakdown.reading == 720
    assert e.breakdown.video == 395
    assert e.breakdown.interaction == 167
    assert e.breakdown.breaks == 0
    assert e.is_personalized is False
    assert 0 <= e.confidence <= 0.95
    assert e.meets_confidence_threshold is True

def test_text_only_estimate(text_lesson):
    e = calculate_time_estimate(text_lesson)
    assert e.breakdown.video == 0
    assert e.total == e.breakdown.reading + e.breakdown.interaction + e.breakdown.breaks

def test_accepts_plain_dicts():
    e = calculate_time_estimate(
        {"text": "word " * 2400, "contentType": "lesson"},
        {"readingSpeed": 100},
        {"includeBreakTime": False},
    )
    assert e.breakdown.reading == 1440
    assert e.is_personalized is True

def test_invalid_content_raises():
    with pytest.raises(InvalidContentError):
        calculate_time_estimate({"title": "Invalid"})
    with pytest.raises(InvalidContentError):
        calculate_time_estimate({"videos": "not-a-list"})

def test_invalid_config_raises(text_lesson):
    with pytest.raises(InvalidConfigError):
        calculate_time_estimate(text_lesson, None, {"confidenceThreshold": 1.5})
    with pytest.raises(InvalidConfigError):
        calculate_time_estimate(text_lesson, None, "fast please")

FULL_CONFIG = {
    "includeInteractionTime": False,
    "includeBreakTime": True,
    "confidenceThreshold": 0.7,
    "usePersonalization": False,
}

def test_config_validation():
    assert is_valid_estimation_config(DEFAULT_ESTIMATION_CONFIG)
    assert is_valid_estimation_config(FULL_CONFIG)
    assert is_valid_estimation_config({**DEFAULT_ESTIMATION_CONFIG.model_dump()})
    assert not is_valid_estimation_config({**FULL_CONFIG, "confidenceThreshold": -0.1})
    assert not is_valid_estimation_config({**FULL_CONFIG, "confidenceThreshold": 1.01})
    assert not is_valid_estimation_config({**FULL_CONFIG, "confidenceThreshold": "0.5"})
    assert not is_valid_estimation_config({**FULL_CONFIG, "includeBreakTime": "yes"})
    assert not is_valid_estimation_config(None)
    assert not is_valid_estimation_config(["includeBreakTime"])

@pytest.mark.parametrize("partial", [
    {},
    {"confidenceThreshold": 0.5},
    {"includeInteractionTime": True, "includeBreakTime": True, "confidenceThreshold": 0.5},
])
def test_config_validation_requires_every_toggle(partial, text_lesson):
    assert not is_valid_estimation_config(partial)
    # the compute path still fills the gaps with defaults
    assert calculate_time_estimate(text_lesson, None, partial).total > 0

def test_config_toggles(mixed_lesson):
    full = calculate_time_estimate(mixed_lesson)
    no_interaction = calculate_time_estimate(mixed_lesson, {}, {"includeInteractionTime": False})
    assert no_interaction.breakdown.interaction == 0
    assert no_interaction.total < full.total

def test_break_time():
    # 7200 words -> 2160s reading, one full 30-minute block
    content = MixedContent(text="word " * 7200)
    with_breaks = calculate_time_estimate(content)
    assert with_breaks.breakdown.breaks == 300
    without = calculate_time_estimate(content, None, EstimationConfig(include_break_time=False))
    assert without.breakdown.breaks == 0
    assert with_breaks.total == _sum(with_breaks)

def test_completion_rate_scales_total(text_lesson):
    totals = [
        calculate_time_estimate(text_lesson, UserProfile(completion_rate=r)).total
        for r in (0.5, 0.8, 1.0, 1.2, 1.5, 2.0)
    ]
    assert all(a < b for a, b in zip(totals, totals[1:]))
    e = calculate_time_estimate(text_lesson, UserProfile(completion_rate=1.5))
    assert e.breakdown.reading == 1080
    assert e.total == _sum(e)

def test_personalization_disabled(text_lesson):
    profile = UserProfile(completion_rate=1.5, reading_speed=100)
    base = calculate_time_estimate(text_lesson)
    e = calculate_time_estimate(text_lesson, profile, EstimationConfig(use_personalization=False))
    assert e.is_personalized is False
    assert e.total == base.total
    assert e.confidence == base.confidence

def test_personalization_boosts_confidence(mixed_lesson):
    untitled = MixedContent(text="word " * 2400)
    base = calculate_time_estimate(untitled)
    e = calculate_time_estimate(untitled, UserProfile(learning_pace="moderate"))
    assert e.is_personalized is True
    assert base.confidence == 0.8
    assert e.confidence == pytest.approx(0.9)
    # already at the cap
    capped = calculate_time_estimate(mixed_lesson, UserProfile(learning_pace="fast"))
    assert capped.confidence == 0.95

def test_recommendations_follow_pace(text_lesson):
    fast = calculate_time_estimate(text_lesson, UserProfile(learning_pace="fast"))
    assert fast.recommendations.session_length == 35 * 60
    assert fast.recommendations.pace == "fast"
    slow = calculate_time_estimate(text_lesson, UserProfile(learning_pace="slow"))
    assert slow.recommendations.session_length == 20 * 60
    default = calculate_time_estimate(text_lesson)
    assert default.recommendations.session_length == 25 * 60
    assert default.recommendations.pace == "moderate"
    assert default.recommendations.break_frequency == 2
    assert default.recommendations.suggested_sessions == 1

def test_long_content_needs_several_sessions():
    e = calculate_time_estimate(MixedContent(text="word " * 12000))
    assert e.recommendations.suggested_sessions > 1

def test_confidence_threshold_flag(text_lesson):
    e = calculate_time_estimate(text_lesson, None, {"confidenceThreshold": 0.99})
    assert e.meets_confidence_threshold is False

def test_estimate_is_deterministic(mixed_lesson):
    profile = UserProfile(reading_speed=230, completion_rate=1.1)
    a = calculate_time_estimate(mixed_lesson, profile)
    b = calculate_time_estimate(mixed_lesson, profile)
    assert a.model_dump_json() == b.model_dump_json()

def test_update_profile_slower_than_estimated():
    p = update_user_profile(UserProfile(completion_rate=1.0), 1800, 2100, "moderate")
    assert 1.0 < p.completion_rate <= 2.0
    assert p.completion_rate == pytest.approx(0.7 + 0.3 * 2100 / 1800)

def test_update_profile_faster_than_estimated():
    p = update_user_profile(UserProfile(completion_rate=1.0), 1800, 1500, "moderate")
    assert p.completion_rate < 1.0

@pytest.mark.parametrize("start,actual", [(2.0, 1e9), (0.5, 0), (1.0, 7200 * 50), (0.5, 1)])
def test_update_profile_is_clamped(start, actual):
    p = update_user_profile(UserProfile(completion_rate=start), 1800, actual, "complex")
    assert 0.5 <= p.completion_rate <= 2.0

def test_update_profile_preserves_fields():
    original = UserProfile(reading_speed=250, learning_pace="fast", experience_level="advanced")
    p = update_user_profile(original, 1800, 2000, "moderate")
    assert p.reading_speed == 250
    assert p.learning_pace == "fast"
    assert p.experience_level == "advanced"
    assert p.completion_rate > 1.0
    assert original.completion_rate is None

def test_update_profile_ignores_unusable_samples():
    p = update_user_profile(UserProfile(completion_rate=1.3), 0, 600)
    assert p.completion_rate == 1.3
    p = update_user_profile(None, float("inf"), 600)
    assert p.completion_rate == 1.0

def test_has_personalization_data():
    assert not has_personalization_data(UserProfile())
    assert not has_personalization_data(UserProfile(experience_level="beginner"))
    assert has_personalization_data(UserProfile(reading_speed=180))

@pytest.mark.parametrize("profile", [
    {"completionRate": 2.5},
    {"learningPace": "FAST"},
    {"readingSpeed": -40},
    "fast reader",
])
def test_invalid_profile_raises_domain_error(profile):
    with pytest.raises(InvalidProfileError) as exc:
        calculate_time_estimate({"text": "word " * 300}, profile)
    assert isinstance(exc.value, EstimatorError)
    with pytest.raises(InvalidProfileError):
        update_user_profile(profile, 1800, 900)
