"""
Lexical text analysis: word count, complexity and reading time.
"""
from __future__ import annotations
import re
from typing import Optional
from estimator.models import (
    Complexity,
    ReadingSpeedConfig,
    ReadingTimeBreakdown,
    TextAnalysis,
)
from estimator.utils import round_half_up, is_finite_number

DEFAULT_READING_CONFIG = ReadingSpeedConfig()

# Domain vocabulary that slows readers down (counted as case-insensitive substrings)
TECHNICAL_TERMS = (
    "emdr", "therapy", "therapeutic", "bilateral", "stimulation", "trauma",
    "processing", "desensitization", "reprocessing", "cognitive", "behavioral",
    "neurological", "psychological", "clinical", "assessment", "intervention",
)
_TECHNICAL_RE = [re.compile(re.escape(t), re.IGNORECASE) for t in TECHNICAL_TERMS]
_MARKUP_RE = re.compile(r"#{1,6}|```|\*\*|\*|1\.|•|-")
_SENTENCE_SPLIT_RE = re.compile(r"[.!?]+")
LONG_WORD_LEN = 7
MIN_VALID_WORDS = 5


def count_words(content: str) -> int:
    clean = re.sub(r"\s+", " ", content)
    clean = re.sub(r"[^\w\s]", " ", clean).strip()
    return len(clean.split())

def determine_complexity(content: str, word_count: int) -> Complexity:
    """
    Score content difficulty from sentence length, technical vocabulary,
    structural markup and long-word density.

    Args:
        content: Original text, formatting included.
        word_count: Pre-computed word count.

    Returns:
        "simple", "moderate" or "complex".
    """
    if word_count <= 0:
        return "simple"
    score = 0

    sentences = [s for s in _SENTENCE_SPLIT_RE.split(content) if s.strip()]
    avg_sentence = word_count / max(1, len(sentences))
    if avg_sentence > 20:
        score += 2
    elif avg_sentence > 15:
        score += 1

    technical = sum(len(rx.findall(content)) for rx in _TECHNICAL_RE)
    technical_density = technical / word_count
    if technical_density > 0.05:
        score += 2
    elif technical_density > 0.02:
        score += 1

    if _MARKUP_RE.search(content):
        score += 1

    long_words = sum(1 for w in content.split() if len(w) > LONG_WORD_LEN)
    long_density = long_words / word_count
    if long_density > 0.3:
        score += 2
    elif long_density > 0.2:
        score += 1

    if score >= 5:
        return "complex"
    if score >= 2:
        return "moderate"
    return "simple"

def _multiplier(config: ReadingSpeedConfig, complexity: Complexity) -> float:
    return getattr(config.complexity_multipliers, complexity)

def analyze_text(content: Optional[str], config: ReadingSpeedConfig = DEFAULT_READING_CONFIG) -> TextAnalysis:
    """
    Compute word count, complexity and reading time for a block of prose.

    Empty or whitespace-only input yields a zero analysis instead of an error.

    Args:
        content: Raw text, markup allowed.
        config: Reading speeds and complexity multipliers.

    Returns:
        TextAnalysis
    """
    content = content if isinstance(content, str) else ""
    word_count = count_words(content)
    character_count = len(content)
    complexity = determine_complexity(content, word_count)

    base_wpm = config.words_per_minute.average
    adjusted_wpm = base_wpm * _multiplier(config, complexity)

    base_minutes = word_count / base_wpm
    adjusted_minutes = word_count / adjusted_wpm
    reading_time = round_half_up(adjusted_minutes * 60)

    return TextAnalysis(
        word_count=word_count,
        character_count=character_count,
        complexity=complexity,
        estimated_reading_time=reading_time,
        reading_time_breakdown=ReadingTimeBreakdown(
            base_time=round_half_up(base_minutes * 60),
            complexity_adjustment=round_half_up((adjusted_minutes - base_minutes) * 60),
            total_time=reading_time,
        ),
    )

def get_personalized_reading_time(
    analysis: TextAnalysis,
    reading_speed: Optional[float] = None,
    config: ReadingSpeedConfig = DEFAULT_READING_CONFIG,
) -> int:
    """
    Reading time in seconds at the learner's own speed, keeping the complexity multiplier.
    """
    if not is_finite_number(reading_speed) or reading_speed <= 0:
        return analysis.estimated_reading_time
    adjusted = reading_speed * _multiplier(config, analysis.complexity)
    return round_half_up(analysis.word_count / adjusted * 60)

def is_valid_text_content(content) -> bool:
    if not isinstance(content, str) or not content.strip():
        return False
    return len(content.split()) >= MIN_VALID_WORDS
