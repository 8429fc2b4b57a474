from estimator.text import (
    analyze_text,
    count_words,
    determine_complexity,
    get_personalized_reading_time,
    is_valid_text_content,
)

COMPLEX_TEXT = (
    "## Bilateral stimulation "
    + "therapeutic desensitization reprocessing neurological intervention psychological assessment " * 5
    + "."
)


def test_ten_word_sentence_is_simple():
    a = analyze_text("This is a simple test with exactly ten words here.")
    assert a.word_count == 10
    assert a.complexity == "simple"
    assert a.reading_time_breakdown.total_time == a.estimated_reading_time

def test_empty_and_whitespace_text():
    for text in ("", "   \n\t  ", None):
        a = analyze_text(text)
        assert a.word_count == 0
        assert a.estimated_reading_time == 0
        assert a.complexity == "simple"

def test_punctuation_is_not_counted():
    assert count_words("Hello,   world! -- it's  here...") == 5
    assert analyze_text("!!! ??? ...").word_count == 0

def test_long_sentences_are_moderate():
    # one 240-word sentence scores +2
    a = analyze_text("word " * 240)
    assert a.complexity == "moderate"
    assert a.estimated_reading_time == 72
    assert a.reading_time_breakdown.base_time == 72
    assert a.reading_time_breakdown.complexity_adjustment == 0

def test_technical_dense_text_is_complex():
    a = analyze_text(COMPLEX_TEXT)
    assert a.complexity == "complex"
    # complex content is read at 0.8x the average speed
    assert a.estimated_reading_time > a.reading_time_breakdown.base_time
    assert a.reading_time_breakdown.complexity_adjustment > 0

def test_determine_complexity_zero_words():
    assert determine_complexity("", 0) == "simple"

def test_more_words_more_time():
    short = analyze_text("word " * 240)
    longer = analyze_text("word " * 480)
    assert short.complexity == longer.complexity
    assert longer.estimated_reading_time > short.estimated_reading_time
    assert longer.estimated_reading_time == 144

def test_personalized_reading_time():
    a = analyze_text("word " * 240)
    assert get_personalized_reading_time(a, 100) == 144
    assert get_personalized_reading_time(a, 400) == 36
    # no usable speed -> default estimate
    assert get_personalized_reading_time(a) == a.estimated_reading_time
    assert get_personalized_reading_time(a, 0) == a.estimated_reading_time
    assert get_personalized_reading_time(a, float("nan")) == a.estimated_reading_time

def test_is_valid_text_content():
    assert is_valid_text_content("one two three four five")
    assert not is_valid_text_content("one two three four")
    assert not is_valid_text_content("   ")
    assert not is_valid_text_content(None)
