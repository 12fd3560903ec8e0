import pytest

from text_processing import STOP_WORDS, stem_word, tokenize


def test_tokenize_lowercases_and_keeps_order_and_duplicates():
    assert tokenize("Road TRIPS, road trips!") == ["road", "trips", "road", "trips"]


def test_tokenize_drops_stopwords_and_single_letters():
    assert tokenize("What is the range of a R1T?") == ["range"]


def test_tokenize_splits_on_non_letters():
    assert tokenize("over-the-air_update2024beta") == ["over", "air", "update", "beta"]


@pytest.mark.parametrize("text", ["", None, "!!! ... ???", "the and of", "a b c 1 2 3"])
def test_tokenize_empty_results(text):
    assert tokenize(text) == []


def test_stopwords_cover_question_words_and_pronouns():
    for word in ("what", "where", "why", "you", "your", "we", "about"):
        assert word in STOP_WORDS


@pytest.mark.parametrize("word,expected", [
    ("charging", "charg"),
    ("charger", "charg"),
    ("charged", "charg"),
    ("chargers", "charg"),
    ("singing", "sing"),
    ("bring", "bring"),        # -ing needs 7 letters
    ("location", "loca"),
    ("station", "station"),    # -tion needs 8 letters
    ("stations", "station"),
    ("kindness", "kind"),
    ("movement", "move"),
    ("payment", "payment"),    # -ment needs 8 letters
    ("riders", "rider"),       # -ers needs 7 letters
    ("faster", "fast"),
    ("quickly", "quick"),
    ("fixed", "fixed"),        # -ed needs 6 letters
    ("batteries", "batteri"),
    ("boxes", "boxe"),
    ("trips", "trip"),
    ("cars", "cars"),          # four letters or fewer are left alone
    ("gas", "gas"),
    ("battery", "battery"),
])
def test_stem_word(word, expected):
    assert stem_word(word) == expected

