import pytest

from svetse.tokens import is_word_char, make_words


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("Hello world", ["HELLO", " ", "WORLD", "."]),
        ("Hello, world!", ["HELLO", ", ", "WORLD", "!"]),
        ("don't stop", ["DON'T", " ", "STOP", "."]),
        ("hello 🎉 world", ["HELLO", " 🎉 ", "WORLD", "."]),
        ("café résumé", ["CAFÉ", " ", "RÉSUMÉ", "."]),
        ("abc123 def", ["ABC", "123", " ", "DEF", "."]),
        ("", []),
        ("hello world?", ["HELLO", " ", "WORLD", "?"]),
        ("hello 你好 world", ["HELLO", " ", "你好", " ", "WORLD", "."]),
    ],
    ids=[
        "simple sentence",
        "with punctuation",
        "apostrophe stays in word",
        "emoji as token",
        "unicode letters",
        "mixed digits and letters",
        "empty string",
        "trailing punctuation preserved",
        "CJK characters",
    ],
)
def test_make_words(text, expected):
    assert make_words(text) == expected


def test_trailing_separator_replaced_with_period():
    assert make_words("hello world,") == ["HELLO", " ", "WORLD", "."]


def test_apostrophe_not_followed_by_letter_is_separator():
    assert make_words("dogs' bone") == ["DOGS", "' ", "BONE", "."]


def test_tokens_alternate_between_words_and_separators():
    tokens = make_words("The cat, the dog; and 42 birds!")
    kinds = [is_word_char(token[0]) for token in tokens]
    assert all(a != b for a, b in zip(kinds, kinds[1:]))
    assert "".join(tokens) == "THE CAT, THE DOG; AND 42 BIRDS!"


@pytest.mark.parametrize(
    ("char", "expected"),
    [("a", True), ("Z", True), ("7", True), ("é", True), ("你", True),
     ("'", False), (" ", False), (".", False), ("🎉", False)],
)
def test_is_word_char(char, expected):
    assert is_word_char(char) is expected