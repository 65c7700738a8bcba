"""Splitting of input text into alternating word and separator tokens."""

from __future__ import annotations

_SENTENCE_END = ".!?"


def is_word_char(char: str) -> bool:
    """Return True if *char* is a letter or a decimal digit."""
    return char.isalpha() or char.isdecimal()


def _continues_word(text: str, i: int, is_letter_run: bool) -> bool:
    char = text[i]
    if char.isalpha():
        return is_letter_run
    if char.isdecimal():
        return not is_letter_run
    if char == "'" and i < len(text) - 1:
        return is_letter_run and text[i + 1].isalpha()
    return False


def make_words(text: str) -> list[str]:
    """Split *text* into upper-cased word and separator tokens.

    Words are runs of letters (with apostrophes between letters) or runs
    of digits; everything else forms separators. The result always ends
    with sentence punctuation: "." is appended after a trailing word, and
    a trailing separator not ending in ".", "!" or "?" becomes ".".
    """
    text = text.upper()
    tokens: list[str] = []
    i = 0
    while i < len(text):
        start = i
        if is_word_char(text[i]):
            is_letter_run = text[i].isalpha()
            i += 1
            while i < len(text) and _continues_word(text, i, is_letter_run):
                i += 1
        else:
            while i < len(text) and not is_word_char(text[i]):
                i += 1
        tokens.append(text[start:i])

    if not tokens:
        return []

    last = tokens[-1]
    if is_word_char(last[0]):
        tokens.append(".")
    elif last[-1] not in _SENTENCE_END:
        tokens[-1] = "."
    return tokens