"""Reply generation: keyword extraction, random walks and candidate scoring."""

from __future__ import annotations

import math
import random
import time
from collections.abc import Container, Mapping, Sequence
from dataclasses import dataclass
from typing import Optional

from .model import Model, Node, find_symbol
from .tokens import is_word_char, make_words

FALLBACK_REPLY = "I don't know enough to answer you yet!"
_MAX_STEPS = 1024
_SENTENCE_END = ".!?"


@dataclass(frozen=True)
class GenerationConfig:
    """Knobs for reply generation; ``reply_timeout`` is in seconds."""

    temperature: float = 1.0
    surprise_bias: float = 1.0
    reply_timeout: float = 2.0


def make_keywords(
    model: Model,
    tokens: Sequence[str],
    ban: Container[str],
    aux: Container[str],
    swaps: Mapping[str, str],
) -> list[str]:
    """Pick the interesting words of *tokens* to steer a reply.

    Swaps are applied first; unknown, banned, repeated and non-word tokens
    are dropped. Auxiliary words are appended only when at least one
    primary keyword was found.
    """
    seen: set[str] = set()
    primary: list[str] = []
    secondary: list[str] = []
    for token in tokens:
        word = token.upper()
        word = swaps.get(word, word)
        if model.find_word(word) == 0:
            continue
        if not is_word_char(word[0]):
            continue
        if word in ban or word in seen:
            continue
        seen.add(word)
        (secondary if word in aux else primary).append(word)
    return primary + secondary if primary else primary


def seed(model: Model, keys: Sequence[str], aux: Container[str]) -> int:
    """Return the first known non-auxiliary keyword, else a random first word."""
    for key in keys:
        if key in aux:
            continue
        symbol = model.find_word(key)
        if symbol != 0:
            return symbol
    if not model.forward.children:
        return 0
    return random.choice(model.forward.children).symbol


def _deepest_context(model: Model) -> Optional[Node]:
    for node in reversed(model.context):
        if node is not None and node.children:
            return node
    return None


def babble(
    model: Model,
    keys: Sequence[str],
    reply_words: Sequence[str],
    aux: Container[str],
    used_key: bool,
    temperature: float,
) -> tuple[int, bool]:
    """Choose the next symbol from the deepest context that has children.

    Returns the symbol and the updated "keyword used" flag. An unused
    keyword met while walking the children is taken at once.
    """
    node = _deepest_context(model)
    if node is None or node.usage == 0:
        return 0, used_key

    in_reply = set(reply_words)
    key_set = set(keys)
    children = node.children
    count = len(children)
    start = random.randrange(count)
    exponent = 1.0 / temperature

    threshold = random.random() * sum(child.count**exponent for child in children)
    rotated = children[start:] + children[:start]
    for child in rotated:
        word = model.dictionary[child.symbol] if child.symbol < len(model.dictionary) else ""
        if not used_key and word in key_set and word not in in_reply and word not in aux:
            return child.symbol, True
        threshold -= child.count**exponent
        if threshold < 0:
            return child.symbol, used_key
    return rotated[-1].symbol, used_key


def _walk(
    model: Model,
    keys: Sequence[str],
    reply: list[str],
    aux: Container[str],
    temperature: float,
    prepend: bool,
) -> None:
    used_key = False
    for _ in range(_MAX_STEPS):
        symbol, used_key = babble(model, keys, reply, aux, used_key, temperature)
        if symbol == 0 or symbol >= len(model.dictionary):
            break
        word = model.dictionary[symbol]
        if prepend:
            reply.insert(0, word)
        else:
            reply.append(word)
        model.update_context(symbol)


def reply_once(
    model: Model, keys: Sequence[str], aux: Container[str], temperature: float
) -> list[str]:
    """Generate one candidate reply as a list of tokens (empty if no seed)."""
    start = seed(model, keys, aux)
    if start == 0:
        return []

    model.initialize_context()
    model.context[0] = model.forward
    model.update_context(start)
    reply = [model.dictionary[start]]
    _walk(model, keys, reply, aux, temperature, prepend=False)

    model.initialize_context()
    model.context[0] = model.backward
    for word in reply[: model.order]:
        symbol = model.find_word(word)
        if symbol == 0:
            break
        model.update_context(symbol)
    _walk(model, keys, reply, aux, temperature, prepend=True)
    return reply


def _surprise(model: Model, root: Node, words: Sequence[str], key_set: set[str]) -> float:
    entropy = 0.0
    model.initialize_context()
    model.context[0] = root
    for word in words:
        symbol = model.find_word(word)
        if symbol != 0:
            model.update_context(symbol)
        if word not in key_set:
            continue
        probability = 0.0
        levels = 0
        for context in model.context[1 : model.order + 2]:
            if context is None:
                continue
            child = find_symbol(context, symbol)
            if child is None or context.usage == 0:
                continue
            probability += child.count / context.usage
            levels += 1
        if levels > 0 and probability > 0:
            entropy -= math.log(probability / levels)
    return entropy


def evaluate_reply(
    model: Model, keys: Sequence[str], words: Sequence[str], surprise_bias: float
) -> float:
    """Score *words* by how surprising its keywords are in both directions."""
    if not keys or not words:
        return 0.0
    key_set = set(keys)
    entropy = _surprise(model, model.forward, words, key_set)
    entropy += _surprise(model, model.backward, list(reversed(words)), key_set)

    num = len(words)
    if num >= 8:
        entropy /= math.sqrt(num - 1)
    if num >= 16:
        entropy /= num
    return math.pow(abs(entropy), surprise_bias)


def _upper_char(char: str) -> str:
    upper = char.upper()
    return upper if len(upper) == 1 else char


def make_output(words: Sequence[str]) -> str:
    """Join tokens into text, lower-cased with sentence capitalisation.

    A space is inserted between two adjacent word tokens.
    """
    if not words:
        return ""
    parts: list[str] = []
    previous = ""
    for word in words:
        if parts and word and previous and is_word_char(previous[-1]) and is_word_char(word[0]):
            parts.append(" ")
        parts.append(word)
        previous = word
    text = "".join(parts).lower()

    chars: list[str] = []
    caps_next = True
    for char in text:
        if caps_next and char.isalpha():
            char = _upper_char(char)
            caps_next = False
        if char in _SENTENCE_END:
            caps_next = True
        chars.append(char)
    return "".join(chars)


def generate_reply(
    model: Model,
    text: str,
    ban: Container[str],
    aux: Container[str],
    swaps: Mapping[str, str],
    config: GenerationConfig,
) -> str:
    """Generate candidates until the timeout and return the best-scoring one."""
    keys = make_keywords(model, make_words(text), ban, aux, swaps)
    if not model.forward.children:
        return FALLBACK_REPLY

    deadline = time.monotonic() + config.reply_timeout
    best_words: Optional[list[str]] = None
    best_score = -1.0
    last_words: Optional[list[str]] = None

    while time.monotonic() < deadline:
        candidate = reply_once(model, keys, aux, config.temperature)
        if not candidate:
            continue
        if last_words is not None and last_words == candidate:
            continue
        last_words = candidate
        score = evaluate_reply(model, keys, candidate, config.surprise_bias)
        if best_words is None or score > best_score:
            best_score = score
            best_words = candidate

    if not best_words:
        return FALLBACK_REPLY
    return make_output(best_words)